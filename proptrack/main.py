from fastapi import FastAPI, Request
from fastapi.responses import Response, JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
import logging
import os

from proptrack.database import engine, SessionLocal
from proptrack.database import Base
import proptrack.models  # noqa: F401  register all models
from proptrack.config import settings
from proptrack.exceptions import InvalidStatus, WorkflowError, UnknownReport, UnknownFormat
from proptrack.services.user_service import ensure_admin
from proptrack.routers import (
    health, auth, users, categories, items, locations, assignments, returns, maintenances, disposals,
    requests, reports, dashboard,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    # Tables are created on startup; there are no migrations
    if settings.DATABASE_URL.startswith("sqlite:///./"):
        os.makedirs(os.path.dirname(settings.DATABASE_URL.removeprefix("sqlite:///")), exist_ok=True)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if ensure_admin(db, settings.FIRST_ADMIN_USER, settings.FIRST_ADMIN_PASS):
            logger.info("Created first admin user: %s", settings.FIRST_ADMIN_USER)
    finally:
        db.close()

    yield


app = FastAPI(
    title="PropTrack",
    description="Property and asset management back office",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    https_only=settings.is_production,
    same_site="lax",
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


app.add_middleware(SecurityHeadersMiddleware)


# --- Domain error mapping ---
@app.exception_handler(UnknownReport)
async def unknown_report_handler(request: Request, exc: UnknownReport):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(UnknownFormat)
async def unknown_format_handler(request: Request, exc: UnknownFormat):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(InvalidStatus)
async def invalid_status_handler(request: Request, exc: InvalidStatus):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(categories.router)
app.include_router(items.router)
app.include_router(locations.router)
app.include_router(assignments.router)
app.include_router(returns.router)
app.include_router(maintenances.router)
app.include_router(disposals.router)
app.include_router(requests.router)
app.include_router(reports.router)
app.include_router(dashboard.router)
