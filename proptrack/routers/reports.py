from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from proptrack.database import get_db
from proptrack.schemas.activity import ActivityResponse
from proptrack.schemas.pagination import Page
from proptrack.schemas.report import ReportInfo, ReportResult
from proptrack.routers.auth import require_session_manager, require_session_user
import proptrack.services.activity_service as activity_svc
import proptrack.services.report_service as svc

router = APIRouter(prefix="/api", tags=["reports"])

# query parameters that are not report filters
_RESERVED = {"format"}


def _filters(request: Request) -> dict:
    return {k: v for k, v in request.query_params.items() if k not in _RESERVED and v != ""}


@router.get("/reports", response_model=list[ReportInfo])
def list_reports(_=Depends(require_session_user)):
    return svc.available_reports()


@router.get("/reports/formats", response_model=list[str])
def list_formats(_=Depends(require_session_user)):
    return svc.available_formats()


@router.get("/reports/{report_type}/filters")
def report_filters(report_type: str, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.report_filters(db, report_type)


@router.get("/reports/{report_type}", response_model=ReportResult)
def generate_report(report_type: str, request: Request, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.generate(db, report_type, _filters(request), user_id)


@router.get("/reports/{report_type}/export")
def export_report(report_type: str, request: Request, format: str = Query("excel"),
                  db: Session = Depends(get_db), user_id: int = Depends(require_session_manager)):
    artifact = svc.export(db, report_type, format, _filters(request), user_id)
    return Response(
        content=artifact.content,
        media_type=artifact.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get("/activity", response_model=Page[ActivityResponse])
def list_activity(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    subject_type: str | None = Query(None),
    subject_id: int | None = Query(None),
    event: str | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_session_manager),
):
    return activity_svc.get_activity(db, page=page, size=size, subject_type=subject_type,
                                     subject_id=subject_id, event=event, date_from=date_from, date_to=date_to)
