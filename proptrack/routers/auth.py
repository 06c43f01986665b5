import logging
import time
from collections import defaultdict

from fastapi import APIRouter, Depends, HTTPException, Request, Form
from sqlalchemy.orm import Session

from proptrack.database import get_db
from proptrack.models.user import User, UserRole
from proptrack.schemas.user import UserResponse
from proptrack.services.user_service import verify_password, get_user_by_username

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

MANAGER_ROLES = {UserRole.manager.value, UserRole.admin.value}

# ── Rate limiting (in-memory, per IP) ──────────────────────────────────────
_login_attempts: dict[str, list[float]] = defaultdict(list)
_RATE_LIMIT_WINDOW = 60   # seconds
_RATE_LIMIT_MAX = 10      # max attempts per window


def _check_rate_limit(ip: str) -> bool:
    now = time.time()
    _login_attempts[ip] = [t for t in _login_attempts[ip] if now - t < _RATE_LIMIT_WINDOW]
    if len(_login_attempts[ip]) >= _RATE_LIMIT_MAX:
        return False
    _login_attempts[ip].append(now)
    return True


def _reset_rate_limit(ip: str) -> None:
    """Clear failed attempts after successful login."""
    _login_attempts.pop(ip, None)


def require_session_user(request: Request) -> int:
    """Any authenticated user; returns the session user id."""
    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(status_code=401, detail="Login required")
    return user_id


def require_session_manager(request: Request) -> int:
    """Manager or admin; guards API mutation routes."""
    user_id = require_session_user(request)
    if request.session.get("role", "") not in MANAGER_ROLES:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return user_id


def require_session_admin(request: Request) -> int:
    user_id = require_session_user(request)
    if request.session.get("role") != UserRole.admin.value:
        raise HTTPException(status_code=403, detail="Administrators only")
    return user_id


@router.post("/login", response_model=UserResponse)
def login(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    ip = request.client.host if request.client else "unknown"
    if not _check_rate_limit(ip):
        raise HTTPException(status_code=429, detail="Too many login attempts, try again later")
    user = get_user_by_username(db, username)
    if not user or not verify_password(password, user.hashed_password):
        logger.warning("AUDIT: failed login for '%s' from %s", username, ip)
        raise HTTPException(status_code=401, detail="Invalid username or password")
    if not user.is_active:
        logger.warning("AUDIT: login attempt on deactivated account '%s' from %s", username, ip)
        raise HTTPException(status_code=403, detail="Account is deactivated")
    _reset_rate_limit(ip)
    logger.info("AUDIT: login '%s' (role=%s) from %s", username, user.role, ip)
    request.session["user_id"] = user.id
    request.session["username"] = user.username
    request.session["role"] = user.role
    return user


@router.post("/logout", status_code=204)
def logout(request: Request):
    request.session.clear()


@router.get("/me", response_model=UserResponse)
def me(request: Request, user_id: int = Depends(require_session_user), db: Session = Depends(get_db)):
    user = db.get(User, user_id)
    if not user or not user.is_active:
        request.session.clear()
        raise HTTPException(status_code=401, detail="Login required")
    return user
