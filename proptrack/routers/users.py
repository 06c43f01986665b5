from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.schemas.user import UserCreate, UserUpdate, UserResponse
from proptrack.schemas.assignment import AssignmentStats
from proptrack.schemas.pagination import Page
from proptrack.routers.auth import require_session_admin, require_session_user
import proptrack.services.user_service as svc
import proptrack.services.assignment_service as assignment_svc

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=Page[UserResponse])
def list_users(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    role: str | None = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_session_admin),
):
    return svc.get_users(db, page=page, size=size, role=role)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(data: UserCreate, db: Session = Depends(get_db), _=Depends(require_session_admin)):
    return svc.create_user(db, data)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db), _=Depends(require_session_admin)):
    return svc.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: int, data: UserUpdate, db: Session = Depends(get_db), _=Depends(require_session_admin)):
    return svc.update_user(db, user_id, data)


@router.get("/{user_id}/assignment-stats", response_model=AssignmentStats)
def assignment_stats(user_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    svc.get_user(db, user_id)
    return assignment_svc.get_user_stats(db, user_id)
