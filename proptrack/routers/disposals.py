from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.schemas.disposal import DisposalDecision, DisposalExecute, DisposalResponse
from proptrack.schemas.pagination import Page
from proptrack.routers.auth import require_session_manager, require_session_user
import proptrack.services.disposal_service as svc

router = APIRouter(prefix="/api/disposals", tags=["disposals"])


@router.get("", response_model=Page[DisposalResponse])
def list_disposals(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    year: int | None = Query(None, description="Filter by request year"),
    reason: str | None = Query(None, description="Filter by reason (liquidation, sale, ...)"),
    status: str | None = Query(None, description="Filter by status (pending, approved, ...)"),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.get_disposals(db, page=page, size=size, year=year, reason=reason, status=status)


@router.get("/{disposal_id}", response_model=DisposalResponse)
def get_disposal(disposal_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_disposal(db, disposal_id)


@router.post("/{disposal_id}/approve", response_model=DisposalResponse)
def approve_disposal(disposal_id: int, data: DisposalDecision | None = None, db: Session = Depends(get_db),
                     user_id: int = Depends(require_session_manager)):
    return svc.approve_disposal(db, disposal_id, data, user_id)


@router.post("/{disposal_id}/reject", response_model=DisposalResponse)
def reject_disposal(disposal_id: int, data: DisposalDecision | None = None, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.reject_disposal(db, disposal_id, data, user_id)


@router.post("/{disposal_id}/execute", response_model=DisposalResponse)
def execute_disposal(disposal_id: int, data: DisposalExecute | None = None, db: Session = Depends(get_db),
                     user_id: int = Depends(require_session_manager)):
    return svc.execute_disposal(db, disposal_id, data, user_id)
