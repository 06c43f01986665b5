from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.schemas.item_return import (
    ReturnCreate, QuickReturn, ReturnInspect, ReturnReject, PenaltyRequest, ReturnResponse, ReturnStats,
)
from proptrack.schemas.pagination import Page
from proptrack.routers.auth import require_session_manager, require_session_user
import proptrack.services.return_service as svc

router = APIRouter(prefix="/api/returns", tags=["returns"])


@router.get("", response_model=Page[ReturnResponse])
def list_returns(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    status: str | None = Query(None),
    user_id: int | None = Query(None),
    damaged: bool | None = Query(None),
    late: bool | None = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.get_returns(db, page=page, size=size, status=status, user_id=user_id, damaged=damaged, late=late)


@router.post("", response_model=ReturnResponse, status_code=201)
def create_return(data: ReturnCreate, db: Session = Depends(get_db),
                  user_id: int = Depends(require_session_manager)):
    return svc.create_return(db, data, user_id)


@router.post("/quick/{assignment_id}", response_model=ReturnResponse, status_code=201)
def quick_return(assignment_id: int, data: QuickReturn, db: Session = Depends(get_db),
                 user_id: int = Depends(require_session_manager)):
    return svc.quick_return(db, assignment_id, data, user_id)


@router.get("/pending-inspection", response_model=list[ReturnResponse])
def pending_inspections(db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_pending_inspections(db)


@router.get("/damaged", response_model=list[ReturnResponse])
def damaged_returns(db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_damaged_returns(db)


@router.get("/late", response_model=list[ReturnResponse])
def late_returns(db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_late_returns(db)


@router.get("/stats", response_model=ReturnStats)
def return_stats(db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_statistics(db)


@router.get("/{return_id}", response_model=ReturnResponse)
def get_return(return_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_return(db, return_id)


@router.post("/{return_id}/inspect", response_model=ReturnResponse)
def inspect_return(return_id: int, data: ReturnInspect, db: Session = Depends(get_db),
                   user_id: int = Depends(require_session_manager)):
    return svc.inspect_return(db, return_id, data, user_id)


@router.post("/{return_id}/approve", response_model=ReturnResponse)
def approve_return(return_id: int, db: Session = Depends(get_db),
                   user_id: int = Depends(require_session_manager)):
    return svc.approve_return(db, return_id, user_id)


@router.post("/{return_id}/reject", response_model=ReturnResponse)
def reject_return(return_id: int, data: ReturnReject, db: Session = Depends(get_db),
                  user_id: int = Depends(require_session_manager)):
    return svc.reject_return(db, return_id, data.reason, user_id)


@router.post("/{return_id}/penalty", response_model=ReturnResponse)
def calculate_penalty(return_id: int, data: PenaltyRequest, db: Session = Depends(get_db),
                      _=Depends(require_session_manager)):
    return svc.calculate_penalty(db, return_id, data.per_day)


@router.post("/{return_id}/penalty/paid", response_model=ReturnResponse)
def mark_penalty_paid(return_id: int, db: Session = Depends(get_db),
                      user_id: int = Depends(require_session_manager)):
    return svc.mark_penalty_paid(db, return_id, user_id)
