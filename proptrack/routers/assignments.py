from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.schemas.assignment import (
    AssignmentCreate, AssignmentUpdate, ReturnRequest, AssignmentResponse, AssignmentSummary,
)
from proptrack.schemas.item_return import QuickReturn
from proptrack.schemas.pagination import Page
from proptrack.routers.auth import require_session_manager, require_session_user
import proptrack.services.assignment_service as svc
import proptrack.services.return_service as return_service

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


@router.get("", response_model=Page[AssignmentResponse])
def list_assignments(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    status: str | None = Query(None),
    user_id: int | None = Query(None),
    item_id: int | None = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.get_assignments(db, page=page, size=size, status=status, user_id=user_id, item_id=item_id)


@router.post("", response_model=AssignmentResponse, status_code=201)
def create_assignment(data: AssignmentCreate, db: Session = Depends(get_db),
                      user_id: int = Depends(require_session_manager)):
    return svc.create_assignment(db, data, user_id)


@router.get("/overdue", response_model=list[AssignmentResponse])
def overdue_assignments(db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_overdue_assignments(db)


@router.get("/summary", response_model=AssignmentSummary)
def assignment_summary(db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_summary(db)


@router.get("/{assignment_id}", response_model=AssignmentResponse)
def get_assignment(assignment_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_assignment(db, assignment_id)


@router.put("/{assignment_id}", response_model=AssignmentResponse)
def update_assignment(assignment_id: int, data: AssignmentUpdate, db: Session = Depends(get_db),
                      user_id: int = Depends(require_session_manager)):
    return svc.update_assignment(db, assignment_id, data, user_id)


@router.post("/{assignment_id}/approve", response_model=AssignmentResponse)
def approve_assignment(assignment_id: int, db: Session = Depends(get_db),
                       user_id: int = Depends(require_session_manager)):
    return svc.approve_assignment(db, assignment_id, user_id)


@router.post("/{assignment_id}/activate", response_model=AssignmentResponse)
def activate_assignment(assignment_id: int, db: Session = Depends(get_db),
                        user_id: int = Depends(require_session_manager)):
    return svc.activate_assignment(db, assignment_id, user_id)


@router.post("/{assignment_id}/cancel", response_model=AssignmentResponse)
def cancel_assignment(assignment_id: int, db: Session = Depends(get_db),
                      user_id: int = Depends(require_session_manager)):
    return svc.cancel_assignment(db, assignment_id, user_id)


@router.post("/{assignment_id}/return", response_model=AssignmentResponse)
def return_assignment(assignment_id: int, data: ReturnRequest, db: Session = Depends(get_db),
                      user_id: int = Depends(require_session_manager)):
    item_return = return_service.quick_return(
        db,
        assignment_id,
        QuickReturn(condition=data.condition_on_return, return_date=data.returned_date, notes=data.notes),
        user_id,
    )
    return item_return.assignment


@router.delete("/{assignment_id}", status_code=204)
def delete_assignment(assignment_id: int, hard: bool = Query(False), db: Session = Depends(get_db),
                      user_id: int = Depends(require_session_manager)):
    svc.delete_assignment(db, assignment_id, hard=hard, user_id=user_id)
