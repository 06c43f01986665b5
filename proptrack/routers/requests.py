from datetime import datetime
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.schemas.service_request import (
    RequestCreate, RequestUpdate, RequestApprove, RequestReject, RequestChanges, RequestCancel,
    CommentCreate, CommentResponse, RequestResponse, RequestDetail, RequestStats,
)
from proptrack.schemas.pagination import Page
from proptrack.routers.auth import MANAGER_ROLES, require_session_manager, require_session_user
import proptrack.services.request_service as svc
from proptrack.services import request_state_machine

router = APIRouter(prefix="/api/requests", tags=["requests"])


def is_manager(http_request: Request) -> bool:
    return http_request.session.get("role", "") in MANAGER_ROLES


@router.get("", response_model=Page[RequestResponse])
def list_requests(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    status: str | None = Query(None),
    type: str | None = Query(None),
    priority: str | None = Query(None),
    user_id: int | None = Query(None),
    reviewed_by: int | None = Query(None),
    search: str = Query(""),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    db: Session = Depends(get_db),
    session_user: int = Depends(require_session_user),
    manager: bool = Depends(is_manager),
):
    # plain users only ever see their own requests
    if not manager:
        user_id = session_user
    return svc.get_requests(db, page=page, size=size, status=status, type=type, priority=priority,
                            user_id=user_id, reviewed_by=reviewed_by, search=search,
                            date_from=date_from, date_to=date_to)


@router.post("", response_model=RequestResponse, status_code=201)
def create_request(data: RequestCreate, db: Session = Depends(get_db),
                   user_id: int = Depends(require_session_user)):
    return svc.create_request(db, data, user_id)


@router.get("/awaiting-review", response_model=list[RequestResponse])
def awaiting_review(db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.get_awaiting_review(db)


@router.get("/high-priority", response_model=list[RequestResponse])
def high_priority(db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.get_high_priority(db)


@router.get("/stats", response_model=RequestStats)
def request_stats(db: Session = Depends(get_db), user_id: int = Depends(require_session_user),
                  manager: bool = Depends(is_manager)):
    return svc.get_statistics(db, None if manager else user_id)


@router.get("/{request_id}", response_model=RequestDetail)
def get_request(request_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_session_user),
                manager: bool = Depends(is_manager)):
    request = svc.get_request(db, request_id)
    svc.ensure_can_manage(request, user_id, manager)
    detail = RequestDetail.model_validate(request)
    detail.comments = [CommentResponse.model_validate(c) for c in svc.get_comments(db, request, manager)]
    detail.next_states = request_state_machine.next_states(request.status)
    return detail


@router.put("/{request_id}", response_model=RequestResponse)
def update_request(request_id: int, data: RequestUpdate, db: Session = Depends(get_db),
                   user_id: int = Depends(require_session_user), manager: bool = Depends(is_manager)):
    return svc.update_request(db, request_id, data, user_id, manager)


@router.post("/{request_id}/review", response_model=RequestResponse)
def submit_for_review(request_id: int, db: Session = Depends(get_db),
                      user_id: int = Depends(require_session_manager)):
    return svc.submit_for_review(db, request_id, user_id)


@router.post("/{request_id}/approve", response_model=RequestResponse)
def approve_request(request_id: int, data: RequestApprove, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.approve_request(db, request_id, user_id, data.review_notes, data.auto_execute)


@router.post("/{request_id}/reject", response_model=RequestResponse)
def reject_request(request_id: int, data: RequestReject, db: Session = Depends(get_db),
                   user_id: int = Depends(require_session_manager)):
    return svc.reject_request(db, request_id, user_id, data.reason)


@router.post("/{request_id}/request-changes", response_model=RequestResponse)
def request_changes(request_id: int, data: RequestChanges, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.request_changes(db, request_id, user_id, data.notes)


@router.post("/{request_id}/resubmit", response_model=RequestResponse)
def resubmit_request(request_id: int, db: Session = Depends(get_db),
                     user_id: int = Depends(require_session_user), manager: bool = Depends(is_manager)):
    return svc.resubmit_request(db, request_id, user_id, manager)


@router.post("/{request_id}/execute", response_model=RequestResponse)
def execute_request(request_id: int, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.execute_request(db, request_id, user_id)


@router.post("/{request_id}/cancel", response_model=RequestResponse)
def cancel_request(request_id: int, data: RequestCancel, db: Session = Depends(get_db),
                   user_id: int = Depends(require_session_user), manager: bool = Depends(is_manager)):
    return svc.cancel_request(db, request_id, user_id, manager, data.reason)


@router.post("/{request_id}/comments", response_model=CommentResponse, status_code=201)
def add_comment(request_id: int, data: CommentCreate, db: Session = Depends(get_db),
                user_id: int = Depends(require_session_user), manager: bool = Depends(is_manager)):
    return svc.add_comment(db, request_id, data, user_id, manager)


@router.delete("/{request_id}", status_code=204)
def delete_request(request_id: int, db: Session = Depends(get_db),
                   user_id: int = Depends(require_session_manager)):
    svc.delete_request(db, request_id, user_id)
