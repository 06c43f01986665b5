"""User requests to the property office and their review workflow.

Every status change goes through ``request_state_machine.transition`` so a
request can never skip a step the transition table does not allow.
Executing an approved assignment request creates the assignment itself.
"""
import logging
from datetime import datetime, timezone, timedelta
from sqlalchemy.orm import Session
from sqlalchemy import select, func, or_
from fastapi import HTTPException

from proptrack.config import settings
from proptrack.exceptions import RequestError, ItemNotAvailable
from proptrack.models.assignment import AssignmentStatus
from proptrack.models.item import Item
from proptrack.models.service_request import (
    ServiceRequest, RequestComment, RequestType, RequestStatus, RequestPriority,
)
from proptrack.schemas.assignment import AssignmentCreate
from proptrack.schemas.service_request import RequestCreate, RequestUpdate, CommentCreate, RequestStats
from proptrack.schemas.pagination import Page, paginate
from proptrack.services import assignment_service, request_state_machine
from proptrack.services.activity_service import log_activity

logger = logging.getLogger(__name__)

_URGENT = (RequestPriority.high, RequestPriority.urgent)


def _live():
    return select(ServiceRequest).where(ServiceRequest.deleted_at.is_(None))


def get_requests(
    db: Session,
    page: int = 1,
    size: int = 50,
    status: str | None = None,
    type: str | None = None,
    priority: str | None = None,
    user_id: int | None = None,
    reviewed_by: int | None = None,
    search: str = "",
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> Page:
    query = _live()
    if status:
        query = query.where(ServiceRequest.status == status)
    if type:
        query = query.where(ServiceRequest.type == type)
    if priority:
        query = query.where(ServiceRequest.priority == priority)
    if user_id is not None:
        query = query.where(ServiceRequest.user_id == user_id)
    if reviewed_by is not None:
        query = query.where(ServiceRequest.reviewed_by == reviewed_by)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(ServiceRequest.title.ilike(pattern), ServiceRequest.description.ilike(pattern)))
    if date_from:
        query = query.where(ServiceRequest.created_at >= date_from)
    if date_to:
        query = query.where(ServiceRequest.created_at <= date_to)
    query = query.order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc())
    return paginate(db, query, page, size)


def get_awaiting_review(db: Session) -> list[ServiceRequest]:
    return db.scalars(
        _live()
        .where(ServiceRequest.status.in_(request_state_machine.AWAITING_REVIEW))
        .order_by(ServiceRequest.created_at, ServiceRequest.id)
    ).all()


def get_high_priority(db: Session) -> list[ServiceRequest]:
    return [r for r in get_awaiting_review(db) if RequestPriority(r.priority) in _URGENT]


def get_request(db: Session, request_id: int) -> ServiceRequest:
    request = db.get(ServiceRequest, request_id)
    if not request or request.deleted_at is not None:
        raise HTTPException(status_code=404, detail="Request not found")
    return request


def ensure_can_manage(request: ServiceRequest, user_id: int, is_manager: bool) -> None:
    """Requesters may act on their own requests; managers on any."""
    if not is_manager and request.user_id != user_id:
        raise HTTPException(status_code=403, detail="Not your request")


def _check_item(db: Session, item_id: int | None) -> None:
    if item_id is None:
        return
    item = db.get(Item, item_id)
    if not item or not item.is_active:
        raise HTTPException(status_code=404, detail="Item not found")


def _move(db: Session, request: ServiceRequest, new: RequestStatus, user_id: int | None) -> None:
    previous = RequestStatus(request.status).value
    request_state_machine.transition(request, new)
    log_activity(
        db,
        f"Request status changed from {previous} to {new.value}",
        subject=request,
        properties={"old_status": previous, "new_status": new.value},
        causer_id=user_id,
        event="status_changed",
    )


def _commit(db: Session, request: ServiceRequest) -> ServiceRequest:
    db.commit()
    db.refresh(request)
    return request


def create_request(db: Session, data: RequestCreate, user_id: int) -> ServiceRequest:
    _check_item(db, data.item_id)
    request = ServiceRequest(**data.model_dump(), user_id=user_id, status=RequestStatus.pending)
    db.add(request)
    db.flush()
    log_activity(
        db,
        "Request created",
        subject=request,
        properties={"type": RequestType(data.type).value, "priority": RequestPriority(data.priority).value},
        causer_id=user_id,
        event="created",
    )
    logger.info("Request %s (%s) created by user %s", request.id, RequestType(data.type).value, user_id)
    return _commit(db, request)


def update_request(
    db: Session, request_id: int, data: RequestUpdate, user_id: int, is_manager: bool = False
) -> ServiceRequest:
    request = get_request(db, request_id)
    ensure_can_manage(request, user_id, is_manager)
    if not request_state_machine.can_be_edited(request):
        raise RequestError("Only pending requests or requests awaiting changes can be edited.")
    changes = data.model_dump(exclude_unset=True)
    if "item_id" in changes:
        _check_item(db, changes["item_id"])
    for field, value in changes.items():
        setattr(request, field, value)
    log_activity(db, "Request updated", subject=request, properties={"fields": sorted(changes)},
                 causer_id=user_id, event="updated")
    return _commit(db, request)


def submit_for_review(db: Session, request_id: int, reviewer_id: int) -> ServiceRequest:
    request = get_request(db, request_id)
    _move(db, request, RequestStatus.under_review, reviewer_id)
    request.reviewed_by = reviewer_id
    return _commit(db, request)


def _review(request: ServiceRequest, reviewer_id: int, notes: str | None) -> None:
    request.reviewed_by = reviewer_id
    request.reviewed_at = datetime.now(timezone.utc)
    request.review_notes = notes


def approve_request(
    db: Session,
    request_id: int,
    reviewer_id: int,
    review_notes: str | None = None,
    auto_execute: bool = True,
) -> ServiceRequest:
    request = get_request(db, request_id)
    _move(db, request, RequestStatus.approved, reviewer_id)
    _review(request, reviewer_id, review_notes)
    request = _commit(db, request)
    if auto_execute and RequestType(request.type) == RequestType.assignment and request.item_id:
        try:
            request = execute_request(db, request.id, reviewer_id)
        except ItemNotAvailable as exc:
            # stays approved; execute again once the item is free
            db.rollback()
            logger.warning("Request %s approved but not executed: %s", request_id, exc)
            request = get_request(db, request_id)
    return request


def reject_request(db: Session, request_id: int, reviewer_id: int, reason: str) -> ServiceRequest:
    request = get_request(db, request_id)
    _move(db, request, RequestStatus.rejected, reviewer_id)
    _review(request, reviewer_id, reason)
    return _commit(db, request)


def request_changes(db: Session, request_id: int, reviewer_id: int, notes: str) -> ServiceRequest:
    request = get_request(db, request_id)
    _move(db, request, RequestStatus.changes_requested, reviewer_id)
    _review(request, reviewer_id, notes)
    return _commit(db, request)


def resubmit_request(db: Session, request_id: int, user_id: int, is_manager: bool = False) -> ServiceRequest:
    request = get_request(db, request_id)
    ensure_can_manage(request, user_id, is_manager)
    if RequestStatus(request.status) != RequestStatus.changes_requested:
        raise RequestError("Only requests awaiting changes can be resubmitted.")
    _move(db, request, RequestStatus.pending, user_id)
    request.reviewed_by = None
    request.reviewed_at = None
    request.review_notes = None
    return _commit(db, request)


def execute_request(db: Session, request_id: int, user_id: int | None = None) -> ServiceRequest:
    """Carry out an approved request and mark it completed.

    Only assignment requests with an item have an automated action; other
    types are fulfilled outside the system and just get completed here.
    """
    request = get_request(db, request_id)
    if not request_state_machine.can_be_completed(request):
        raise RequestError("Only approved requests can be executed.")
    if RequestType(request.type) == RequestType.assignment and request.item_id:
        # commits on its own; a refused assignment leaves the request approved
        assignment = assignment_service.create_assignment(
            db,
            AssignmentCreate(
                item_id=request.item_id,
                user_id=request.user_id,
                status=AssignmentStatus.active,
                due_date=datetime.now(timezone.utc).date() + timedelta(days=settings.REQUEST_ASSIGNMENT_DAYS),
                purpose=request.title,
                notes=request.description,
            ),
            user_id,
        )
        request.details = {**(request.details or {}), "assignment_id": assignment.id}
    _move(db, request, RequestStatus.completed, user_id)
    request.completed_at = datetime.now(timezone.utc)
    logger.info("Request %s executed", request.id)
    return _commit(db, request)


def cancel_request(
    db: Session, request_id: int, user_id: int, is_manager: bool = False, reason: str | None = None
) -> ServiceRequest:
    request = get_request(db, request_id)
    ensure_can_manage(request, user_id, is_manager)
    if not request_state_machine.can_be_cancelled(request):
        raise RequestError(f"A {RequestStatus(request.status).value} request cannot be cancelled.")
    _move(db, request, RequestStatus.cancelled, user_id)
    if reason:
        request.review_notes = reason
    return _commit(db, request)


def delete_request(db: Session, request_id: int, user_id: int | None = None) -> None:
    request = get_request(db, request_id)
    request.deleted_at = datetime.now(timezone.utc)
    log_activity(db, "Request deleted", subject=request, causer_id=user_id, event="deleted")
    db.commit()


def add_comment(
    db: Session, request_id: int, data: CommentCreate, user_id: int, is_manager: bool = False
) -> RequestComment:
    request = get_request(db, request_id)
    ensure_can_manage(request, user_id, is_manager)
    if data.is_internal and not is_manager:
        raise HTTPException(status_code=403, detail="Only staff can add internal comments")
    comment = RequestComment(request_id=request.id, user_id=user_id, **data.model_dump())
    db.add(comment)
    db.flush()
    log_activity(db, "Comment added", subject=request, properties={"comment_id": comment.id},
                 causer_id=user_id, event="commented")
    db.commit()
    db.refresh(comment)
    return comment


def get_comments(db: Session, request: ServiceRequest, include_internal: bool = False) -> list[RequestComment]:
    query = select(RequestComment).where(RequestComment.request_id == request.id)
    if not include_internal:
        query = query.where(RequestComment.is_internal == False)
    return db.scalars(query.order_by(RequestComment.created_at, RequestComment.id)).all()


def get_statistics(db: Session, user_id: int | None = None) -> RequestStats:
    def count(*criteria) -> int:
        query = select(func.count(ServiceRequest.id)).where(ServiceRequest.deleted_at.is_(None), *criteria)
        if user_id is not None:
            query = query.where(ServiceRequest.user_id == user_id)
        return db.scalar(query)

    awaiting = ServiceRequest.status.in_(request_state_machine.AWAITING_REVIEW)
    return RequestStats(
        total=count(),
        pending=count(ServiceRequest.status == RequestStatus.pending),
        under_review=count(ServiceRequest.status == RequestStatus.under_review),
        approved=count(ServiceRequest.status == RequestStatus.approved),
        rejected=count(ServiceRequest.status == RequestStatus.rejected),
        completed=count(ServiceRequest.status == RequestStatus.completed),
        cancelled=count(ServiceRequest.status == RequestStatus.cancelled),
        awaiting_review=count(awaiting),
        high_priority=count(awaiting, ServiceRequest.priority.in_(_URGENT)),
    )
