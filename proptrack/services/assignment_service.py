import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from fastapi import HTTPException

import proptrack.services.cascades  # noqa: F401  registers item status cascades
from proptrack.exceptions import AssignmentError, ItemNotAvailable
from proptrack.models.assignment import Assignment, AssignmentStatus
from proptrack.models.item import Item, ItemStatus, ItemCondition
from proptrack.models.user import User
from proptrack.schemas.assignment import (
    AssignmentCreate, AssignmentUpdate, ReturnRequest, AssignmentStats, AssignmentSummary,
)
from proptrack.schemas.pagination import Page, paginate
from proptrack.services import item_state_machine
from proptrack.services.activity_service import log_activity
from proptrack.services.events import RecordCreated, RecordUpdated, RecordDeleted, bus
from proptrack.services.item_service import has_active_assignment

logger = logging.getLogger(__name__)


def _today():
    return datetime.now(timezone.utc).date()


def _active_query():
    return select(Assignment).where(Assignment.deleted_at.is_(None))


def get_assignments(
    db: Session,
    page: int = 1,
    size: int = 50,
    status: str | None = None,
    user_id: int | None = None,
    item_id: int | None = None,
) -> Page:
    query = _active_query()
    if status:
        query = query.where(Assignment.status == status)
    if user_id is not None:
        query = query.where(Assignment.user_id == user_id)
    if item_id is not None:
        query = query.where(Assignment.item_id == item_id)
    query = query.order_by(Assignment.assigned_date.desc(), Assignment.id.desc())
    return paginate(db, query, page, size)


def get_assignment(db: Session, assignment_id: int) -> Assignment:
    assignment = db.get(Assignment, assignment_id)
    if not assignment or assignment.deleted_at is not None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return assignment


def _publish_and_commit(db: Session, assignment: Assignment, event) -> Assignment:
    db.flush()
    bus.publish(db, event)
    db.commit()
    db.refresh(assignment)
    return assignment


def create_assignment(db: Session, data: AssignmentCreate, user_id: int | None = None) -> Assignment:
    item = db.get(Item, data.item_id)
    if not item or not item.is_active:
        raise HTTPException(status_code=404, detail="Item not found")
    if not db.get(User, data.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    if data.status == AssignmentStatus.active:
        if has_active_assignment(db, item.id):
            raise ItemNotAvailable(f"Item {item.code} is already assigned.")
        if not item_state_machine.can_be_assigned(item):
            raise ItemNotAvailable(
                f"Item {item.code} cannot be assigned while {ItemStatus(item.status).value}."
            )

    values = data.model_dump(exclude_unset=True)
    values["status"] = data.status
    values["condition_on_assignment"] = ItemCondition(values.get("condition_on_assignment") or item.condition).value
    if values.get("assigned_date") is None:
        values["assigned_date"] = _today()
    assignment = Assignment(**values, assigned_by=user_id)
    db.add(assignment)
    db.flush()
    log_activity(
        db,
        "Assignment created",
        subject=assignment,
        properties={"item_id": item.id, "user_id": data.user_id, "status": AssignmentStatus(data.status).value},
        causer_id=user_id,
        event="created",
    )
    logger.info("Assignment %s created for item %s", assignment.id, item.id)
    return _publish_and_commit(db, assignment, RecordCreated(assignment))


def _set_status(
    db: Session,
    assignment: Assignment,
    new_status: AssignmentStatus,
    user_id: int | None = None,
) -> Assignment:
    previous = AssignmentStatus(assignment.status).value
    assignment.status = new_status
    log_activity(
        db,
        f"Assignment status changed from {previous} to {new_status.value}",
        subject=assignment,
        properties={"old_status": previous, "new_status": new_status.value},
        causer_id=user_id,
        event="status_changed",
    )
    return _publish_and_commit(db, assignment, RecordUpdated(assignment, previous))


def update_assignment(
    db: Session, assignment_id: int, data: AssignmentUpdate, user_id: int | None = None
) -> Assignment:
    assignment = get_assignment(db, assignment_id)
    previous = AssignmentStatus(assignment.status).value
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(assignment, field, value)
    log_activity(db, "Assignment updated", subject=assignment, causer_id=user_id, event="updated")
    return _publish_and_commit(db, assignment, RecordUpdated(assignment, previous))


def approve_assignment(db: Session, assignment_id: int, user_id: int | None = None) -> Assignment:
    assignment = get_assignment(db, assignment_id)
    if assignment.status != AssignmentStatus.pending:
        raise AssignmentError("Only pending assignments can be approved.")
    return _set_status(db, assignment, AssignmentStatus.approved, user_id)


def activate_assignment(db: Session, assignment_id: int, user_id: int | None = None) -> Assignment:
    assignment = get_assignment(db, assignment_id)
    if assignment.status not in (AssignmentStatus.pending, AssignmentStatus.approved):
        raise AssignmentError("Only pending or approved assignments can be activated.")
    return _set_status(db, assignment, AssignmentStatus.active, user_id)


def cancel_assignment(db: Session, assignment_id: int, user_id: int | None = None) -> Assignment:
    assignment = get_assignment(db, assignment_id)
    if assignment.status in (AssignmentStatus.returned, AssignmentStatus.cancelled):
        raise AssignmentError("Assignment is already closed.")
    return _set_status(db, assignment, AssignmentStatus.cancelled, user_id)


def return_assignment(
    db: Session, assignment_id: int, data: ReturnRequest, user_id: int | None = None
) -> Assignment:
    """Close an assignment and hand the item back.

    The returned condition is written to the item before the status change so
    that anything reacting to the return sees the new condition.
    """
    assignment = get_assignment(db, assignment_id)
    if assignment.status not in (AssignmentStatus.active, AssignmentStatus.approved):
        raise AssignmentError("Only active or approved assignments can be returned.")
    assignment.returned_date = data.returned_date or _today()
    if data.notes:
        assignment.notes = data.notes
    if data.condition_on_return is not None:
        assignment.condition_on_return = data.condition_on_return.value
        item = db.get(Item, assignment.item_id)
        if item is not None:
            item.condition = data.condition_on_return
    return _set_status(db, assignment, AssignmentStatus.returned, user_id)


def delete_assignment(
    db: Session, assignment_id: int, hard: bool = False, user_id: int | None = None
) -> None:
    assignment = get_assignment(db, assignment_id)
    if hard:
        log_activity(
            db,
            "Assignment deleted",
            properties={"assignment_id": assignment.id, "item_id": assignment.item_id},
            causer_id=user_id,
            event="deleted",
        )
        db.delete(assignment)
        db.flush()
        bus.publish(db, RecordDeleted(assignment, hard=True))
    else:
        assignment.deleted_at = datetime.now(timezone.utc)
        log_activity(db, "Assignment soft deleted", subject=assignment, causer_id=user_id, event="deleted")
        db.flush()
        bus.publish(db, RecordDeleted(assignment))
    db.commit()


def get_overdue_assignments(db: Session) -> list[Assignment]:
    return db.scalars(
        _active_query()
        .where(
            Assignment.status == AssignmentStatus.active,
            Assignment.due_date.is_not(None),
            Assignment.due_date < _today(),
        )
        .order_by(Assignment.due_date)
    ).all()


def _count(db: Session, *criteria) -> int:
    return db.scalar(
        select(func.count(Assignment.id)).where(Assignment.deleted_at.is_(None), *criteria)
    )


def _overdue_criteria():
    return (
        Assignment.status == AssignmentStatus.active,
        Assignment.due_date.is_not(None),
        Assignment.due_date < _today(),
    )


def get_user_stats(db: Session, user_id: int) -> AssignmentStats:
    by_user = Assignment.user_id == user_id
    return AssignmentStats(
        total=_count(db, by_user),
        active=_count(db, by_user, Assignment.status == AssignmentStatus.active),
        returned=_count(db, by_user, Assignment.status == AssignmentStatus.returned),
        overdue=_count(db, by_user, *_overdue_criteria()),
    )


def get_summary(db: Session) -> AssignmentSummary:
    counts = dict(
        db.execute(
            select(Assignment.status, func.count(Assignment.id))
            .where(Assignment.deleted_at.is_(None))
            .group_by(Assignment.status)
        ).all()
    )
    return AssignmentSummary(
        total=sum(counts.values()),
        pending=counts.get(AssignmentStatus.pending, 0),
        active=counts.get(AssignmentStatus.active, 0),
        returned=counts.get(AssignmentStatus.returned, 0),
        cancelled=counts.get(AssignmentStatus.cancelled, 0),
        overdue=_count(db, *_overdue_criteria()),
    )
