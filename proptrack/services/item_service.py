import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from sqlalchemy import select, func, exists
from fastapi import HTTPException
from proptrack.exceptions import InvalidStatus, InvalidTransition, ItemNotAvailable
from proptrack.models.item import Item, ItemStatus
from proptrack.models.category import Category
from proptrack.models.location import Location
from proptrack.models.assignment import Assignment, AssignmentStatus
from proptrack.models.maintenance import Maintenance, ACTIVE_MAINTENANCE_STATUSES
from proptrack.models.activity import ActivityLog
from proptrack.schemas.item import ItemCreate, ItemUpdate
from proptrack.schemas.pagination import Page, paginate
from proptrack.services import item_state_machine
from proptrack.services.activity_service import log_activity

logger = logging.getLogger(__name__)


def get_items(
    db: Session,
    page: int = 1,
    size: int = 50,
    search: str = "",
    category_id: int | None = None,
    status: str = "",
    location_id: int | None = None,
) -> Page:
    query = select(Item).where(Item.is_active == True)
    if search:
        query = query.where(
            Item.name.ilike(f"%{search}%")
            | Item.code.ilike(f"%{search}%")
            | Item.serial_number.ilike(f"%{search}%")
        )
    if category_id is not None:
        query = query.where(Item.category_id == category_id)
    if status:
        query = query.where(Item.status == status)
    if location_id is not None:
        query = query.where(Item.location_id == location_id)
    query = query.order_by(Item.code)
    return paginate(db, query, page, size)


def get_item(db: Session, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


def get_item_by_code(db: Session, code: str) -> Item | None:
    return db.scalar(select(Item).where(Item.code == code))


def _check_references(db: Session, values: dict) -> None:
    """Items may only point at live categories and locations."""
    for field, model, label in (("category_id", Category, "Category"), ("location_id", Location, "Location")):
        ref_id = values.get(field)
        if ref_id is None:
            continue
        ref = db.get(model, ref_id)
        if ref is None or ref.deleted_at is not None:
            raise HTTPException(status_code=404, detail=f"{label} not found")


def create_item(db: Session, data: ItemCreate, user_id: int | None = None) -> Item:
    existing = get_item_by_code(db, data.code)
    if existing:
        raise HTTPException(status_code=409, detail="Item code already exists")
    _check_references(db, data.model_dump())
    item = Item(**data.model_dump(), status=ItemStatus.available)
    db.add(item)
    db.flush()
    log_activity(db, "Item created", subject=item, causer_id=user_id, event="created")
    db.commit()
    db.refresh(item)
    return item


def update_item(db: Session, item_id: int, data: ItemUpdate, user_id: int | None = None) -> Item:
    item = get_item(db, item_id)
    changes = data.model_dump(exclude_unset=True)
    _check_references(db, changes)
    for field, value in changes.items():
        setattr(item, field, value)
    log_activity(db, "Item updated", subject=item, causer_id=user_id, event="updated")
    db.commit()
    db.refresh(item)
    return item


def delete_item(db: Session, item_id: int, user_id: int | None = None) -> Item:
    item = get_item(db, item_id)
    if has_active_assignment(db, item.id):
        raise ItemNotAvailable("Cannot delete item that is currently assigned.")
    if has_active_maintenance(db, item.id):
        raise ItemNotAvailable("Cannot delete item that is currently under maintenance.")
    item.is_active = False
    log_activity(db, "Item soft deleted", subject=item, causer_id=user_id, event="deleted")
    db.commit()
    db.refresh(item)
    return item


def change_status(
    db: Session,
    item: Item | None,
    new_status: ItemStatus | str,
    reason: str | None = None,
    causer_id: int | None = None,
) -> Item | None:
    """Move ``item`` to ``new_status`` and record the reason in the activity log.

    A missing item is a no-op: the owning record may have lost its relation.
    Raises ``InvalidStatus`` for values outside ``ItemStatus`` and
    ``InvalidTransition`` when the state machine forbids the move. The session
    is flushed, committing is left to the caller.
    """
    if item is None:
        return None
    try:
        target = ItemStatus(new_status)
    except ValueError:
        raise InvalidStatus(str(new_status)) from None

    current = ItemStatus(item.status)
    if not item_state_machine.can_transition(current, target):
        raise InvalidTransition(
            current.value,
            target.value,
            [s.value for s in item_state_machine.allowed_transitions(current)],
        )

    item.status = target
    log_activity(
        db,
        f"Status changed from {current.value} to {target.value}",
        subject=item,
        properties={"old_status": current.value, "new_status": target.value, "reason": reason},
        causer_id=causer_id,
        event="status_changed",
    )
    db.flush()
    logger.info("Item %s status %s -> %s (%s)", item.id, current.value, target.value, reason)
    return item


def set_status(db: Session, item_id: int, new_status: str, reason: str | None = None,
               user_id: int | None = None) -> Item:
    item = get_item(db, item_id)
    change_status(db, item, new_status, reason or "Manual status update", causer_id=user_id)
    db.commit()
    db.refresh(item)
    return item


def mark_as_lost(db: Session, item_id: int, reason: str | None = None, user_id: int | None = None) -> Item:
    return set_status(db, item_id, ItemStatus.lost, reason or "Item marked as lost", user_id)


def mark_as_found(db: Session, item_id: int, user_id: int | None = None) -> Item:
    item = get_item(db, item_id)
    if item.status != ItemStatus.lost:
        raise InvalidTransition(
            ItemStatus(item.status).value,
            ItemStatus.available.value,
            [s.value for s in item_state_machine.allowed_transitions(item.status)],
        )
    return set_status(db, item_id, ItemStatus.available, "Item found and returned to inventory", user_id)


def has_active_assignment(db: Session, item_id: int) -> bool:
    return db.scalar(
        select(
            exists().where(
                Assignment.item_id == item_id,
                Assignment.status == AssignmentStatus.active,
                Assignment.deleted_at.is_(None),
            )
        )
    )


def has_active_maintenance(db: Session, item_id: int) -> bool:
    return db.scalar(
        select(
            exists().where(
                Maintenance.item_id == item_id,
                Maintenance.status.in_(ACTIVE_MAINTENANCE_STATUSES),
                Maintenance.deleted_at.is_(None),
            )
        )
    )


def get_item_history(db: Session, item_id: int) -> list[ActivityLog]:
    get_item(db, item_id)
    return db.scalars(
        select(ActivityLog)
        .where(ActivityLog.subject_type == Item.__name__, ActivityLog.subject_id == item_id)
        .order_by(ActivityLog.created_at, ActivityLog.id)
    ).all()


def get_item_assignments(db: Session, item_id: int) -> list[Assignment]:
    get_item(db, item_id)
    return db.scalars(
        select(Assignment)
        .where(Assignment.item_id == item_id, Assignment.deleted_at.is_(None))
        .order_by(Assignment.assigned_date.desc(), Assignment.id.desc())
    ).all()


def get_items_needing_maintenance(db: Session, months: int = 6) -> list[Item]:
    """Damaged items, plus available items whose last completed maintenance is older than ``months``."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=30 * months)
    last_done = (
        select(Maintenance.item_id, func.max(Maintenance.completed_at).label("last_at"))
        .where(Maintenance.completed_at.is_not(None), Maintenance.deleted_at.is_(None))
        .group_by(Maintenance.item_id)
        .subquery()
    )
    stale = select(last_done.c.item_id).where(last_done.c.last_at < cutoff)
    return db.scalars(
        select(Item)
        .where(Item.is_active == True)
        .where((Item.status == ItemStatus.damaged) | ((Item.status == ItemStatus.available) & Item.id.in_(stale)))
        .order_by(Item.code)
    ).all()
