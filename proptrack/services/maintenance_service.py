import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy import select
from fastapi import HTTPException

import proptrack.services.cascades  # noqa: F401  registers item status cascades
from proptrack.exceptions import MaintenanceError, ItemNotAvailable
from proptrack.models.item import Item, ItemStatus, ItemCondition
from proptrack.models.maintenance import Maintenance, MaintenanceStatus, ACTIVE_MAINTENANCE_STATUSES
from proptrack.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate, MaintenanceComplete
from proptrack.schemas.pagination import Page, paginate
from proptrack.services import item_state_machine
from proptrack.services.activity_service import log_activity
from proptrack.services.events import RecordCreated, RecordUpdated, RecordDeleted, bus

logger = logging.getLogger(__name__)


def get_maintenances(
    db: Session,
    page: int = 1,
    size: int = 50,
    status: str | None = None,
    item_id: int | None = None,
    priority: str | None = None,
    maintenance_type: str | None = None,
) -> Page:
    query = select(Maintenance).where(Maintenance.deleted_at.is_(None))
    if status:
        query = query.where(Maintenance.status == status)
    if item_id is not None:
        query = query.where(Maintenance.item_id == item_id)
    if priority:
        query = query.where(Maintenance.priority == priority)
    if maintenance_type:
        query = query.where(Maintenance.maintenance_type == maintenance_type)
    query = query.order_by(Maintenance.created_at.desc(), Maintenance.id.desc())
    return paginate(db, query, page, size)


def get_maintenance(db: Session, maintenance_id: int) -> Maintenance:
    maintenance = db.get(Maintenance, maintenance_id)
    if not maintenance or maintenance.deleted_at is not None:
        raise HTTPException(status_code=404, detail="Maintenance record not found")
    return maintenance


def _publish_and_commit(db: Session, maintenance: Maintenance, event) -> Maintenance:
    db.flush()
    bus.publish(db, event)
    db.commit()
    db.refresh(maintenance)
    return maintenance


def create_maintenance(db: Session, data: MaintenanceCreate, user_id: int | None = None) -> Maintenance:
    item = db.get(Item, data.item_id)
    if not item or not item.is_active:
        raise HTTPException(status_code=404, detail="Item not found")
    if data.status in ACTIVE_MAINTENANCE_STATUSES and not item_state_machine.can_be_maintained(item):
        raise ItemNotAvailable(
            f"Item {item.code} cannot go to maintenance while {ItemStatus(item.status).value}."
        )

    maintenance = Maintenance(
        **data.model_dump(),
        requested_by=user_id,
        item_condition_before=ItemCondition(item.condition).value,
    )
    db.add(maintenance)
    db.flush()
    log_activity(
        db,
        "Maintenance created",
        subject=maintenance,
        properties={"item_id": item.id, "status": MaintenanceStatus(data.status).value},
        causer_id=user_id,
        event="created",
    )
    logger.info("Maintenance %s created for item %s", maintenance.id, item.id)
    return _publish_and_commit(db, maintenance, RecordCreated(maintenance))


def _set_status(
    db: Session,
    maintenance: Maintenance,
    new_status: MaintenanceStatus,
    user_id: int | None = None,
) -> Maintenance:
    previous = MaintenanceStatus(maintenance.status).value
    maintenance.status = new_status
    log_activity(
        db,
        f"Maintenance status changed from {previous} to {new_status.value}",
        subject=maintenance,
        properties={"old_status": previous, "new_status": new_status.value},
        causer_id=user_id,
        event="status_changed",
    )
    return _publish_and_commit(db, maintenance, RecordUpdated(maintenance, previous))


def update_maintenance(
    db: Session, maintenance_id: int, data: MaintenanceUpdate, user_id: int | None = None
) -> Maintenance:
    maintenance = get_maintenance(db, maintenance_id)
    previous = MaintenanceStatus(maintenance.status).value
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(maintenance, field, value)
    log_activity(db, "Maintenance updated", subject=maintenance, causer_id=user_id, event="updated")
    return _publish_and_commit(db, maintenance, RecordUpdated(maintenance, previous))


def start_maintenance(db: Session, maintenance_id: int, user_id: int | None = None) -> Maintenance:
    maintenance = get_maintenance(db, maintenance_id)
    if maintenance.status not in (MaintenanceStatus.pending, MaintenanceStatus.scheduled):
        raise MaintenanceError("Only pending or scheduled maintenance can be started.")
    maintenance.started_at = datetime.now(timezone.utc)
    return _set_status(db, maintenance, MaintenanceStatus.in_progress, user_id)


def complete_maintenance(
    db: Session, maintenance_id: int, data: MaintenanceComplete, user_id: int | None = None
) -> Maintenance:
    """Finish a maintenance job.

    ``condition_after`` is written to the item before the status change; the
    maintenance cascade decides between ``damaged`` and ``available`` from it.
    """
    maintenance = get_maintenance(db, maintenance_id)
    if maintenance.status not in ACTIVE_MAINTENANCE_STATUSES:
        raise MaintenanceError("Only scheduled or in-progress maintenance can be completed.")
    maintenance.completed_at = datetime.now(timezone.utc)
    if data.action_taken:
        maintenance.action_taken = data.action_taken
    if data.actual_cost is not None:
        maintenance.actual_cost = data.actual_cost
    if data.condition_after is not None:
        maintenance.item_condition_after = data.condition_after.value
        item = db.get(Item, maintenance.item_id)
        if item is not None:
            item.condition = data.condition_after
    return _set_status(db, maintenance, MaintenanceStatus.completed, user_id)


def cancel_maintenance(db: Session, maintenance_id: int, user_id: int | None = None) -> Maintenance:
    maintenance = get_maintenance(db, maintenance_id)
    if maintenance.status in (MaintenanceStatus.completed, MaintenanceStatus.cancelled):
        raise MaintenanceError("Maintenance is already closed.")
    return _set_status(db, maintenance, MaintenanceStatus.cancelled, user_id)


def delete_maintenance(
    db: Session, maintenance_id: int, hard: bool = False, user_id: int | None = None
) -> None:
    maintenance = get_maintenance(db, maintenance_id)
    if hard:
        log_activity(
            db,
            "Maintenance deleted",
            properties={"maintenance_id": maintenance.id, "item_id": maintenance.item_id},
            causer_id=user_id,
            event="deleted",
        )
        db.delete(maintenance)
        db.flush()
        bus.publish(db, RecordDeleted(maintenance, hard=True))
    else:
        maintenance.deleted_at = datetime.now(timezone.utc)
        log_activity(db, "Maintenance soft deleted", subject=maintenance, causer_id=user_id, event="deleted")
        db.flush()
        bus.publish(db, RecordDeleted(maintenance))
    db.commit()
