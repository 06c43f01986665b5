"""Item status cascades driven by Assignment and Maintenance lifecycle events.

An active assignment or maintenance record claims its item's status. When the
record is returned, completed or cancelled it releases the claim, unless
another active record of the same kind still holds the item.

A rejected item status change never fails the triggering write: it is logged
and the cascade stops.
"""
import logging

from sqlalchemy import select, exists
from sqlalchemy.orm import Session

from proptrack.exceptions import ItemStatusError
from proptrack.models.assignment import Assignment, AssignmentStatus
from proptrack.models.item import Item, ItemStatus, ItemCondition
from proptrack.models.maintenance import Maintenance, MaintenanceStatus, ACTIVE_MAINTENANCE_STATUSES
from proptrack.services import item_service
from proptrack.services.events import EventBus, RecordCreated, RecordUpdated, RecordDeleted, RecordEvent, bus

logger = logging.getLogger(__name__)

_DAMAGED_CONDITIONS = {ItemCondition.damaged, ItemCondition.poor}


class StatusCascade:
    record_type: type
    status_type: type

    def __call__(self, db: Session, event: RecordEvent) -> None:
        if isinstance(event, RecordCreated):
            self.created(db, event.record)
        elif isinstance(event, RecordUpdated):
            if event.status_changed:
                self.updated(db, event.record)
        elif isinstance(event, RecordDeleted):
            # hard deletes leave the item alone
            if not event.hard:
                self.deleted(db, event.record)

    def created(self, db: Session, record) -> None:
        raise NotImplementedError

    def updated(self, db: Session, record) -> None:
        raise NotImplementedError

    def deleted(self, db: Session, record) -> None:
        raise NotImplementedError

    def _status(self, record):
        return self.status_type(record.status)

    def _lock_item(self, db: Session, record) -> Item | None:
        """Re-read the item row under a row lock.

        Serializes concurrent releases of the same item so that two cascades
        cannot both observe "no other active claim". SQLite ignores the lock
        and relies on its database-level write lock instead.
        """
        return db.scalar(
            select(Item)
            .where(Item.id == record.item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )

    def _update_item_status(self, db: Session, record, item: Item | None, new_status: ItemStatus) -> None:
        if item is None:
            return
        label = type(record).__name__
        try:
            item_service.change_status(
                db,
                item,
                new_status,
                f"{label} {record.id} status changed to {self._status(record).value}",
            )
        except ItemStatusError as e:
            logger.warning(
                "Could not update item status via %s cascade: %s",
                label,
                e,
                extra={
                    f"{label.lower()}_id": record.id,
                    "item_id": item.id,
                    "attempted_status": ItemStatus(new_status).value,
                },
            )


class AssignmentStatusCascade(StatusCascade):
    record_type = Assignment
    status_type = AssignmentStatus

    def created(self, db: Session, assignment: Assignment) -> None:
        if self._status(assignment) == AssignmentStatus.active:
            self._claim(db, assignment)

    def updated(self, db: Session, assignment: Assignment) -> None:
        status = self._status(assignment)
        if status == AssignmentStatus.active:
            self._claim(db, assignment)
        elif status in (AssignmentStatus.returned, AssignmentStatus.cancelled):
            self._release(db, assignment)

    def deleted(self, db: Session, assignment: Assignment) -> None:
        self._release(db, assignment)

    def _claim(self, db: Session, assignment: Assignment) -> None:
        self._update_item_status(db, assignment, self._lock_item(db, assignment), ItemStatus.assigned)

    def _release(self, db: Session, assignment: Assignment) -> None:
        item = self._lock_item(db, assignment)
        if item is None:
            return
        if not self._has_other_active(db, assignment):
            self._update_item_status(db, assignment, item, ItemStatus.available)

    @staticmethod
    def _has_other_active(db: Session, assignment: Assignment) -> bool:
        return db.scalar(
            select(
                exists().where(
                    Assignment.item_id == assignment.item_id,
                    Assignment.id != assignment.id,
                    Assignment.status == AssignmentStatus.active,
                    Assignment.deleted_at.is_(None),
                )
            )
        )


class MaintenanceStatusCascade(StatusCascade):
    record_type = Maintenance
    status_type = MaintenanceStatus

    def created(self, db: Session, maintenance: Maintenance) -> None:
        if self._status(maintenance) in ACTIVE_MAINTENANCE_STATUSES:
            self._claim(db, maintenance)

    def updated(self, db: Session, maintenance: Maintenance) -> None:
        status = self._status(maintenance)
        if status in ACTIVE_MAINTENANCE_STATUSES:
            self._claim(db, maintenance)
        elif status == MaintenanceStatus.completed:
            self._complete(db, maintenance)
        elif status == MaintenanceStatus.cancelled:
            self._cancel(db, maintenance)

    def deleted(self, db: Session, maintenance: Maintenance) -> None:
        self._cancel(db, maintenance)

    def _claim(self, db: Session, maintenance: Maintenance) -> None:
        self._update_item_status(db, maintenance, self._lock_item(db, maintenance), ItemStatus.under_maintenance)

    def _complete(self, db: Session, maintenance: Maintenance) -> None:
        item = self._lock_item(db, maintenance)
        if item is None or self._has_other_active(db, maintenance):
            return
        if ItemCondition(item.condition) in _DAMAGED_CONDITIONS:
            new_status = ItemStatus.damaged
        else:
            new_status = ItemStatus.available
        self._update_item_status(db, maintenance, item, new_status)

    def _cancel(self, db: Session, maintenance: Maintenance) -> None:
        item = self._lock_item(db, maintenance)
        if item is None or self._has_other_active(db, maintenance):
            return
        # only undo our own claim
        if ItemStatus(item.status) == ItemStatus.under_maintenance:
            self._update_item_status(db, maintenance, item, ItemStatus.available)

    @staticmethod
    def _has_other_active(db: Session, maintenance: Maintenance) -> bool:
        return db.scalar(
            select(
                exists().where(
                    Maintenance.item_id == maintenance.item_id,
                    Maintenance.id != maintenance.id,
                    Maintenance.status.in_(ACTIVE_MAINTENANCE_STATUSES),
                    Maintenance.deleted_at.is_(None),
                )
            )
        )


assignment_cascade = AssignmentStatusCascade()
maintenance_cascade = MaintenanceStatusCascade()


def register_cascades(event_bus: EventBus = bus) -> None:
    event_bus.subscribe(Assignment, assignment_cascade)
    event_bus.subscribe(Maintenance, maintenance_cascade)


register_cascades()
