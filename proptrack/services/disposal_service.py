from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy import select, extract
from fastapi import HTTPException
import logging

from proptrack.exceptions import DisposalError, ItemStatusError
from proptrack.models.disposal import Disposal, DisposalStatus
from proptrack.models.item import Item, ItemStatus, ItemCondition
from proptrack.schemas.disposal import DisposalRequest, DisposalDecision, DisposalExecute
from proptrack.schemas.pagination import Page, paginate
from proptrack.services import item_state_machine
from proptrack.services.activity_service import log_activity
from proptrack.services.item_service import change_status, has_active_assignment

logger = logging.getLogger(__name__)


def request_disposal(
    db: Session,
    item_id: int,
    data: DisposalRequest,
    user_id: int | None = None,
) -> Disposal:
    item = db.get(Item, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    if not item.is_active:
        raise DisposalError("Item is already disposed.")
    if not item_state_machine.can_be_disposed(item):
        raise DisposalError(f"Item cannot be disposed while {ItemStatus(item.status).value}.")
    if has_active_assignment(db, item.id):
        raise DisposalError("Item is currently assigned.")
    open_request = db.scalar(
        select(Disposal.id).where(
            Disposal.item_id == item.id,
            Disposal.status.in_((DisposalStatus.pending, DisposalStatus.approved)),
        )
    )
    if open_request:
        raise DisposalError("A disposal request for this item is already open.")

    disposal = Disposal(
        item_id=item.id,
        reason=data.reason,
        requested_by=user_id,
        note=data.note,
        document_ref=data.document_ref,
    )
    db.add(disposal)
    db.flush()
    _change_item_status(db, item, ItemStatus.pending_disposal, f"Disposal {disposal.id} requested", user_id)
    log_activity(db, "Disposal requested", subject=disposal, causer_id=user_id, event="requested")
    db.commit()
    db.refresh(disposal)
    return disposal


def approve_disposal(
    db: Session, disposal_id: int, data: DisposalDecision | None = None, user_id: int | None = None
) -> Disposal:
    disposal = get_disposal(db, disposal_id)
    if disposal.status != DisposalStatus.pending:
        raise DisposalError("Only pending disposal requests can be approved.")
    disposal.status = DisposalStatus.approved
    disposal.approved_at = datetime.now(timezone.utc)
    disposal.approved_by = user_id
    if data and data.note:
        disposal.note = data.note
    log_activity(db, "Disposal approved", subject=disposal, causer_id=user_id, event="approved")
    db.commit()
    db.refresh(disposal)
    return disposal


def reject_disposal(
    db: Session, disposal_id: int, data: DisposalDecision | None = None, user_id: int | None = None
) -> Disposal:
    """Reject a pending request and put the item back into circulation."""
    disposal = get_disposal(db, disposal_id)
    if disposal.status != DisposalStatus.pending:
        raise DisposalError("Only pending disposal requests can be rejected.")
    disposal.status = DisposalStatus.rejected
    if data and data.note:
        disposal.note = data.note
    item = db.get(Item, disposal.item_id)
    if item is not None:
        if ItemCondition(item.condition) in (ItemCondition.damaged, ItemCondition.poor):
            target = ItemStatus.damaged
        else:
            target = ItemStatus.available
        _change_item_status(db, item, target, f"Disposal {disposal.id} rejected", user_id)
    log_activity(db, "Disposal rejected", subject=disposal, causer_id=user_id, event="rejected")
    db.commit()
    db.refresh(disposal)
    return disposal


def execute_disposal(
    db: Session, disposal_id: int, data: DisposalExecute | None = None, user_id: int | None = None
) -> Disposal:
    disposal = get_disposal(db, disposal_id)
    if disposal.status != DisposalStatus.approved:
        raise DisposalError("Only approved disposal requests can be executed.")
    data = data or DisposalExecute()
    disposal.status = DisposalStatus.executed
    disposal.executed_at = data.executed_at or datetime.now(timezone.utc)
    disposal.executed_by = user_id
    if data.disposal_cost is not None:
        disposal.disposal_cost = data.disposal_cost
    if data.note:
        disposal.note = data.note
    item = db.get(Item, disposal.item_id)
    if item is not None:
        _change_item_status(db, item, ItemStatus.disposed, f"Disposal {disposal.id} executed", user_id)
        item.is_active = False
    log_activity(db, "Disposal executed", subject=disposal, causer_id=user_id, event="executed")
    db.commit()
    db.refresh(disposal)
    logger.info("Item %s disposed (disposal %s)", disposal.item_id, disposal.id)
    return disposal


def _change_item_status(db: Session, item: Item, status: ItemStatus, reason: str, user_id: int | None) -> None:
    try:
        change_status(db, item, status, reason, causer_id=user_id)
    except ItemStatusError as e:
        raise DisposalError(str(e)) from e


def get_disposals(
    db: Session,
    page: int = 1,
    size: int = 50,
    year: int | None = None,
    reason: str | None = None,
    status: str | None = None,
) -> Page:
    query = select(Disposal)

    if year is not None:
        query = query.where(extract("year", Disposal.requested_at) == year)
    if reason is not None:
        query = query.where(Disposal.reason == reason)
    if status is not None:
        query = query.where(Disposal.status == status)

    query = query.order_by(Disposal.requested_at.desc(), Disposal.id.desc())

    # Denormalized item fields for list views
    return paginate(db, query, page, size, transform=lambda d: _to_response_dict(d, db.get(Item, d.item_id)))


def get_disposal(db: Session, disposal_id: int) -> Disposal:
    disposal = db.get(Disposal, disposal_id)
    if not disposal:
        raise HTTPException(status_code=404, detail="Disposal record not found")
    return disposal


def _to_response_dict(disposal: Disposal, item: Item | None) -> dict:
    return {
        "id": disposal.id,
        "item_id": disposal.item_id,
        "reason": disposal.reason,
        "status": disposal.status,
        "requested_at": disposal.requested_at,
        "requested_by": disposal.requested_by,
        "approved_at": disposal.approved_at,
        "approved_by": disposal.approved_by,
        "executed_at": disposal.executed_at,
        "executed_by": disposal.executed_by,
        "disposal_cost": disposal.disposal_cost,
        "note": disposal.note,
        "document_ref": disposal.document_ref,
        "item_code": item.code if item else None,
        "item_name": item.name if item else None,
    }
