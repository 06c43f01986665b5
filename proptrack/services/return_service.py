"""Returns workflow: create -> inspect -> approve or reject.

Creating a return closes the assignment, so the assignment cascade releases
the item straight away. Approval only has work left to do when inspection
found damage: the released item is then moved on to ``damaged``.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from fastapi import HTTPException

from proptrack.config import settings
from proptrack.exceptions import ReturnError
from proptrack.models.assignment import Assignment, AssignmentStatus
from proptrack.models.item import Item, ItemStatus, ItemCondition
from proptrack.models.item_return import ItemReturn, ReturnStatus
from proptrack.schemas.assignment import ReturnRequest
from proptrack.schemas.item_return import ReturnCreate, ReturnInspect, QuickReturn, ReturnStats
from proptrack.schemas.pagination import Page, paginate
from proptrack.services import assignment_service, item_service
from proptrack.services.activity_service import log_activity

logger = logging.getLogger(__name__)

# conditions a quick return approves without a manual inspection
_AUTO_APPROVE = (ItemCondition.excellent, ItemCondition.good)


def _today():
    return datetime.now(timezone.utc).date()


def get_returns(
    db: Session,
    page: int = 1,
    size: int = 50,
    status: str | None = None,
    user_id: int | None = None,
    damaged: bool | None = None,
    late: bool | None = None,
) -> Page:
    query = select(ItemReturn)
    if status:
        query = query.where(ItemReturn.status == status)
    if user_id is not None:
        query = query.join(Assignment, ItemReturn.assignment_id == Assignment.id).where(Assignment.user_id == user_id)
    if damaged is not None:
        query = query.where(ItemReturn.is_damaged == damaged)
    if late is not None:
        query = query.where(ItemReturn.is_late == late)
    query = query.order_by(ItemReturn.created_at.desc(), ItemReturn.id.desc())
    return paginate(db, query, page, size)


def _list(db: Session, *criteria) -> list[ItemReturn]:
    return db.scalars(
        select(ItemReturn).where(*criteria).order_by(ItemReturn.created_at.desc(), ItemReturn.id.desc())
    ).all()


def get_pending_inspections(db: Session) -> list[ItemReturn]:
    return _list(db, ItemReturn.status == ReturnStatus.pending_inspection)


def get_damaged_returns(db: Session) -> list[ItemReturn]:
    return _list(db, ItemReturn.is_damaged == True)


def get_late_returns(db: Session) -> list[ItemReturn]:
    return _list(db, ItemReturn.is_late == True)


def get_return(db: Session, return_id: int) -> ItemReturn:
    item_return = db.get(ItemReturn, return_id)
    if not item_return:
        raise HTTPException(status_code=404, detail="Return not found")
    return item_return


def _commit(db: Session, item_return: ItemReturn) -> ItemReturn:
    db.commit()
    db.refresh(item_return)
    return item_return


def create_return(db: Session, data: ReturnCreate, user_id: int | None = None) -> ItemReturn:
    assignment = assignment_service.get_assignment(db, data.assignment_id)
    if assignment.status == AssignmentStatus.returned:
        raise ReturnError("This assignment has already been returned.")
    if assignment.status not in (AssignmentStatus.active, AssignmentStatus.approved):
        raise ReturnError("Only active or approved assignments can be returned.")

    return_date = data.return_date or _today()
    is_damaged = data.is_damaged
    if is_damaged is None:
        is_damaged = data.condition_on_return == ItemCondition.damaged
    item_return = ItemReturn(
        assignment_id=assignment.id,
        returned_by=data.returned_by or user_id,
        return_date=return_date,
        condition_on_return=data.condition_on_return,
        is_damaged=is_damaged,
        damage_description=data.damage_description,
        return_notes=data.return_notes,
        status=ReturnStatus.pending_inspection,
    )
    if assignment.due_date is not None and return_date > assignment.due_date:
        item_return.is_late = True
        item_return.days_late = (return_date - assignment.due_date).days
    db.add(item_return)
    db.flush()
    log_activity(
        db,
        "Return created",
        subject=item_return,
        properties={
            "assignment_id": assignment.id,
            "condition_on_return": ItemCondition(data.condition_on_return).value,
            "is_damaged": is_damaged,
            "days_late": item_return.days_late,
        },
        causer_id=user_id,
        event="created",
    )
    # closes the assignment and commits; the cascade releases the item
    assignment_service.return_assignment(
        db,
        assignment.id,
        ReturnRequest(returned_date=return_date, condition_on_return=data.condition_on_return,
                      notes=data.return_notes),
        user_id,
    )
    db.refresh(item_return)
    logger.info("Return %s created for assignment %s", item_return.id, assignment.id)
    return item_return


def inspect_return(db: Session, return_id: int, data: ReturnInspect, inspector_id: int | None = None) -> ItemReturn:
    item_return = get_return(db, return_id)
    if item_return.status != ReturnStatus.pending_inspection:
        raise ReturnError("This return has already been inspected.")
    item_return.status = ReturnStatus.inspected
    item_return.inspected_by = inspector_id
    item_return.inspection_date = datetime.now(timezone.utc)
    item_return.inspection_notes = data.inspection_notes
    if data.is_damaged is not None:
        item_return.is_damaged = data.is_damaged
    if data.damage_description is not None:
        item_return.damage_description = data.damage_description
    if data.item_condition is not None:
        item = db.get(Item, item_return.assignment.item_id)
        item.condition = data.item_condition
    log_activity(
        db,
        "Return inspected",
        subject=item_return,
        properties={"is_damaged": item_return.is_damaged},
        causer_id=inspector_id,
        event="inspected",
    )
    return _commit(db, item_return)


def approve_return(db: Session, return_id: int, user_id: int | None = None) -> ItemReturn:
    item_return = get_return(db, return_id)
    if item_return.status != ReturnStatus.inspected:
        raise ReturnError("Return must be inspected before approval.")
    item_return.status = ReturnStatus.approved
    item = db.get(Item, item_return.assignment.item_id)
    if item_return.is_damaged:
        # only an item the return released is ours to mark; a new claim wins
        if ItemStatus(item.status) == ItemStatus.available:
            item_service.change_status(
                db, item, ItemStatus.damaged, f"Damage confirmed on return #{item_return.id}", causer_id=user_id
            )
        else:
            logger.info(
                "Return %s approved as damaged but item %s is %s, status left unchanged",
                item_return.id, item.id, ItemStatus(item.status).value,
            )
    log_activity(db, "Return approved", subject=item_return, causer_id=user_id, event="approved")
    return _commit(db, item_return)


def reject_return(db: Session, return_id: int, reason: str, user_id: int | None = None) -> ItemReturn:
    item_return = get_return(db, return_id)
    if item_return.status not in (ReturnStatus.pending_inspection, ReturnStatus.inspected):
        raise ReturnError("Only returns awaiting a decision can be rejected.")
    item_return.status = ReturnStatus.rejected
    item_return.inspection_notes = reason
    log_activity(db, "Return rejected", subject=item_return, properties={"reason": reason},
                 causer_id=user_id, event="rejected")
    return _commit(db, item_return)


def calculate_penalty(db: Session, return_id: int, per_day: Decimal | None = None) -> ItemReturn:
    item_return = get_return(db, return_id)
    if not item_return.is_late:
        return item_return
    if per_day is None:
        per_day = settings.LATE_RETURN_PENALTY_PER_DAY
    item_return.penalty_amount = Decimal(item_return.days_late) * per_day
    return _commit(db, item_return)


def mark_penalty_paid(db: Session, return_id: int, user_id: int | None = None) -> ItemReturn:
    item_return = get_return(db, return_id)
    if not item_return.penalty_amount:
        raise ReturnError("This return has no penalty to pay.")
    item_return.penalty_paid = True
    log_activity(db, "Return penalty paid", subject=item_return,
                 properties={"penalty_amount": str(item_return.penalty_amount)},
                 causer_id=user_id, event="penalty_paid")
    return _commit(db, item_return)


def quick_return(db: Session, assignment_id: int, data: QuickReturn, user_id: int | None = None) -> ItemReturn:
    """One-step return. Items handed back in good shape skip the inspection queue."""
    assignment = assignment_service.get_assignment(db, assignment_id)
    condition = data.condition or ItemCondition(assignment.item.condition)
    item_return = create_return(
        db,
        ReturnCreate(
            assignment_id=assignment_id,
            condition_on_return=condition,
            return_date=data.return_date,
            return_notes=data.notes,
        ),
        user_id,
    )
    if condition in _AUTO_APPROVE:
        inspect_return(
            db,
            item_return.id,
            ReturnInspect(inspection_notes="Auto-approved - good condition", is_damaged=False,
                          item_condition=condition),
            user_id,
        )
        item_return = approve_return(db, item_return.id, user_id)
    return item_return


def get_statistics(db: Session) -> ReturnStats:
    def count(*criteria) -> int:
        return db.scalar(select(func.count(ItemReturn.id)).where(*criteria))

    def penalties(*criteria) -> Decimal:
        return Decimal(db.scalar(select(func.coalesce(func.sum(ItemReturn.penalty_amount), 0)).where(*criteria)))

    return ReturnStats(
        total=count(),
        pending_inspection=count(ItemReturn.status == ReturnStatus.pending_inspection),
        inspected=count(ItemReturn.status == ReturnStatus.inspected),
        approved=count(ItemReturn.status == ReturnStatus.approved),
        rejected=count(ItemReturn.status == ReturnStatus.rejected),
        damaged=count(ItemReturn.is_damaged == True),
        late=count(ItemReturn.is_late == True),
        total_penalties=penalties(),
        unpaid_penalties=penalties(ItemReturn.penalty_paid == False),
    )
