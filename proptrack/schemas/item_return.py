from datetime import datetime, date
from decimal import Decimal
from pydantic import BaseModel, Field
from proptrack.models.item import ItemCondition
from proptrack.models.item_return import ReturnStatus


class ReturnCreate(BaseModel):
    assignment_id: int
    condition_on_return: ItemCondition
    return_date: date | None = None
    # defaults to condition_on_return == damaged
    is_damaged: bool | None = None
    damage_description: str | None = None
    return_notes: str | None = None
    returned_by: int | None = None


class QuickReturn(BaseModel):
    # None keeps the item's current condition
    condition: ItemCondition | None = None
    return_date: date | None = None
    notes: str | None = None


class ReturnInspect(BaseModel):
    inspection_notes: str | None = None
    is_damaged: bool | None = None
    damage_description: str | None = None
    item_condition: ItemCondition | None = None


class ReturnReject(BaseModel):
    reason: str = Field(..., min_length=1)


class PenaltyRequest(BaseModel):
    per_day: Decimal | None = Field(None, ge=0)


class ReturnResponse(BaseModel):
    id: int
    assignment_id: int
    item_id: int | None
    returned_by: int | None
    inspected_by: int | None
    status: ReturnStatus
    return_date: date
    inspection_date: datetime | None
    condition_on_return: ItemCondition
    is_damaged: bool
    damage_description: str | None
    is_late: bool
    days_late: int
    return_notes: str | None
    inspection_notes: str | None
    penalty_amount: Decimal
    penalty_paid: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ReturnStats(BaseModel):
    total: int
    pending_inspection: int
    inspected: int
    approved: int
    rejected: int
    damaged: int
    late: int
    total_penalties: Decimal
    unpaid_penalties: Decimal
