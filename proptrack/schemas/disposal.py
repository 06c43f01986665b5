from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel
from proptrack.models.disposal import DisposalReason, DisposalStatus


class DisposalRequest(BaseModel):
    reason: DisposalReason
    note: str | None = None
    document_ref: str | None = None


class DisposalDecision(BaseModel):
    note: str | None = None


class DisposalExecute(BaseModel):
    executed_at: datetime | None = None  # defaults to now() in service
    disposal_cost: Decimal | None = None
    note: str | None = None


class DisposalResponse(BaseModel):
    id: int
    item_id: int
    reason: DisposalReason
    status: DisposalStatus
    requested_at: datetime
    requested_by: int | None
    approved_at: datetime | None
    approved_by: int | None
    executed_at: datetime | None
    executed_by: int | None
    disposal_cost: Decimal | None
    note: str | None
    document_ref: str | None
    # Denormalized item fields for list views
    item_code: str | None = None
    item_name: str | None = None

    model_config = {"from_attributes": True}
