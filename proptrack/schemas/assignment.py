from datetime import datetime, date
from pydantic import BaseModel, field_validator
from proptrack.models.assignment import AssignmentStatus
from proptrack.models.item import ItemCondition


class AssignmentCreate(BaseModel):
    item_id: int
    user_id: int
    status: AssignmentStatus = AssignmentStatus.active
    assigned_date: date | None = None
    due_date: date | None = None
    purpose: str | None = None
    notes: str | None = None
    condition_on_assignment: ItemCondition | None = None


class AssignmentUpdate(BaseModel):
    status: AssignmentStatus | None = None
    due_date: date | None = None
    purpose: str | None = None
    notes: str | None = None

    @field_validator("status")
    @classmethod
    def status_not_null(cls, v):
        # omit the field to keep the current status
        if v is None:
            raise ValueError("status cannot be null")
        return v


class ReturnRequest(BaseModel):
    returned_date: date | None = None
    condition_on_return: ItemCondition | None = None
    notes: str | None = None


class AssignmentResponse(BaseModel):
    id: int
    item_id: int
    user_id: int
    assigned_by: int | None
    status: AssignmentStatus
    assigned_date: date
    due_date: date | None
    returned_date: date | None
    purpose: str | None
    notes: str | None
    condition_on_assignment: str | None
    condition_on_return: str | None
    is_overdue: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AssignmentStats(BaseModel):
    total: int
    active: int
    returned: int
    overdue: int


class AssignmentSummary(AssignmentStats):
    pending: int
    cancelled: int
