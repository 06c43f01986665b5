from datetime import datetime, date
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from proptrack.models.maintenance import MaintenanceStatus, MaintenanceType, MaintenancePriority
from proptrack.models.item import ItemCondition


class MaintenanceCreate(BaseModel):
    item_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    maintenance_type: MaintenanceType = MaintenanceType.corrective
    priority: MaintenancePriority = MaintenancePriority.medium
    status: MaintenanceStatus = MaintenanceStatus.scheduled
    scheduled_date: date | None = None
    estimated_cost: Decimal | None = None
    assigned_to: int | None = None


class MaintenanceUpdate(BaseModel):
    status: MaintenanceStatus | None = None
    title: str | None = None
    description: str | None = None
    priority: MaintenancePriority | None = None
    scheduled_date: date | None = None
    estimated_cost: Decimal | None = None
    assigned_to: int | None = None

    @field_validator("status", "title", "priority")
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class MaintenanceComplete(BaseModel):
    action_taken: str | None = None
    actual_cost: Decimal | None = None
    condition_after: ItemCondition | None = None


class MaintenanceResponse(BaseModel):
    id: int
    item_id: int
    title: str
    description: str | None
    maintenance_type: MaintenanceType
    status: MaintenanceStatus
    priority: MaintenancePriority
    scheduled_date: date | None
    started_at: datetime | None
    completed_at: datetime | None
    estimated_cost: Decimal | None
    actual_cost: Decimal | None
    action_taken: str | None
    assigned_to: int | None
    requested_by: int | None
    item_condition_before: str | None
    item_condition_after: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
