from datetime import datetime, date
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from proptrack.models.item import ItemStatus, ItemCondition


class ItemBase(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    category_id: int | None = None
    description: str | None = None
    brand: str | None = None
    model: str | None = None
    serial_number: str | None = None
    purchase_date: date | None = None
    purchase_price: Decimal | None = None
    location_id: int | None = None
    responsible_person: str | None = None
    condition: ItemCondition = ItemCondition.good


class ItemCreate(ItemBase):
    pass


class ItemUpdate(BaseModel):
    """Status is deliberately absent: it changes only through /status."""

    code: str | None = None
    name: str | None = None
    category_id: int | None = None
    description: str | None = None
    brand: str | None = None
    model: str | None = None
    serial_number: str | None = None
    purchase_date: date | None = None
    purchase_price: Decimal | None = None
    location_id: int | None = None
    responsible_person: str | None = None
    condition: ItemCondition | None = None

    @field_validator("code", "name", "condition")
    @classmethod
    def required_when_sent(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ItemStatusChange(BaseModel):
    # plain str so an unknown value reaches the service and fails as InvalidStatus
    status: str
    reason: str | None = None


class ItemResponse(ItemBase):
    id: int
    category_name: str | None = None
    status: ItemStatus
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ItemTransitions(BaseModel):
    status: ItemStatus
    allowed: list[ItemStatus]
