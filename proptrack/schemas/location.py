from datetime import datetime
from pydantic import BaseModel, Field, field_validator


def _normalize_code(v: str | None) -> str | None:
    return v.strip().upper() if v is not None else v


class LocationCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    building: str | None = Field(None, max_length=128)
    floor: str | None = Field(None, max_length=32)
    room: str | None = Field(None, max_length=32)
    description: str | None = Field(None, max_length=1000)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def upper_code(cls, v):
        return _normalize_code(v)


class LocationUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=32)
    name: str | None = Field(None, min_length=1, max_length=255)
    building: str | None = Field(None, max_length=128)
    floor: str | None = Field(None, max_length=32)
    room: str | None = Field(None, max_length=32)
    description: str | None = Field(None, max_length=1000)
    is_active: bool | None = None

    @field_validator("code", "name", "is_active")
    @classmethod
    def required_when_sent(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return _normalize_code(v) if info.field_name == "code" else v


class LocationResponse(BaseModel):
    id: int
    code: str
    name: str
    building: str | None
    floor: str | None
    room: str | None
    description: str | None
    full_address: str
    is_active: bool
    created_at: datetime
    deleted_at: datetime | None

    model_config = {"from_attributes": True}


class LocationReassign(BaseModel):
    to_location_id: int


class LocationReassignResult(BaseModel):
    moved: int
    to_location_id: int


class LocationStats(BaseModel):
    total: int
    active: int
    inactive: int
    deleted: int
    with_items: int
    empty: int
    buildings: int
