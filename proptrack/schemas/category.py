from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class CategoryCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def upper_code(cls, v):
        return v.strip().upper()


class CategoryUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=32)
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    is_active: bool | None = None

    @field_validator("code", "name", "is_active")
    @classmethod
    def required_when_sent(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v.strip().upper() if info.field_name == "code" else v


class CategoryResponse(BaseModel):
    id: int
    code: str
    name: str
    description: str | None
    is_active: bool
    created_at: datetime
    deleted_at: datetime | None

    model_config = {"from_attributes": True}


class CategoryReassign(BaseModel):
    to_category_id: int


class CategoryReassignResult(BaseModel):
    moved: int
    to_category_id: int


class CategoryStats(BaseModel):
    total: int
    active: int
    inactive: int
    deleted: int
    with_items: int
    empty: int
