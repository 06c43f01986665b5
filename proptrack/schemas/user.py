from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from proptrack.models.user import UserRole


class UserBase(BaseModel):
    username: str = Field(..., min_length=2, max_length=64)
    email: EmailStr
    full_name: str | None = None
    role: UserRole = UserRole.user
    is_active: bool = True


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


class UserUpdate(BaseModel):
    username: str | None = None
    email: EmailStr | None = None
    full_name: str | None = None
    role: UserRole | None = None
    is_active: bool | None = None
    password: str | None = Field(None, min_length=8)


class UserResponse(UserBase):
    # stored addresses are not re-validated on the way out
    email: str
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
