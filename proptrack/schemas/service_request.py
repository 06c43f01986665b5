from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from proptrack.models.service_request import RequestType, RequestStatus, RequestPriority


class RequestCreate(BaseModel):
    type: RequestType
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    item_id: int | None = None
    priority: RequestPriority = RequestPriority.medium
    details: dict | None = None


class RequestUpdate(BaseModel):
    type: RequestType | None = None
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    item_id: int | None = None
    priority: RequestPriority | None = None
    details: dict | None = None

    @field_validator("type", "title", "priority")
    @classmethod
    def required_when_sent(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class RequestApprove(BaseModel):
    review_notes: str | None = None
    # run the request straight away (assignment requests only)
    auto_execute: bool = True


class RequestReject(BaseModel):
    reason: str = Field(..., min_length=1)


class RequestChanges(BaseModel):
    notes: str = Field(..., min_length=1)


class RequestCancel(BaseModel):
    reason: str | None = None


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1)
    is_internal: bool = False


class CommentResponse(BaseModel):
    id: int
    request_id: int
    user_id: int
    comment: str
    is_internal: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class RequestResponse(BaseModel):
    id: int
    user_id: int
    type: RequestType
    item_id: int | None
    title: str
    description: str | None
    priority: RequestPriority
    status: RequestStatus
    reviewed_by: int | None
    reviewed_at: datetime | None
    review_notes: str | None
    details: dict | None
    completed_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class RequestDetail(RequestResponse):
    comments: list[CommentResponse] = []
    next_states: list[RequestStatus] = []


class RequestStats(BaseModel):
    total: int
    pending: int
    under_review: int
    approved: int
    rejected: int
    completed: int
    cancelled: int
    awaiting_review: int
    high_priority: int
