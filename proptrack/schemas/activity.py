from datetime import datetime
from pydantic import BaseModel


class ActivityResponse(BaseModel):
    id: int
    subject_type: str | None
    subject_id: int | None
    event: str | None
    description: str
    properties: dict
    causer_id: int | None
    created_at: datetime

    model_config = {"from_attributes": True}
