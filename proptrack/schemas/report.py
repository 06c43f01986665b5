from datetime import datetime
from typing import Any
from pydantic import BaseModel


class ReportInfo(BaseModel):
    key: str
    name: str
    title: str
    description: str


class ReportResult(BaseModel):
    name: str
    title: str
    description: str
    data: list[dict[str, Any]]
    columns: dict[str, str]
    summary: dict[str, Any]
    filters: dict[str, Any]
    available_filters: dict[str, Any]
    generated_at: datetime
