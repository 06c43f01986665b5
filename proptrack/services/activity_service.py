from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import select
from proptrack.models.activity import ActivityLog
from proptrack.schemas.pagination import Page, paginate


def log_activity(
    db: Session,
    description: str,
    subject=None,
    properties: dict | None = None,
    causer_id: int | None = None,
    event: str | None = None,
) -> ActivityLog:
    """Append an activity entry. The caller commits."""
    entry = ActivityLog(
        subject_type=type(subject).__name__ if subject is not None else None,
        subject_id=getattr(subject, "id", None),
        event=event,
        description=description,
        properties=properties or {},
        causer_id=causer_id,
    )
    db.add(entry)
    return entry


def get_activity(
    db: Session,
    page: int = 1,
    size: int = 50,
    subject_type: str | None = None,
    subject_id: int | None = None,
    event: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> Page:
    query = select(ActivityLog)
    if subject_type:
        query = query.where(ActivityLog.subject_type == subject_type)
    if subject_id is not None:
        query = query.where(ActivityLog.subject_id == subject_id)
    if event:
        query = query.where(ActivityLog.event == event)
    if date_from:
        query = query.where(ActivityLog.created_at >= date_from)
    if date_to:
        query = query.where(ActivityLog.created_at <= date_to)
    query = query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
    return paginate(db, query, page, size)
