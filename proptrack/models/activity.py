from datetime import datetime, timezone
from sqlalchemy import ForeignKey, String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from proptrack.database import Base


class ActivityLog(Base):
    """Append-only audit trail."""

    __tablename__ = "activity_log"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    subject_type: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    subject_id: Mapped[int | None] = mapped_column(nullable=True, index=True)
    event: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    properties: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    causer_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    causer: Mapped["User | None"] = relationship()
