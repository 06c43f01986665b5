import enum
from datetime import datetime, timezone
from sqlalchemy import ForeignKey, String, Boolean, DateTime, JSON, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from proptrack.database import Base


def _values(e):
    return [x.value for x in e]


class RequestType(str, enum.Enum):
    assignment = "assignment"
    purchase = "purchase"
    disposal = "disposal"
    maintenance = "maintenance"
    transfer = "transfer"
    other = "other"


class RequestStatus(str, enum.Enum):
    pending = "pending"
    under_review = "under_review"
    approved = "approved"
    rejected = "rejected"
    changes_requested = "changes_requested"
    completed = "completed"
    cancelled = "cancelled"


class RequestPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class ServiceRequest(Base):
    """Something a user asks the property office to do.

    Lifecycle is governed by ``proptrack.services.request_state_machine``.
    """

    __tablename__ = "requests"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(SAEnum(RequestType, values_callable=_values), nullable=False, index=True)
    item_id: Mapped[int | None] = mapped_column(ForeignKey("items.id"), nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(4000), nullable=True)
    priority: Mapped[str] = mapped_column(
        SAEnum(RequestPriority, values_callable=_values),
        default=RequestPriority.medium,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        SAEnum(RequestStatus, values_callable=_values),
        default=RequestStatus.pending,
        nullable=False,
        index=True,
    )
    reviewed_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    # free-form extras per request type (quantity, budget, target location...)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    requester: Mapped["User"] = relationship(foreign_keys=[user_id])
    reviewer: Mapped["User | None"] = relationship(foreign_keys=[reviewed_by])
    item: Mapped["Item | None"] = relationship()
    comments: Mapped[list["RequestComment"]] = relationship(
        back_populates="request", cascade="all, delete-orphan", order_by="RequestComment.id"
    )


class RequestComment(Base):
    __tablename__ = "request_comments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    request_id: Mapped[int] = mapped_column(ForeignKey("requests.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    comment: Mapped[str] = mapped_column(String(4000), nullable=False)
    # staff-only notes, hidden from the requester
    is_internal: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    request: Mapped["ServiceRequest"] = relationship(back_populates="comments")
    user: Mapped["User"] = relationship()
