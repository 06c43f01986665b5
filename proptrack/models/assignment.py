import enum
from datetime import datetime, timezone, date
from sqlalchemy import ForeignKey, String, DateTime, Date, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from proptrack.database import Base


class AssignmentStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    active = "active"
    returned = "returned"
    cancelled = "cancelled"


class Assignment(Base):
    """An assignment claims its item's status while active.

    Rows are soft-deleted through ``deleted_at``; a soft delete is treated as
    a cancellation by the assignment cascade.
    """

    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    assigned_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    status: Mapped[str] = mapped_column(
        SAEnum(AssignmentStatus, values_callable=lambda e: [x.value for x in e]),
        default=AssignmentStatus.active,
        nullable=False,
        index=True,
    )
    assigned_date: Mapped[date] = mapped_column(
        Date,
        default=lambda: datetime.now(timezone.utc).date(),
        nullable=False,
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    returned_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    purpose: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    condition_on_assignment: Mapped[str | None] = mapped_column(String(32), nullable=True)
    condition_on_return: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    item: Mapped["Item"] = relationship(back_populates="assignments")
    user: Mapped["User"] = relationship(back_populates="assignments", foreign_keys=[user_id])
    assigned_by_user: Mapped["User | None"] = relationship(foreign_keys=[assigned_by])

    @property
    def is_overdue(self) -> bool:
        return (
            self.status == AssignmentStatus.active
            and self.due_date is not None
            and self.due_date < datetime.now(timezone.utc).date()
        )
