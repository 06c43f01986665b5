import enum
from datetime import datetime, timezone, date
from decimal import Decimal
from sqlalchemy import ForeignKey, String, Boolean, DateTime, Date, Numeric, Integer, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from proptrack.database import Base
from proptrack.models.item import ItemCondition


class ReturnStatus(str, enum.Enum):
    pending_inspection = "pending_inspection"
    inspected = "inspected"
    approved = "approved"
    rejected = "rejected"


class ItemReturn(Base):
    """The hand-back of an assigned item, held until someone inspects it.

    Creating a return closes its assignment. The item's final status is
    decided when the inspected return is approved.
    """

    __tablename__ = "returns"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    assignment_id: Mapped[int] = mapped_column(ForeignKey("assignments.id"), nullable=False, index=True)
    returned_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    inspected_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    status: Mapped[str] = mapped_column(
        SAEnum(ReturnStatus, values_callable=lambda e: [x.value for x in e]),
        default=ReturnStatus.pending_inspection,
        nullable=False,
        index=True,
    )
    return_date: Mapped[date] = mapped_column(Date, nullable=False)
    inspection_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    condition_on_return: Mapped[str] = mapped_column(
        SAEnum(ItemCondition, values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    is_damaged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    damage_description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    is_late: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    days_late: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    return_notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    inspection_notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    penalty_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    penalty_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    assignment: Mapped["Assignment"] = relationship()
    returned_by_user: Mapped["User | None"] = relationship(foreign_keys=[returned_by])
    inspector: Mapped["User | None"] = relationship(foreign_keys=[inspected_by])

    @property
    def item_id(self) -> int | None:
        return self.assignment.item_id if self.assignment is not None else None
