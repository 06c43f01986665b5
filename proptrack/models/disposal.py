import enum
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import ForeignKey, String, DateTime, Numeric, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from proptrack.database import Base


class DisposalReason(str, enum.Enum):
    liquidation = "liquidation"
    sale = "sale"
    donation = "donation"
    theft = "theft"
    loss = "loss"
    transfer = "transfer"


class DisposalStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    executed = "executed"


class Disposal(Base):
    """Disposal request: pending -> approved -> executed, or pending -> rejected."""

    __tablename__ = "disposals"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(
        SAEnum(DisposalReason, values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        SAEnum(DisposalStatus, values_callable=lambda e: [x.value for x in e]),
        default=DisposalStatus.pending,
        nullable=False,
    )
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    requested_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    executed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    executed_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    disposal_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    note: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    document_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)

    item: Mapped["Item"] = relationship(back_populates="disposals")
    requested_by_user: Mapped["User | None"] = relationship(foreign_keys=[requested_by])
    approved_by_user: Mapped["User | None"] = relationship(foreign_keys=[approved_by])
