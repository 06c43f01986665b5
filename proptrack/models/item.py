import enum
from datetime import datetime, timezone, date
from decimal import Decimal
from sqlalchemy import String, Boolean, DateTime, Date, Numeric, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from proptrack.database import Base


class ItemStatus(str, enum.Enum):
    available = "available"
    assigned = "assigned"
    in_use = "in_use"
    under_maintenance = "under_maintenance"
    damaged = "damaged"
    pending_disposal = "pending_disposal"
    disposed = "disposed"
    lost = "lost"


class ItemCondition(str, enum.Enum):
    excellent = "excellent"
    good = "good"
    fair = "fair"
    poor = "poor"
    damaged = "damaged"


# items in these states are still in circulation at their location or category
IN_SERVICE_STATUSES = (ItemStatus.available, ItemStatus.assigned, ItemStatus.in_use, ItemStatus.under_maintenance)


def _values(e):
    return [x.value for x in e]


class Item(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id"), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    brand: Mapped[str | None] = mapped_column(String(128), nullable=True)
    model: Mapped[str | None] = mapped_column(String(128), nullable=True)
    serial_number: Mapped[str | None] = mapped_column(String(128), nullable=True)
    purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    purchase_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    location_id: Mapped[int | None] = mapped_column(ForeignKey("locations.id"), nullable=True, index=True)
    responsible_person: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Written only through item_service.change_status
    status: Mapped[str] = mapped_column(
        SAEnum(ItemStatus, values_callable=_values),
        default=ItemStatus.available,
        nullable=False,
        index=True,
    )
    condition: Mapped[str] = mapped_column(
        SAEnum(ItemCondition, values_callable=_values),
        default=ItemCondition.good,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
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

    category: Mapped["Category | None"] = relationship(back_populates="items")
    location: Mapped["Location | None"] = relationship(back_populates="items")
    assignments: Mapped[list["Assignment"]] = relationship(
        back_populates="item", order_by="Assignment.assigned_date"
    )
    maintenances: Mapped[list["Maintenance"]] = relationship(
        back_populates="item", order_by="Maintenance.scheduled_date"
    )
    disposals: Mapped[list["Disposal"]] = relationship(back_populates="item")

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category is not None else None
