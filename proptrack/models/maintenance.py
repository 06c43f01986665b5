import enum
from datetime import datetime, timezone, date
from decimal import Decimal
from sqlalchemy import ForeignKey, String, DateTime, Date, Numeric, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from proptrack.database import Base


class MaintenanceStatus(str, enum.Enum):
    pending = "pending"
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


# Statuses under which a maintenance record holds its item
ACTIVE_MAINTENANCE_STATUSES = (MaintenanceStatus.scheduled, MaintenanceStatus.in_progress)


class MaintenanceType(str, enum.Enum):
    preventive = "preventive"
    corrective = "corrective"
    predictive = "predictive"
    emergency = "emergency"


class MaintenancePriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


def _values(e):
    return [x.value for x in e]


class Maintenance(Base):
    __tablename__ = "maintenances"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)
    maintenance_type: Mapped[str] = mapped_column(
        SAEnum(MaintenanceType, values_callable=_values),
        default=MaintenanceType.corrective,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        SAEnum(MaintenanceStatus, values_callable=_values),
        default=MaintenanceStatus.scheduled,
        nullable=False,
        index=True,
    )
    priority: Mapped[str] = mapped_column(
        SAEnum(MaintenancePriority, values_callable=_values),
        default=MaintenancePriority.medium,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    action_taken: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    estimated_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    actual_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    assigned_to: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    requested_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    item_condition_before: Mapped[str | None] = mapped_column(String(32), nullable=True)
    item_condition_after: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    item: Mapped["Item"] = relationship(back_populates="maintenances")
    technician: Mapped["User | None"] = relationship(foreign_keys=[assigned_to])
    requester: Mapped["User | None"] = relationship(foreign_keys=[requested_by])
