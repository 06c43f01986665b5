from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from proptrack.database import Base


class Location(Base):
    """A place items are kept: a room on a floor of a building.

    ``is_active`` hides a location from pickers; ``deleted_at`` removes it
    from every listing until it is restored.
    """

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    building: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    floor: Mapped[str | None] = mapped_column(String(32), nullable=True)
    room: Mapped[str | None] = mapped_column(String(32), nullable=True)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
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
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    items: Mapped[list["Item"]] = relationship(back_populates="location")

    @property
    def full_address(self) -> str:
        parts = [
            f"Room {self.room}" if self.room else None,
            f"Floor {self.floor}" if self.floor else None,
            self.building,
            self.name,
        ]
        return ", ".join(p for p in parts if p)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
