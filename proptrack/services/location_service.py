"""Location directory.

Locations are soft-deleted through ``deleted_at`` and can be restored. A
location that still holds items cannot be deleted, and one whose items are
still in service cannot be deactivated; reassign the items first.
"""
import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy import select, func, exists, update, or_
from fastapi import HTTPException

from proptrack.exceptions import LocationError
from proptrack.models.item import Item, IN_SERVICE_STATUSES
from proptrack.models.location import Location
from proptrack.schemas.location import LocationCreate, LocationUpdate, LocationStats
from proptrack.schemas.pagination import Page, paginate
from proptrack.services.activity_service import log_activity

logger = logging.getLogger(__name__)


def _live():
    return select(Location).where(Location.deleted_at.is_(None))


def get_locations(
    db: Session,
    page: int = 1,
    size: int = 50,
    search: str = "",
    building: str | None = None,
    floor: str | None = None,
    is_active: bool | None = None,
    with_deleted: bool = False,
) -> Page:
    query = select(Location) if with_deleted else _live()
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Location.name.ilike(pattern),
                Location.code.ilike(pattern),
                Location.building.ilike(pattern),
                Location.room.ilike(pattern),
                Location.description.ilike(pattern),
            )
        )
    if building:
        query = query.where(Location.building == building)
    if floor:
        query = query.where(Location.floor == floor)
    if is_active is not None:
        query = query.where(Location.is_active == is_active)
    return paginate(db, query.order_by(Location.code), page, size)


def get_active_locations(db: Session) -> list[Location]:
    return db.scalars(_live().where(Location.is_active == True).order_by(Location.name)).all()


def get_buildings(db: Session) -> list[str]:
    return db.scalars(
        select(Location.building)
        .where(Location.deleted_at.is_(None), Location.building.is_not(None))
        .distinct()
        .order_by(Location.building)
    ).all()


def get_location(db: Session, loc_id: int, include_deleted: bool = False) -> Location:
    loc = db.get(Location, loc_id)
    if not loc or (loc.is_deleted and not include_deleted):
        raise HTTPException(status_code=404, detail="Location not found")
    return loc


def _ensure_code_free(db: Session, code: str, loc_id: int | None = None) -> None:
    # deleted locations keep their code until they are purged
    clash = select(Location.id).where(Location.code == code)
    if loc_id is not None:
        clash = clash.where(Location.id != loc_id)
    if db.scalar(select(clash.exists())):
        raise LocationError(f"Location code '{code}' already exists.")


def _holds_items(db: Session, loc: Location, in_service_only: bool = False, include_retired: bool = False) -> bool:
    criteria = [Item.location_id == loc.id]
    if in_service_only:
        criteria.append(Item.status.in_(IN_SERVICE_STATUSES))
    if not include_retired:
        criteria.append(Item.is_active == True)
    return db.scalar(select(exists().where(*criteria)))


def create_location(db: Session, data: LocationCreate, user_id: int | None = None) -> Location:
    _ensure_code_free(db, data.code)
    loc = Location(**data.model_dump())
    db.add(loc)
    db.flush()
    log_activity(db, "Location created", subject=loc, properties={"code": loc.code}, causer_id=user_id,
                 event="created")
    db.commit()
    db.refresh(loc)
    return loc


def update_location(db: Session, loc_id: int, data: LocationUpdate, user_id: int | None = None) -> Location:
    loc = get_location(db, loc_id)
    changes = data.model_dump(exclude_unset=True)
    if "code" in changes:
        _ensure_code_free(db, changes["code"], loc.id)
    if changes.get("is_active") is False and loc.is_active and _holds_items(db, loc, in_service_only=True):
        raise LocationError(f"Cannot deactivate location '{loc.name}' because it has active items assigned.")
    old = {field: getattr(loc, field) for field in changes}
    for field, value in changes.items():
        setattr(loc, field, value)
    log_activity(db, "Location updated", subject=loc, properties={"old": old, "new": changes},
                 causer_id=user_id, event="updated")
    db.commit()
    db.refresh(loc)
    return loc


def toggle_active(db: Session, loc_id: int, user_id: int | None = None) -> Location:
    loc = get_location(db, loc_id)
    return update_location(db, loc.id, LocationUpdate(is_active=not loc.is_active), user_id)


def delete_location(db: Session, loc_id: int, user_id: int | None = None) -> Location:
    loc = get_location(db, loc_id)
    if _holds_items(db, loc):
        raise LocationError(
            f"Cannot delete location '{loc.name}' because it has associated items. "
            "Please reassign or remove items first."
        )
    loc.deleted_at = datetime.now(timezone.utc)
    log_activity(db, "Location deleted", subject=loc, causer_id=user_id, event="deleted")
    db.commit()
    db.refresh(loc)
    logger.info("Location %s soft deleted", loc.code)
    return loc


def restore_location(db: Session, loc_id: int, user_id: int | None = None) -> Location:
    loc = get_location(db, loc_id, include_deleted=True)
    if not loc.is_deleted:
        raise LocationError(f"Location '{loc.name}' is not deleted.")
    loc.deleted_at = None
    log_activity(db, "Location restored", subject=loc, causer_id=user_id, event="restored")
    db.commit()
    db.refresh(loc)
    return loc


def purge_location(db: Session, loc_id: int, user_id: int | None = None) -> None:
    """Remove a location row for good. Retired items still block it."""
    loc = get_location(db, loc_id, include_deleted=True)
    if _holds_items(db, loc, include_retired=True):
        raise LocationError(
            f"Cannot delete location '{loc.name}' because it has associated items. "
            "Please reassign or remove items first."
        )
    log_activity(db, "Location permanently deleted", properties={"location_id": loc.id, "code": loc.code},
                 causer_id=user_id, event="deleted")
    logger.info("Location %s purged", loc.code)
    db.delete(loc)
    db.commit()


def reassign_items(db: Session, from_id: int, to_id: int, user_id: int | None = None) -> int:
    if from_id == to_id:
        raise LocationError("Items are already at this location.")
    source = get_location(db, from_id)
    target = get_location(db, to_id)
    if not target.is_active:
        raise LocationError(f"Location '{target.name}' is inactive.")
    moved = db.execute(
        update(Item).where(Item.location_id == source.id).values(location_id=target.id)
    ).rowcount
    log_activity(
        db,
        "Items reassigned to another location",
        subject=source,
        properties={"to_location": target.code, "items_count": moved},
        causer_id=user_id,
        event="reassigned",
    )
    db.commit()
    logger.info("Moved %s items from location %s to %s", moved, source.code, target.code)
    return moved


def get_statistics(db: Session) -> LocationStats:
    def count(*criteria) -> int:
        return db.scalar(select(func.count(Location.id)).where(*criteria))

    live = Location.deleted_at.is_(None)
    has_items = exists().where(Item.location_id == Location.id)
    return LocationStats(
        total=count(live),
        active=count(live, Location.is_active == True),
        inactive=count(live, Location.is_active == False),
        deleted=count(Location.deleted_at.is_not(None)),
        with_items=count(live, has_items),
        empty=count(live, ~has_items),
        buildings=db.scalar(
            select(func.count(func.distinct(Location.building))).where(live, Location.building.is_not(None))
        ),
    )


def get_items_at_location(db: Session, loc_id: int) -> list[Item]:
    get_location(db, loc_id)
    return db.scalars(
        select(Item).where(Item.location_id == loc_id, Item.is_active == True).order_by(Item.code)
    ).all()
