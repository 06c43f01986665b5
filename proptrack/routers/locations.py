from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.schemas.location import (
    LocationCreate, LocationUpdate, LocationResponse, LocationReassign, LocationReassignResult, LocationStats,
)
from proptrack.schemas.item import ItemResponse
from proptrack.schemas.pagination import Page
from proptrack.routers.auth import require_session_manager, require_session_admin
import proptrack.services.location_service as svc

router = APIRouter(prefix="/api/locations", tags=["locations"])


@router.get("", response_model=Page[LocationResponse])
def list_locations(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    search: str = Query(""),
    building: str | None = Query(None),
    floor: str | None = Query(None),
    is_active: bool | None = Query(None),
    with_deleted: bool = Query(False),
    db: Session = Depends(get_db),
):
    return svc.get_locations(db, page=page, size=size, search=search, building=building, floor=floor,
                             is_active=is_active, with_deleted=with_deleted)


@router.get("/active", response_model=list[LocationResponse])
def active_locations(db: Session = Depends(get_db)):
    return svc.get_active_locations(db)


@router.get("/buildings", response_model=list[str])
def buildings(db: Session = Depends(get_db)):
    return svc.get_buildings(db)


@router.get("/stats", response_model=LocationStats)
def location_stats(db: Session = Depends(get_db)):
    return svc.get_statistics(db)


@router.post("", response_model=LocationResponse, status_code=201)
def create_location(data: LocationCreate, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.create_location(db, data, user_id)


@router.get("/{loc_id}", response_model=LocationResponse)
def get_location(loc_id: int, db: Session = Depends(get_db)):
    return svc.get_location(db, loc_id)


@router.put("/{loc_id}", response_model=LocationResponse)
def update_location(loc_id: int, data: LocationUpdate, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.update_location(db, loc_id, data, user_id)


@router.post("/{loc_id}/toggle-active", response_model=LocationResponse)
def toggle_location(loc_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_session_manager)):
    return svc.toggle_active(db, loc_id, user_id)


@router.delete("/{loc_id}", response_model=LocationResponse)
def delete_location(loc_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_session_manager)):
    return svc.delete_location(db, loc_id, user_id)


@router.post("/{loc_id}/restore", response_model=LocationResponse)
def restore_location(loc_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_session_manager)):
    return svc.restore_location(db, loc_id, user_id)


@router.delete("/{loc_id}/permanent", status_code=204)
def purge_location(loc_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_session_admin)):
    svc.purge_location(db, loc_id, user_id)


@router.post("/{loc_id}/reassign", response_model=LocationReassignResult)
def reassign_items(loc_id: int, data: LocationReassign, db: Session = Depends(get_db),
                   user_id: int = Depends(require_session_manager)):
    moved = svc.reassign_items(db, loc_id, data.to_location_id, user_id)
    return LocationReassignResult(moved=moved, to_location_id=data.to_location_id)


@router.get("/{loc_id}/items", response_model=list[ItemResponse])
def items_at_location(loc_id: int, db: Session = Depends(get_db)):
    return svc.get_items_at_location(db, loc_id)
