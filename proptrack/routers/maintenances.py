from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.schemas.maintenance import (
    MaintenanceCreate, MaintenanceUpdate, MaintenanceComplete, MaintenanceResponse,
)
from proptrack.schemas.pagination import Page
from proptrack.routers.auth import require_session_manager, require_session_user
import proptrack.services.maintenance_service as svc

router = APIRouter(prefix="/api/maintenances", tags=["maintenances"])


@router.get("", response_model=Page[MaintenanceResponse])
def list_maintenances(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    status: str | None = Query(None),
    item_id: int | None = Query(None),
    priority: str | None = Query(None),
    maintenance_type: str | None = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.get_maintenances(db, page=page, size=size, status=status, item_id=item_id,
                                priority=priority, maintenance_type=maintenance_type)


@router.post("", response_model=MaintenanceResponse, status_code=201)
def create_maintenance(data: MaintenanceCreate, db: Session = Depends(get_db),
                       user_id: int = Depends(require_session_manager)):
    return svc.create_maintenance(db, data, user_id)


@router.get("/{maintenance_id}", response_model=MaintenanceResponse)
def get_maintenance(maintenance_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_maintenance(db, maintenance_id)


@router.put("/{maintenance_id}", response_model=MaintenanceResponse)
def update_maintenance(maintenance_id: int, data: MaintenanceUpdate, db: Session = Depends(get_db),
                       user_id: int = Depends(require_session_manager)):
    return svc.update_maintenance(db, maintenance_id, data, user_id)


@router.post("/{maintenance_id}/start", response_model=MaintenanceResponse)
def start_maintenance(maintenance_id: int, db: Session = Depends(get_db),
                      user_id: int = Depends(require_session_manager)):
    return svc.start_maintenance(db, maintenance_id, user_id)


@router.post("/{maintenance_id}/complete", response_model=MaintenanceResponse)
def complete_maintenance(maintenance_id: int, data: MaintenanceComplete, db: Session = Depends(get_db),
                         user_id: int = Depends(require_session_manager)):
    return svc.complete_maintenance(db, maintenance_id, data, user_id)


@router.post("/{maintenance_id}/cancel", response_model=MaintenanceResponse)
def cancel_maintenance(maintenance_id: int, db: Session = Depends(get_db),
                       user_id: int = Depends(require_session_manager)):
    return svc.cancel_maintenance(db, maintenance_id, user_id)


@router.delete("/{maintenance_id}", status_code=204)
def delete_maintenance(maintenance_id: int, hard: bool = Query(False), db: Session = Depends(get_db),
                       user_id: int = Depends(require_session_manager)):
    svc.delete_maintenance(db, maintenance_id, hard=hard, user_id=user_id)
