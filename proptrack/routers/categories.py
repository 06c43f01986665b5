from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.schemas.category import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryReassign, CategoryReassignResult, CategoryStats,
)
from proptrack.schemas.pagination import Page
from proptrack.routers.auth import require_session_manager, require_session_admin
import proptrack.services.category_service as svc

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=Page[CategoryResponse])
def list_categories(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    search: str = Query(""),
    is_active: bool | None = Query(None),
    with_deleted: bool = Query(False),
    db: Session = Depends(get_db),
):
    return svc.get_categories(db, page=page, size=size, search=search, is_active=is_active,
                              with_deleted=with_deleted)


@router.get("/active", response_model=list[CategoryResponse])
def active_categories(db: Session = Depends(get_db)):
    return svc.get_active_categories(db)


@router.get("/stats", response_model=CategoryStats)
def category_stats(db: Session = Depends(get_db)):
    return svc.get_statistics(db)


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(data: CategoryCreate, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.create_category(db, data, user_id)


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return svc.get_category(db, category_id)


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(category_id: int, data: CategoryUpdate, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.update_category(db, category_id, data, user_id)


@router.delete("/{category_id}", response_model=CategoryResponse)
def delete_category(category_id: int, db: Session = Depends(get_db),
                    user_id: int = Depends(require_session_manager)):
    return svc.delete_category(db, category_id, user_id)


@router.post("/{category_id}/restore", response_model=CategoryResponse)
def restore_category(category_id: int, db: Session = Depends(get_db),
                     user_id: int = Depends(require_session_manager)):
    return svc.restore_category(db, category_id, user_id)


@router.delete("/{category_id}/permanent", status_code=204)
def purge_category(category_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_session_admin)):
    svc.purge_category(db, category_id, user_id)


@router.post("/{category_id}/reassign", response_model=CategoryReassignResult)
def reassign_items(category_id: int, data: CategoryReassign, db: Session = Depends(get_db),
                   user_id: int = Depends(require_session_manager)):
    moved = svc.reassign_items(db, category_id, data.to_category_id, user_id)
    return CategoryReassignResult(moved=moved, to_category_id=data.to_category_id)
