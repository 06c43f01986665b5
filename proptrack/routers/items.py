from fastapi import APIRouter, Depends, Query, HTTPException
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.models.item import ItemStatus
from proptrack.schemas.item import ItemCreate, ItemUpdate, ItemResponse, ItemStatusChange, ItemTransitions
from proptrack.schemas.activity import ActivityResponse
from proptrack.schemas.assignment import AssignmentResponse
from proptrack.schemas.disposal import DisposalRequest, DisposalResponse
from proptrack.schemas.pagination import Page
from proptrack.routers.auth import require_session_manager
from proptrack.services import item_state_machine
import proptrack.services.item_service as svc
import proptrack.services.disposal_service as disposal_svc

router = APIRouter(prefix="/api/items", tags=["items"])


@router.get("", response_model=Page[ItemResponse])
def list_items(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    search: str = Query(""),
    category_id: int | None = Query(None),
    status: str = Query(""),
    location_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    return svc.get_items(db, page=page, size=size, search=search, category_id=category_id, status=status,
                         location_id=location_id)


@router.post("", response_model=ItemResponse, status_code=201)
def create_item(data: ItemCreate, db: Session = Depends(get_db), user_id: int = Depends(require_session_manager)):
    return svc.create_item(db, data, user_id)


@router.get("/by-code/{code}", response_model=ItemResponse)
def get_item_by_code(code: str, db: Session = Depends(get_db)):
    item = svc.get_item_by_code(db, code)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.get("/needing-maintenance", response_model=list[ItemResponse])
def items_needing_maintenance(months: int = Query(6, ge=1), db: Session = Depends(get_db)):
    return svc.get_items_needing_maintenance(db, months)


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)):
    return svc.get_item(db, item_id)


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(item_id: int, data: ItemUpdate, db: Session = Depends(get_db),
                user_id: int = Depends(require_session_manager)):
    return svc.update_item(db, item_id, data, user_id)


@router.delete("/{item_id}", response_model=ItemResponse)
def delete_item(item_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_session_manager)):
    return svc.delete_item(db, item_id, user_id)


@router.post("/{item_id}/status", response_model=ItemResponse)
def change_status(item_id: int, data: ItemStatusChange, db: Session = Depends(get_db),
                  user_id: int = Depends(require_session_manager)):
    return svc.set_status(db, item_id, data.status, data.reason, user_id)


@router.get("/{item_id}/transitions", response_model=ItemTransitions)
def allowed_transitions(item_id: int, db: Session = Depends(get_db)):
    item = svc.get_item(db, item_id)
    return ItemTransitions(
        status=item.status,
        allowed=item_state_machine.allowed_transitions(ItemStatus(item.status)),
    )


@router.post("/{item_id}/lost", response_model=ItemResponse)
def mark_lost(item_id: int, data: ItemStatusChange | None = None, db: Session = Depends(get_db),
              user_id: int = Depends(require_session_manager)):
    return svc.mark_as_lost(db, item_id, data.reason if data else None, user_id)


@router.post("/{item_id}/found", response_model=ItemResponse)
def mark_found(item_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_session_manager)):
    return svc.mark_as_found(db, item_id, user_id)


@router.get("/{item_id}/history", response_model=list[ActivityResponse])
def item_history(item_id: int, db: Session = Depends(get_db)):
    return svc.get_item_history(db, item_id)


@router.get("/{item_id}/assignments", response_model=list[AssignmentResponse])
def item_assignments(item_id: int, db: Session = Depends(get_db)):
    return svc.get_item_assignments(db, item_id)


@router.post("/{item_id}/dispose", response_model=DisposalResponse, status_code=201)
def request_disposal(item_id: int, data: DisposalRequest, db: Session = Depends(get_db),
                     user_id: int = Depends(require_session_manager)):
    return disposal_svc.request_disposal(db, item_id, data, user_id)
