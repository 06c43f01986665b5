from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from proptrack.database import get_db
from proptrack.schemas.dashboard import Dashboard
from proptrack.routers.auth import require_session_manager
import proptrack.services.dashboard_service as svc

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=Dashboard)
def dashboard(db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.get_dashboard(db)
