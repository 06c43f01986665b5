"""Headline numbers for the landing page, gathered from each workflow."""
from sqlalchemy.orm import Session
from sqlalchemy import select, func

from proptrack.models.disposal import Disposal, DisposalStatus
from proptrack.models.item import Item, ItemStatus
from proptrack.models.maintenance import Maintenance, MaintenanceStatus
from proptrack.schemas.dashboard import Dashboard, ItemOverview, MaintenanceOverview, DisposalOverview
from proptrack.services import assignment_service, item_service, request_service, return_service


def _grouped(db: Session, column, *criteria) -> dict[str, int]:
    rows = db.execute(select(column, func.count()).where(*criteria).group_by(column)).all()
    return {getattr(key, "value", key): count for key, count in rows}


def get_dashboard(db: Session) -> Dashboard:
    by_status = {status.value: 0 for status in ItemStatus}
    by_status.update(_grouped(db, Item.status, Item.is_active == True))
    maintenance = _grouped(db, Maintenance.status, Maintenance.deleted_at.is_(None))
    disposal = _grouped(db, Disposal.status)
    return Dashboard(
        items=ItemOverview(
            total=sum(by_status.values()),
            by_status=by_status,
            needing_maintenance=len(item_service.get_items_needing_maintenance(db)),
        ),
        assignments=assignment_service.get_summary(db),
        returns=return_service.get_statistics(db),
        maintenances=MaintenanceOverview(
            pending=maintenance.get(MaintenanceStatus.pending.value, 0),
            scheduled=maintenance.get(MaintenanceStatus.scheduled.value, 0),
            in_progress=maintenance.get(MaintenanceStatus.in_progress.value, 0),
            completed=maintenance.get(MaintenanceStatus.completed.value, 0),
        ),
        requests=request_service.get_statistics(db),
        disposals=DisposalOverview(
            pending=disposal.get(DisposalStatus.pending.value, 0),
            approved=disposal.get(DisposalStatus.approved.value, 0),
            executed=disposal.get(DisposalStatus.executed.value, 0),
        ),
    )
