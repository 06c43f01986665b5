from pydantic import BaseModel
from proptrack.schemas.assignment import AssignmentSummary
from proptrack.schemas.item_return import ReturnStats
from proptrack.schemas.service_request import RequestStats


class ItemOverview(BaseModel):
    total: int
    by_status: dict[str, int]
    needing_maintenance: int


class MaintenanceOverview(BaseModel):
    pending: int
    scheduled: int
    in_progress: int
    completed: int


class DisposalOverview(BaseModel):
    pending: int
    approved: int
    executed: int


class Dashboard(BaseModel):
    items: ItemOverview
    assignments: AssignmentSummary
    returns: ReturnStats
    maintenances: MaintenanceOverview
    requests: RequestStats
    disposals: DisposalOverview
