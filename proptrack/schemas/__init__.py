from proptrack.schemas.user import UserCreate, UserUpdate, UserResponse
from proptrack.schemas.location import LocationCreate, LocationUpdate, LocationResponse
from proptrack.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from proptrack.schemas.item import ItemCreate, ItemUpdate, ItemResponse, ItemStatusChange
from proptrack.schemas.assignment import AssignmentCreate, AssignmentUpdate, ReturnRequest, AssignmentResponse
from proptrack.schemas.item_return import ReturnCreate, ReturnInspect, QuickReturn, ReturnResponse
from proptrack.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate, MaintenanceComplete, MaintenanceResponse
from proptrack.schemas.disposal import DisposalRequest, DisposalResponse
from proptrack.schemas.service_request import RequestCreate, RequestUpdate, RequestResponse, CommentCreate
from proptrack.schemas.report import ReportInfo, ReportResult
from proptrack.schemas.pagination import Page

__all__ = [
    "UserCreate", "UserUpdate", "UserResponse",
    "LocationCreate", "LocationUpdate", "LocationResponse",
    "CategoryCreate", "CategoryUpdate", "CategoryResponse",
    "ItemCreate", "ItemUpdate", "ItemResponse", "ItemStatusChange",
    "AssignmentCreate", "AssignmentUpdate", "ReturnRequest", "AssignmentResponse",
    "ReturnCreate", "ReturnInspect", "QuickReturn", "ReturnResponse",
    "MaintenanceCreate", "MaintenanceUpdate", "MaintenanceComplete", "MaintenanceResponse",
    "DisposalRequest", "DisposalResponse",
    "RequestCreate", "RequestUpdate", "RequestResponse", "CommentCreate",
    "ReportInfo", "ReportResult",
    "Page",
]
