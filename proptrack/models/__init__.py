from proptrack.models.user import User, UserRole
from proptrack.models.location import Location
from proptrack.models.category import Category
from proptrack.models.item import Item, ItemStatus, ItemCondition
from proptrack.models.assignment import Assignment, AssignmentStatus
from proptrack.models.item_return import ItemReturn, ReturnStatus
from proptrack.models.maintenance import Maintenance, MaintenanceStatus, MaintenanceType, MaintenancePriority
from proptrack.models.disposal import Disposal, DisposalReason, DisposalStatus
from proptrack.models.service_request import (
    ServiceRequest, RequestComment, RequestType, RequestStatus, RequestPriority,
)
from proptrack.models.activity import ActivityLog

__all__ = [
    "User", "UserRole",
    "Location",
    "Category",
    "Item", "ItemStatus", "ItemCondition",
    "Assignment", "AssignmentStatus",
    "ItemReturn", "ReturnStatus",
    "Maintenance", "MaintenanceStatus", "MaintenanceType", "MaintenancePriority",
    "Disposal", "DisposalReason", "DisposalStatus",
    "ServiceRequest", "RequestComment", "RequestType", "RequestStatus", "RequestPriority",
    "ActivityLog",
]
