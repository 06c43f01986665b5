from proptrack.reports.base import BaseReport
from proptrack.reports.inventory_summary import InventorySummaryReport
from proptrack.reports.user_assignments import UserAssignmentsReport
from proptrack.reports.item_history import ItemHistoryReport
from proptrack.reports.financial import FinancialReport
from proptrack.reports.maintenance import MaintenanceReport
from proptrack.reports.disposal import DisposalReport
from proptrack.reports.utilization import UtilizationReport
from proptrack.reports.activity import ActivityReport

__all__ = [
    "BaseReport",
    "InventorySummaryReport",
    "UserAssignmentsReport",
    "ItemHistoryReport",
    "FinancialReport",
    "MaintenanceReport",
    "DisposalReport",
    "UtilizationReport",
    "ActivityReport",
]
