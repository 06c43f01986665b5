"""Report generators."""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from proptrack.models.assignment import AssignmentStatus
from proptrack.models.category import Category
from proptrack.models.item import ItemStatus, ItemCondition
from proptrack.models.location import Location
from proptrack.models.maintenance import MaintenanceStatus
from proptrack.reports import (
    BaseReport,
    InventorySummaryReport,
    UserAssignmentsReport,
    ItemHistoryReport,
    FinancialReport,
    MaintenanceReport,
    DisposalReport,
    UtilizationReport,
    ActivityReport,
)
from proptrack.schemas.assignment import AssignmentCreate
from proptrack.schemas.disposal import DisposalRequest
from proptrack.schemas.maintenance import MaintenanceCreate, MaintenanceComplete
from proptrack.services import assignment_service, disposal_service, item_service, maintenance_service

ALL_REPORTS = [
    InventorySummaryReport,
    UserAssignmentsReport,
    ItemHistoryReport,
    FinancialReport,
    MaintenanceReport,
    DisposalReport,
    UtilizationReport,
    ActivityReport,
]


@pytest.fixture
def populated(db, make_item, user):
    loc = Location(name="Office 101", code="LOC-101")
    it, furniture, office = (Category(name=n, code=n.upper()) for n in ("IT", "Furniture", "Office"))
    db.add_all([loc, it, furniture, office])
    db.commit()
    laptop = make_item(name="Laptop", category=it, purchase_price=Decimal("1000"), location_id=loc.id)
    chair = make_item(name="Chair", category=furniture, purchase_price=Decimal("250"))
    today = datetime.now(timezone.utc).date()
    assignment_service.create_assignment(db, AssignmentCreate(
        item_id=laptop.id, user_id=user.id, status=AssignmentStatus.active,
        assigned_date=today, due_date=today - timedelta(days=1),
    ))
    m = maintenance_service.create_maintenance(db, MaintenanceCreate(
        item_id=chair.id, title="Fix wheel", scheduled_date=today, estimated_cost=Decimal("100"),
    ))
    maintenance_service.complete_maintenance(db, m.id, MaintenanceComplete(actual_cost=Decimal("120")))
    printer = make_item(name="Printer", category=office, condition=ItemCondition.damaged, status=ItemStatus.damaged)
    disposal_service.request_disposal(db, printer.id, DisposalRequest(reason="donation"))
    return {"laptop": laptop, "chair": chair, "printer": printer, "location": loc, "category": it, "user": user}


@pytest.mark.parametrize("report_cls", ALL_REPORTS)
def test_row_keys_cover_columns(db, populated, report_cls):
    report = report_cls()
    rows = report.generate(db, {})
    assert rows
    for row in rows:
        assert set(report.columns()) <= set(row)
    assert isinstance(report.summary(rows), dict)


@pytest.mark.parametrize("report_cls", ALL_REPORTS)
def test_empty_dataset_summary(db, report_cls):
    report = report_cls()
    rows = report.generate(db, {"date_from": "2000-01-01", "date_to": "2000-01-31"})
    assert report.summary(rows) is not None


@pytest.mark.parametrize("report_cls", ALL_REPORTS)
def test_available_filters(db, populated, report_cls):
    assert isinstance(report_cls().available_filters(db), dict)


def test_inventory_summary(db, populated):
    report = InventorySummaryReport()
    rows = report.generate(db, {})
    assert [r["code"] for r in rows] == ["ITM-001", "ITM-002", "ITM-003"]
    assert rows[0]["location"] == "Office 101"
    assert rows[1]["location"] == "N/A"
    assert rows[0]["category"] == "IT"
    assert rows[0]["status"] == "assigned"
    summary = report.summary(rows)
    assert summary["total_items"] == 3
    assert summary["total_value"] == "₱1,250.00"


def test_inventory_summary_filters(db, populated):
    report = InventorySummaryReport()
    assert len(report.generate(db, {"category_id": str(populated["category"].id)})) == 1
    assert len(report.generate(db, {"location_id": str(populated["location"].id)})) == 1
    assert report.generate(db, {"status": "available"})[0]["name"] == "Chair"


def test_user_assignments_overdue(db, populated):
    report = UserAssignmentsReport()
    rows = report.generate(db, {"is_overdue": "1"})
    assert len(rows) == 1
    assert rows[0]["is_overdue"] is True
    summary = report.summary(rows)
    assert summary["active_assignments"] == 1
    assert summary["overdue_assignments"] == 1


def test_financial_includes_maintenance_spend(db, populated):
    rows = FinancialReport().generate(db, {})
    chair = next(r for r in rows if r["item_name"] == "Chair")
    assert chair["maintenance_count"] == 1
    assert chair["maintenance_cost"] == 120.0
    assert chair["total_cost_formatted"] == "₱370.00"


def test_maintenance_variance(db, populated):
    report = MaintenanceReport()
    rows = report.generate(db, {"status": MaintenanceStatus.completed.value})
    assert len(rows) == 1
    assert rows[0]["cost_variance"] == "₱20.00 (20.00%)"
    assert report.variance(0, 50) == "N/A"


def test_item_history_records_status_changes(db, populated):
    laptop = populated["laptop"]
    rows = ItemHistoryReport().generate(db, {"item_id": str(laptop.id), "event": "status_changed"})
    assert len(rows) == 1
    assert rows[0]["changes"] == "status: available -> assigned"
    assert rows[0]["item_code"] == laptop.code


def test_disposal_report(db, populated):
    rows = DisposalReport().generate(db, {})
    assert len(rows) == 1
    assert rows[0]["reason"] == "donation"
    assert rows[0]["status"] == "pending"
    assert rows[0]["executed_at"] is None


def test_activity_report_filters_by_event(db, populated):
    rows = ActivityReport().generate(db, {"event": "created"})
    assert rows
    assert all(r["action"] == "created" for r in rows)


def test_utilization(db, populated):
    rows = UtilizationReport().generate(db, {})
    laptop = next(r for r in rows if r["item_name"] == "Laptop")
    assert laptop["total_assignments"] == 1


# ─── Helpers ─────────────────────────────────────────────────────────────────

def test_date_range_defaults_to_current_month():
    date_from, date_to = BaseReport().date_range({})
    today = datetime.now(timezone.utc).date()
    assert date_from == today.replace(day=1)
    assert date_to.month == today.month
    assert date_to >= today


def test_date_range_end_is_inclusive():
    start, end = BaseReport().datetime_range({"date_from": "2024-03-01", "date_to": "2024-03-31"})
    assert start == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert end.date() == date(2024, 3, 31)
    assert end.hour == 23


def test_formatting_helpers():
    assert BaseReport.format_currency(1234.5) == "₱1,234.50"
    assert BaseReport.format_currency(None) == "₱0.00"
    assert BaseReport.format_percentage(12.345) == "12.35%"
    assert BaseReport.percentage(1, 0) == 0.0
    assert BaseReport.int_filter({"x": ""}, "x") is None
