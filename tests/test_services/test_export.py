"""Exporters and the report service registries."""
import csv
import io
import re
from datetime import date, datetime
from decimal import Decimal

import pytest
from openpyxl import load_workbook
from sqlalchemy import select

from proptrack.exceptions import UnknownReport, UnknownFormat
from proptrack.models.activity import ActivityLog
from proptrack.models.item import ItemStatus
from proptrack.services import report_service
from proptrack.services.export_service import (
    CsvExporter, ExcelExporter, PdfExporter, EXPORTERS, cell_value, project_row,
)

COLUMNS = {"code": "Item Code", "name": "Item Name", "price": "Price"}
ROWS = [
    {"code": "A-1", "name": "Laptop", "price": Decimal("10.50"), "internal": "hidden"},
    {"code": "A-2", "price": 3},
]


def test_cell_value():
    assert cell_value(None) == ""
    assert cell_value(True) == "Yes"
    assert cell_value(ItemStatus.lost) == "lost"
    assert cell_value(date(2024, 1, 2)) == "2024-01-02"
    assert cell_value(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02 03:04:05"
    assert cell_value(Decimal("1.25")) == 1.25


def test_project_row_uses_declared_columns_only():
    assert project_row(ROWS[0], COLUMNS) == ["A-1", "Laptop", 10.5]
    assert project_row(ROWS[1], COLUMNS) == ["A-2", "", 3]


def test_excel_export():
    artifact = ExcelExporter().export("inventory", "Inventory", ROWS, COLUMNS, {"total_items": 2})
    assert artifact.filename.endswith(".xlsx")
    assert artifact.mime_type == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    wb = load_workbook(io.BytesIO(artifact.content))
    ws = wb["Report"]
    header = ExcelExporter.HEADER_ROW
    assert ws.cell(row=1, column=1).value == "Inventory"
    assert [c.value for c in ws[header]] == ["Item Code", "Item Name", "Price"]
    assert [c.value for c in ws[header + 1]] == ["A-1", "Laptop", 10.5]
    # openpyxl reads empty strings back as None
    assert [c.value for c in ws[header + 2]] == ["A-2", None, 3]
    assert ws.max_row == header + 2
    assert wb["Summary"].cell(row=2, column=1).value == "Total Items"


def test_excel_export_without_summary():
    artifact = ExcelExporter().export("inventory", "Inventory", [], COLUMNS)
    wb = load_workbook(io.BytesIO(artifact.content))
    assert wb.sheetnames == ["Report"]


def test_csv_export():
    artifact = CsvExporter().export("inventory", "Inventory", ROWS, COLUMNS)
    assert artifact.mime_type == "text/csv"
    rows = list(csv.reader(io.StringIO(artifact.content.decode("utf-8"))))
    assert rows == [["Item Code", "Item Name", "Price"], ["A-1", "Laptop", "10.5"], ["A-2", "", "3"]]


def test_pdf_export():
    artifact = PdfExporter().export("inventory", "Inventory", ROWS * 60, COLUMNS, {"total_value": "$1.00"})
    assert artifact.mime_type == "application/pdf"
    assert artifact.content.startswith(b"%PDF")


def test_filename_pattern():
    name = CsvExporter().filename("financial")
    assert re.fullmatch(r"financial_\d{4}-\d{2}-\d{2}_\d{6}\.csv", name)


def test_exporter_registry():
    assert set(EXPORTERS) == {"excel", "csv", "pdf"}
    assert report_service.available_formats() == list(EXPORTERS)


# ─── Report service ──────────────────────────────────────────────────────────

def test_unknown_report(db):
    with pytest.raises(UnknownReport) as exc:
        report_service.generate(db, "nope")
    assert exc.value.name == "nope"


def test_unknown_format(db):
    with pytest.raises(UnknownFormat):
        report_service.export(db, "inventory_summary", "docx")


def test_format_checked_before_report(db):
    with pytest.raises(UnknownFormat):
        report_service.export(db, "nope", "docx")


def test_available_reports_match_registry():
    keys = [r["key"] for r in report_service.available_reports()]
    assert keys == list(report_service.REPORT_GENERATORS)
    assert all(r["key"] == r["name"] for r in report_service.available_reports())


def test_generate_logs_activity(db, make_item, user):
    make_item()
    result = report_service.generate(db, "inventory_summary", {"category_id": ""}, user_id=user.id)
    assert len(result["data"]) == 1
    assert list(result["columns"])[0] == "code"
    assert result["summary"]["total_items"] == 1

    entry = db.scalar(select(ActivityLog).where(ActivityLog.event == "report_generated"))
    assert entry.properties["record_count"] == 1
    assert entry.causer_id == user.id


def test_export_logs_activity(db, make_item):
    make_item()
    artifact = report_service.export(db, "inventory_summary", "csv")
    assert artifact.filename.startswith("inventory_summary_")
    lines = artifact.content.decode("utf-8").splitlines()
    assert lines[0].startswith("Item Code,Item Name")
    assert len(lines) == 2

    entry = db.scalar(select(ActivityLog).where(ActivityLog.event == "report_exported"))
    assert entry.properties["format"] == "csv"
