from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from proptrack.models.assignment import Assignment
from proptrack.models.item import Item
from proptrack.reports.base import BaseReport, category_of, value_of

HIGH_UTILIZATION = 75
LOW_UTILIZATION = 25


class UtilizationReport(BaseReport):
    """Assignment frequency and share of the period each item spent assigned."""

    name = "utilization"
    title = "Utilization Report"
    description = "Item usage statistics, assignment frequency, and utilization rates"

    def generate(self, db: Session, filters: dict) -> list[dict]:
        date_from, date_to = self.date_range(filters)
        query = select(Item).options(selectinload(Item.location), selectinload(Item.category)).where(Item.is_active == True)
        query = self.where_category(query, filters)
        items = db.scalars(query.order_by(Item.code)).all()

        assignment_query = select(Assignment).where(Assignment.deleted_at.is_(None))
        if date_from:
            assignment_query = assignment_query.where(Assignment.assigned_date >= date_from)
        if date_to:
            assignment_query = assignment_query.where(Assignment.assigned_date <= date_to)
        by_item: dict[int, list[Assignment]] = {}
        for a in db.scalars(assignment_query.order_by(Assignment.assigned_date.desc())):
            by_item.setdefault(a.item_id, []).append(a)

        period_days = (date_to - date_from).days if date_from and date_to else 30
        today = datetime.now(timezone.utc).date()
        rows = []
        for item in items:
            assignments = by_item.get(item.id, [])
            days = sum(((a.returned_date or today) - a.assigned_date).days for a in assignments)
            rate = days / period_days * 100 if period_days > 0 else 0.0
            rows.append({
                "code": item.code,
                "item_name": item.name,
                "category": category_of(item),
                "location": item.location.name if item.location else "N/A",
                "total_assignments": len(assignments),
                "total_days_assigned": days,
                "utilization_rate": round(rate, 2),
                "utilization_rate_formatted": self.format_percentage(rate),
                "current_status": value_of(item.status),
                "last_assigned_date": assignments[0].assigned_date if assignments else None,
            })
        return rows

    def columns(self) -> dict[str, str]:
        return {
            "code": "Item Code",
            "item_name": "Item Name",
            "category": "Category",
            "location": "Location",
            "total_assignments": "Total Assignments",
            "total_days_assigned": "Days Assigned",
            "utilization_rate_formatted": "Utilization Rate",
            "current_status": "Current Status",
            "last_assigned_date": "Last Assigned",
        }

    def summary(self, rows: list[dict]) -> dict:
        rates = [r["utilization_rate"] for r in rows]
        by_use = sorted(rows, key=lambda r: r["total_assignments"])
        return {
            "total_items": len(rows),
            "average_utilization_rate": self.format_percentage(sum(rates) / len(rates) if rates else 0),
            "total_assignments": sum(r["total_assignments"] for r in rows),
            "high_utilization": sum(1 for r in rates if r > HIGH_UTILIZATION),
            "medium_utilization": sum(1 for r in rates if LOW_UTILIZATION <= r <= HIGH_UTILIZATION),
            "low_utilization": sum(1 for r in rates if r < LOW_UTILIZATION),
            "most_used_items": [
                {"item": r["item_name"], "assignments": r["total_assignments"]} for r in by_use[::-1][:5]
            ],
            "least_used_items": [
                {"item": r["item_name"], "assignments": r["total_assignments"]} for r in by_use[:5]
            ],
        }

    def available_filters(self, db: Session) -> dict:
        return {
            **self.common_date_filters(),
            "category_id": self.category_filter(db),
        }
