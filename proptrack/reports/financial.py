from collections import defaultdict

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from proptrack.models.item import Item
from proptrack.models.maintenance import Maintenance
from proptrack.reports.base import BaseReport, category_of


class FinancialReport(BaseReport):
    """Purchase value plus maintenance spend per item."""

    name = "financial"
    title = "Financial Report"
    description = "Asset values, purchase costs, maintenance expenses, and financial summary"

    def generate(self, db: Session, filters: dict) -> list[dict]:
        start, end = self.datetime_range(filters)
        query = select(Item).where(Item.is_active == True)
        query = self.where_category(query, filters)
        items = db.scalars(query.order_by(Item.code)).all()

        spend_query = (
            select(Maintenance.item_id, func.count(Maintenance.id), func.sum(Maintenance.actual_cost))
            .where(Maintenance.deleted_at.is_(None), Maintenance.completed_at.is_not(None))
            .group_by(Maintenance.item_id)
        )
        if start:
            spend_query = spend_query.where(Maintenance.completed_at >= start)
        if end:
            spend_query = spend_query.where(Maintenance.completed_at <= end)
        spend = defaultdict(lambda: (0, 0.0))
        for item_id, count, total in db.execute(spend_query):
            spend[item_id] = (count, float(total or 0))

        rows = []
        for item in items:
            purchase = float(item.purchase_price or 0)
            count, maintenance_cost = spend[item.id]
            rows.append({
                "code": item.code,
                "item_name": item.name,
                "category": category_of(item),
                "purchase_price": purchase,
                "purchase_price_formatted": self.format_currency(purchase),
                "purchase_date": item.purchase_date,
                "maintenance_count": count,
                "maintenance_cost": maintenance_cost,
                "maintenance_cost_formatted": self.format_currency(maintenance_cost),
                "total_cost": purchase + maintenance_cost,
                "total_cost_formatted": self.format_currency(purchase + maintenance_cost),
            })
        return rows

    def columns(self) -> dict[str, str]:
        return {
            "code": "Item Code",
            "item_name": "Item Name",
            "category": "Category",
            "purchase_price_formatted": "Purchase Price",
            "purchase_date": "Purchase Date",
            "maintenance_count": "Maintenance Count",
            "maintenance_cost_formatted": "Maintenance Cost",
            "total_cost_formatted": "Total Cost",
        }

    def summary(self, rows: list[dict]) -> dict:
        n = len(rows)
        purchase = sum(r["purchase_price"] for r in rows)
        maintenance = sum(r["maintenance_cost"] for r in rows)
        return {
            "total_items": n,
            "total_purchase_cost": self.format_currency(purchase),
            "total_maintenance_cost": self.format_currency(maintenance),
            "total_cost": self.format_currency(purchase + maintenance),
            "average_purchase_cost": self.format_currency(purchase / n if n else 0),
            "average_maintenance_cost": self.format_currency(maintenance / n if n else 0),
        }

    def available_filters(self, db: Session) -> dict:
        return {
            **self.common_date_filters(),
            "category_id": self.category_filter(db),
        }
