from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from proptrack.models.item import Item, ItemStatus
from proptrack.models.location import Location
from proptrack.reports.base import BaseReport, category_of, value_of


class InventorySummaryReport(BaseReport):
    """Items by category, location, status and value."""

    name = "inventory_summary"
    title = "Inventory Summary Report"
    description = "Overview of all items by category, location, status, and total value"

    def generate(self, db: Session, filters: dict) -> list[dict]:
        query = select(Item).options(selectinload(Item.location), selectinload(Item.category)).where(Item.is_active == True)
        query = self.where_category(query, filters)
        location_id = self.int_filter(filters, "location_id")
        if location_id is not None:
            query = query.where(Item.location_id == location_id)
        if filters.get("status"):
            query = query.where(Item.status == filters["status"])

        rows = []
        for item in db.scalars(query.order_by(Item.code)):
            cost = float(item.purchase_price or 0)
            rows.append({
                "code": item.code,
                "name": item.name,
                "brand": item.brand,
                "model": item.model,
                "category": category_of(item),
                "location": item.location.name if item.location else "N/A",
                "status": value_of(item.status),
                "condition": value_of(item.condition),
                "purchase_price": cost,
                "purchase_price_formatted": self.format_currency(cost),
                "purchase_date": item.purchase_date,
            })
        return rows

    def columns(self) -> dict[str, str]:
        return {
            "code": "Item Code",
            "name": "Item Name",
            "brand": "Brand",
            "model": "Model",
            "category": "Category",
            "location": "Location",
            "status": "Status",
            "condition": "Condition",
            "purchase_price_formatted": "Purchase Price",
            "purchase_date": "Purchase Date",
        }

    def summary(self, rows: list[dict]) -> dict:
        total = len(rows)
        return {
            "total_items": total,
            "total_value": self.format_currency(sum(r["purchase_price"] for r in rows)),
            "by_category": [
                {
                    "category": category,
                    "count": len(group),
                    "value": self.format_currency(sum(r["purchase_price"] for r in group)),
                }
                for category, group in self.group_by(rows, "category").items()
            ],
            "by_status": [
                {
                    "status": status,
                    "count": len(group),
                    "percentage": self.format_percentage(self.percentage(len(group), total)),
                }
                for status, group in self.group_by(rows, "status").items()
            ],
            "by_location": [
                {"location": location, "count": len(group)}
                for location, group in self.group_by(rows, "location").items()
            ],
        }

    def available_filters(self, db: Session) -> dict:
        locations = db.execute(
            select(Location.id, Location.name).where(Location.deleted_at.is_(None)).order_by(Location.name)
        ).all()
        return {
            "category_id": self.category_filter(db),
            "location_id": {"type": "select", "label": "Location", "options": {i: n for i, n in locations}},
            "status": {"type": "select", "label": "Status", "options": self.enum_options(ItemStatus)},
        }
