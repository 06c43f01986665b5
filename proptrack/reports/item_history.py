from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from proptrack.models.activity import ActivityLog
from proptrack.models.item import Item
from proptrack.reports.base import BaseReport


def format_changes(properties: dict | None) -> str:
    if not properties or "old_status" not in properties:
        return "N/A"
    return f"status: {properties['old_status']} -> {properties.get('new_status')}"


class ItemHistoryReport(BaseReport):
    name = "item_history"
    title = "Item History Report"
    description = "Complete lifecycle history of items including assignments, maintenance, and status changes"

    def generate(self, db: Session, filters: dict) -> list[dict]:
        start, end = self.datetime_range(filters)
        query = (
            select(ActivityLog)
            .options(selectinload(ActivityLog.causer))
            .where(ActivityLog.subject_type == Item.__name__)
        )
        item_id = self.int_filter(filters, "item_id")
        if item_id is not None:
            query = query.where(ActivityLog.subject_id == item_id)
        if filters.get("event"):
            query = query.where(ActivityLog.event == filters["event"])
        if start:
            query = query.where(ActivityLog.created_at >= start)
        if end:
            query = query.where(ActivityLog.created_at <= end)
        entries = db.scalars(query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())).all()

        item_ids = {e.subject_id for e in entries}
        items = {i.id: i for i in db.scalars(select(Item).where(Item.id.in_(item_ids)))} if item_ids else {}

        rows = []
        for entry in entries:
            item = items.get(entry.subject_id)
            rows.append({
                "item_code": item.code if item else "N/A",
                "item_name": item.name if item else "Deleted Item",
                "event": entry.event,
                "description": entry.description,
                "performed_by": entry.causer.display_name if entry.causer else "System",
                "performed_at": entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                "changes": format_changes(entry.properties),
            })
        return rows

    def columns(self) -> dict[str, str]:
        return {
            "item_code": "Item Code",
            "item_name": "Item Name",
            "event": "Event",
            "description": "Description",
            "performed_by": "Performed By",
            "performed_at": "Date/Time",
            "changes": "Changes",
        }

    def summary(self, rows: list[dict]) -> dict:
        return {
            "total_activities": len(rows),
            "by_event": [
                {"event": event, "count": len(group)}
                for event, group in self.group_by(rows, "event").items()
            ],
            "unique_items": len({r["item_code"] for r in rows}),
        }

    def available_filters(self, db: Session) -> dict:
        items = db.execute(select(Item.id, Item.code).order_by(Item.code)).all()
        return {
            **self.common_date_filters(),
            "item_id": {"type": "select", "label": "Item", "options": {i: c for i, c in items}},
            "event": {
                "type": "select",
                "label": "Event Type",
                "options": {
                    "created": "Created",
                    "updated": "Updated",
                    "deleted": "Deleted",
                    "status_changed": "Status Changed",
                },
            },
        }
