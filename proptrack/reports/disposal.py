from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from proptrack.models.disposal import Disposal, DisposalReason, DisposalStatus
from proptrack.reports.base import BaseReport, category_of, value_of


class DisposalReport(BaseReport):
    name = "disposal"
    title = "Disposal Report"
    description = "Disposed items, costs, and disposal reasons tracking"

    def generate(self, db: Session, filters: dict) -> list[dict]:
        start, end = self.datetime_range(filters)
        # requests that were never executed are dated by their request time
        event_at = func.coalesce(Disposal.executed_at, Disposal.requested_at)
        query = select(Disposal).options(
            selectinload(Disposal.item),
            selectinload(Disposal.requested_by_user),
            selectinload(Disposal.approved_by_user),
        )
        if filters.get("status"):
            query = query.where(Disposal.status == filters["status"])
        if filters.get("reason"):
            query = query.where(Disposal.reason == filters["reason"])
        if start:
            query = query.where(event_at >= start)
        if end:
            query = query.where(event_at <= end)
        query = query.order_by(event_at.desc(), Disposal.id.desc())

        rows = []
        for d in db.scalars(query):
            item = d.item
            purchase = float(item.purchase_price or 0) if item else 0.0
            cost = float(d.disposal_cost or 0)
            rows.append({
                "item_code": item.code if item else "N/A",
                "item_name": item.name if item else "N/A",
                "category": category_of(item),
                "reason": value_of(d.reason),
                "status": value_of(d.status),
                "purchase_price": purchase,
                "purchase_price_formatted": self.format_currency(purchase),
                "disposal_cost": cost,
                "disposal_cost_formatted": self.format_currency(cost),
                "requested_at": _fmt(d.requested_at),
                "approved_at": _fmt(d.approved_at),
                "executed_at": _fmt(d.executed_at),
                "requested_by": d.requested_by_user.display_name if d.requested_by_user else "N/A",
                "approved_by": d.approved_by_user.display_name if d.approved_by_user else "N/A",
                "document_ref": d.document_ref,
            })
        return rows

    def columns(self) -> dict[str, str]:
        return {
            "item_code": "Item Code",
            "item_name": "Item Name",
            "category": "Category",
            "reason": "Reason",
            "status": "Status",
            "purchase_price_formatted": "Original Cost",
            "disposal_cost_formatted": "Disposal Cost",
            "requested_at": "Requested Date",
            "approved_at": "Approved Date",
            "executed_at": "Executed Date",
            "approved_by": "Approved By",
            "document_ref": "Document",
        }

    def summary(self, rows: list[dict]) -> dict:
        total = len(rows)
        return {
            "total_disposals": total,
            "total_original_value": self.format_currency(sum(r["purchase_price"] for r in rows)),
            "total_disposal_cost": self.format_currency(sum(r["disposal_cost"] for r in rows)),
            "by_status": [
                {"status": status, "count": len(group)}
                for status, group in self.group_by(rows, "status").items()
            ],
            "by_reason": [
                {
                    "reason": reason,
                    "count": len(group),
                    "percentage": self.format_percentage(self.percentage(len(group), total)),
                }
                for reason, group in self.group_by(rows, "reason").items()
            ],
        }

    def available_filters(self, db: Session) -> dict:
        return {
            **self.common_date_filters(),
            "status": {"type": "select", "label": "Status", "options": self.enum_options(DisposalStatus)},
            "reason": {"type": "select", "label": "Reason", "options": self.enum_options(DisposalReason)},
        }


def _fmt(dt):
    return dt.strftime("%Y-%m-%d") if dt else None
