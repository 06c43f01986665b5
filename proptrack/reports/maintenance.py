from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from proptrack.models.maintenance import Maintenance, MaintenanceStatus, MaintenanceType
from proptrack.models.user import User, UserRole
from proptrack.reports.base import BaseReport, category_of, value_of


class MaintenanceReport(BaseReport):
    """Scheduled vs completed work, costs and technician load."""

    name = "maintenance"
    title = "Maintenance Report"
    description = "Maintenance activities, costs, technician performance, and scheduling overview"

    def variance(self, estimated, actual) -> str:
        if not estimated or not actual:
            return "N/A"
        diff = actual - estimated
        return f"{self.format_currency(diff)} ({self.format_percentage(self.percentage(diff, estimated))})"

    def generate(self, db: Session, filters: dict) -> list[dict]:
        date_from, date_to = self.date_range(filters)
        query = (
            select(Maintenance)
            .options(selectinload(Maintenance.item), selectinload(Maintenance.technician),
                     selectinload(Maintenance.requester))
            .where(Maintenance.deleted_at.is_(None))
        )
        if filters.get("status"):
            query = query.where(Maintenance.status == filters["status"])
        if filters.get("maintenance_type"):
            query = query.where(Maintenance.maintenance_type == filters["maintenance_type"])
        assigned_to = self.int_filter(filters, "assigned_to")
        if assigned_to is not None:
            query = query.where(Maintenance.assigned_to == assigned_to)
        if date_from:
            query = query.where(Maintenance.scheduled_date >= date_from)
        if date_to:
            query = query.where(Maintenance.scheduled_date <= date_to)
        query = query.order_by(Maintenance.scheduled_date.desc(), Maintenance.id.desc())

        rows = []
        for m in db.scalars(query):
            estimated = float(m.estimated_cost or 0)
            actual = float(m.actual_cost or 0)
            rows.append({
                "title": m.title,
                "item_name": m.item.name if m.item else "N/A",
                "item_code": m.item.code if m.item else "N/A",
                "category": category_of(m.item),
                "maintenance_type": value_of(m.maintenance_type),
                "status": value_of(m.status),
                "priority": value_of(m.priority),
                "scheduled_date": m.scheduled_date,
                "completed_at": m.completed_at.strftime("%Y-%m-%d %H:%M") if m.completed_at else None,
                "estimated_cost": estimated,
                "estimated_cost_formatted": self.format_currency(estimated),
                "actual_cost": actual,
                "actual_cost_formatted": self.format_currency(actual),
                "cost_variance": self.variance(estimated, actual),
                "assigned_to": m.technician.display_name if m.technician else "Unassigned",
                "requested_by": m.requester.display_name if m.requester else "N/A",
            })
        return rows

    def columns(self) -> dict[str, str]:
        return {
            "title": "Title",
            "item_name": "Item",
            "item_code": "Item Code",
            "category": "Category",
            "maintenance_type": "Type",
            "status": "Status",
            "priority": "Priority",
            "scheduled_date": "Scheduled Date",
            "completed_at": "Completed Date",
            "estimated_cost_formatted": "Estimated Cost",
            "actual_cost_formatted": "Actual Cost",
            "cost_variance": "Cost Variance",
            "assigned_to": "Technician",
        }

    def summary(self, rows: list[dict]) -> dict:
        total = len(rows)
        estimated = sum(r["estimated_cost"] for r in rows)
        actual = sum(r["actual_cost"] for r in rows)

        def count(status: MaintenanceStatus) -> int:
            return sum(1 for r in rows if r["status"] == status.value)

        return {
            "total_maintenance": total,
            "completed": count(MaintenanceStatus.completed),
            "in_progress": count(MaintenanceStatus.in_progress),
            "scheduled": count(MaintenanceStatus.scheduled),
            "total_estimated_cost": self.format_currency(estimated),
            "total_actual_cost": self.format_currency(actual),
            "cost_variance": self.variance(estimated, actual),
            "by_status": [
                {
                    "status": status,
                    "count": len(group),
                    "percentage": self.format_percentage(self.percentage(len(group), total)),
                }
                for status, group in self.group_by(rows, "status").items()
            ],
            "by_type": [
                {
                    "type": mtype,
                    "count": len(group),
                    "total_cost": self.format_currency(sum(r["actual_cost"] for r in group)),
                }
                for mtype, group in self.group_by(rows, "maintenance_type").items()
            ],
        }

    def available_filters(self, db: Session) -> dict:
        technicians = db.scalars(
            select(User)
            .where(User.role.in_((UserRole.manager.value, UserRole.admin.value)))
            .order_by(User.username)
        ).all()
        return {
            **self.common_date_filters(),
            "status": {"type": "select", "label": "Status", "options": self.enum_options(MaintenanceStatus)},
            "maintenance_type": {"type": "select", "label": "Type", "options": self.enum_options(MaintenanceType)},
            "assigned_to": {
                "type": "select",
                "label": "Technician",
                "options": {u.id: u.display_name for u in technicians},
            },
        }
