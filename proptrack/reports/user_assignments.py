from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from proptrack.models.assignment import Assignment, AssignmentStatus
from proptrack.models.user import User
from proptrack.reports.base import BaseReport, category_of, value_of


class UserAssignmentsReport(BaseReport):
    """Who holds what, for how long, and what is overdue."""

    name = "user_assignments"
    title = "User Assignments Report"
    description = "Current and historical assignments, who has what items, overdue tracking"

    def generate(self, db: Session, filters: dict) -> list[dict]:
        date_from, date_to = self.date_range(filters)
        query = (
            select(Assignment)
            .options(
                selectinload(Assignment.user),
                selectinload(Assignment.item),
                selectinload(Assignment.assigned_by_user),
            )
            .where(Assignment.deleted_at.is_(None))
        )
        user_id = self.int_filter(filters, "user_id")
        if user_id is not None:
            query = query.where(Assignment.user_id == user_id)
        if filters.get("status"):
            query = query.where(Assignment.status == filters["status"])
        if date_from:
            query = query.where(Assignment.assigned_date >= date_from)
        if date_to:
            query = query.where(Assignment.assigned_date <= date_to)
        query = query.order_by(Assignment.assigned_date.desc(), Assignment.id.desc())

        overdue_only = str(filters.get("is_overdue", "")) == "1"
        today = datetime.now(timezone.utc).date()
        rows = []
        for a in db.scalars(query):
            if overdue_only and not a.is_overdue:
                continue
            end = a.returned_date or today
            rows.append({
                "user_name": a.user.display_name if a.user else "N/A",
                "user_email": a.user.email if a.user else "N/A",
                "item_name": a.item.name if a.item else "N/A",
                "item_code": a.item.code if a.item else "N/A",
                "category": category_of(a.item),
                "assigned_date": a.assigned_date,
                "due_date": a.due_date,
                "returned_date": a.returned_date,
                "status": value_of(a.status),
                "is_overdue": a.is_overdue,
                "assigned_by": a.assigned_by_user.display_name if a.assigned_by_user else "N/A",
                "duration_days": (end - a.assigned_date).days,
            })
        return rows

    def columns(self) -> dict[str, str]:
        return {
            "user_name": "User Name",
            "user_email": "Email",
            "item_name": "Item",
            "item_code": "Item Code",
            "category": "Category",
            "assigned_date": "Assigned Date",
            "due_date": "Due Date",
            "returned_date": "Returned Date",
            "status": "Status",
            "is_overdue": "Overdue",
            "assigned_by": "Assigned By",
            "duration_days": "Duration (Days)",
        }

    def summary(self, rows: list[dict]) -> dict:
        durations = [r["duration_days"] for r in rows]
        return {
            "total_assignments": len(rows),
            "active_assignments": sum(1 for r in rows if r["status"] == AssignmentStatus.active.value),
            "overdue_assignments": sum(1 for r in rows if r["is_overdue"]),
            "returned_assignments": sum(1 for r in rows if r["status"] == AssignmentStatus.returned.value),
            "average_duration_days": round(sum(durations) / len(durations), 2) if durations else 0,
        }

    def available_filters(self, db: Session) -> dict:
        users = db.scalars(select(User).order_by(User.username)).all()
        return {
            **self.common_date_filters(),
            "user_id": {"type": "select", "label": "User", "options": {u.id: u.display_name for u in users}},
            "status": {"type": "select", "label": "Status", "options": self.enum_options(AssignmentStatus)},
            "is_overdue": {"type": "select", "label": "Overdue Only", "options": {"1": "Yes", "0": "No"}},
        }
