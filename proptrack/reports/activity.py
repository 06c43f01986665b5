from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from proptrack.models.activity import ActivityLog
from proptrack.models.user import User
from proptrack.reports.base import BaseReport

SUBJECT_TYPES = ("Item", "Assignment", "Maintenance", "Disposal", "User")


class ActivityReport(BaseReport):
    name = "activity"
    title = "Activity Report"
    description = "User actions, system usage patterns, and comprehensive audit trail"

    def generate(self, db: Session, filters: dict) -> list[dict]:
        start, end = self.datetime_range(filters)
        query = select(ActivityLog).options(selectinload(ActivityLog.causer))
        causer_id = self.int_filter(filters, "causer_id")
        if causer_id is not None:
            query = query.where(ActivityLog.causer_id == causer_id)
        if filters.get("subject_type"):
            query = query.where(ActivityLog.subject_type == filters["subject_type"])
        if filters.get("event"):
            query = query.where(ActivityLog.event == filters["event"])
        if start:
            query = query.where(ActivityLog.created_at >= start)
        if end:
            query = query.where(ActivityLog.created_at <= end)
        query = query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())

        return [
            {
                "performed_by": entry.causer.display_name if entry.causer else "System",
                "user_email": entry.causer.email if entry.causer else "N/A",
                "action": entry.event,
                "description": entry.description,
                "subject_type": entry.subject_type,
                "subject_id": entry.subject_id,
                "performed_at": entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            }
            for entry in db.scalars(query)
        ]

    def columns(self) -> dict[str, str]:
        return {
            "performed_by": "User",
            "user_email": "Email",
            "action": "Action",
            "description": "Description",
            "subject_type": "Entity Type",
            "subject_id": "Entity ID",
            "performed_at": "Date/Time",
        }

    def summary(self, rows: list[dict]) -> dict:
        total = len(rows)
        by_user = sorted(
            ({"user": u, "action_count": len(g)} for u, g in self.group_by(rows, "performed_by").items()),
            key=lambda r: r["action_count"],
            reverse=True,
        )
        by_action = sorted(
            (
                {
                    "action": a,
                    "count": len(g),
                    "percentage": self.format_percentage(self.percentage(len(g), total)),
                }
                for a, g in self.group_by(rows, "action").items()
            ),
            key=lambda r: r["count"],
            reverse=True,
        )
        by_entity = sorted(
            ({"entity_type": t, "count": len(g)} for t, g in self.group_by(rows, "subject_type").items()),
            key=lambda r: r["count"],
            reverse=True,
        )
        return {
            "total_activities": total,
            "unique_users": len({r["performed_by"] for r in rows}),
            "most_active_users": by_user[:10],
            "by_action": by_action,
            "by_entity_type": by_entity,
        }

    def available_filters(self, db: Session) -> dict:
        users = db.scalars(select(User).order_by(User.username)).all()
        return {
            **self.common_date_filters(),
            "causer_id": {"type": "select", "label": "User", "options": {u.id: u.display_name for u in users}},
            "subject_type": {"type": "select", "label": "Entity Type", "options": {t: t for t in SUBJECT_TYPES}},
            "event": {
                "type": "select",
                "label": "Event",
                "options": {"created": "Created", "updated": "Updated", "deleted": "Deleted"},
            },
        }
