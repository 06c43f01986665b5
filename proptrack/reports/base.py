"""Shared plumbing for report generators.

A report turns a filter dict (query-string values, so mostly strings) into a
list of row dicts. ``columns()`` declares which row keys are exported and in
what order; rows may carry extra keys (raw numbers used by ``summary``).
"""
import calendar
from collections import defaultdict
from datetime import date, datetime, time, timezone
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from proptrack.config import settings
from proptrack.models.category import Category
from proptrack.models.item import Item


class BaseReport:
    name: str = ""
    title: str = ""
    description: str = ""

    def generate(self, db: Session, filters: dict[str, Any]) -> list[dict[str, Any]]:
        raise NotImplementedError

    def columns(self) -> dict[str, str]:
        raise NotImplementedError

    def summary(self, rows: list[dict[str, Any]]) -> dict[str, Any]:
        raise NotImplementedError

    def available_filters(self, db: Session) -> dict[str, Any]:
        return {}

    # ── Filter helpers ────────────────────────────────────────────────────────

    @staticmethod
    def parse_date(value: Any) -> date | None:
        if not value:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value)[:10])

    def date_range(self, filters: dict[str, Any]) -> tuple[date | None, date | None]:
        """Inclusive ``(date_from, date_to)``; the current month when neither is given."""
        date_from = self.parse_date(filters.get("date_from"))
        date_to = self.parse_date(filters.get("date_to"))
        if date_from is None and date_to is None:
            today = datetime.now(timezone.utc).date()
            last_day = calendar.monthrange(today.year, today.month)[1]
            date_from = today.replace(day=1)
            date_to = today.replace(day=last_day)
        return date_from, date_to

    def datetime_range(self, filters: dict[str, Any]) -> tuple[datetime | None, datetime | None]:
        date_from, date_to = self.date_range(filters)
        start = datetime.combine(date_from, time.min, tzinfo=timezone.utc) if date_from else None
        end = datetime.combine(date_to, time.max, tzinfo=timezone.utc) if date_to else None
        return start, end

    @staticmethod
    def int_filter(filters: dict[str, Any], key: str) -> int | None:
        value = filters.get(key)
        if value in (None, ""):
            return None
        return int(value)

    def where_category(self, query: Select, filters: dict[str, Any]) -> Select:
        category_id = self.int_filter(filters, "category_id")
        if category_id is not None:
            query = query.where(Item.category_id == category_id)
        return query

    @staticmethod
    def category_filter(db: Session) -> dict[str, Any]:
        categories = db.execute(
            select(Category.id, Category.name).where(Category.deleted_at.is_(None)).order_by(Category.name)
        ).all()
        return {"type": "select", "label": "Category", "options": {i: n for i, n in categories}}

    def common_date_filters(self) -> dict[str, Any]:
        date_from, date_to = self.date_range({})
        return {
            "date_from": {"type": "date", "label": "From Date", "default": date_from.isoformat()},
            "date_to": {"type": "date", "label": "To Date", "default": date_to.isoformat()},
        }

    # ── Formatting helpers ────────────────────────────────────────────────────

    @staticmethod
    def format_currency(value) -> str:
        return f"{settings.CURRENCY_SYMBOL}{float(value or 0):,.2f}"

    @staticmethod
    def format_percentage(value) -> str:
        return f"{float(value or 0):.2f}%"

    @staticmethod
    def percentage(part, total) -> float:
        if not total:
            return 0.0
        return float(part) / float(total) * 100

    @staticmethod
    def group_by(rows: list[dict[str, Any]], key: str) -> dict[Any, list[dict[str, Any]]]:
        groups: dict[Any, list[dict[str, Any]]] = defaultdict(list)
        for row in rows:
            groups[row.get(key)].append(row)
        return groups

    @staticmethod
    def enum_options(enum_cls) -> dict[str, str]:
        return {m.value: m.value.replace("_", " ").title() for m in enum_cls}


def category_of(item) -> str:
    return (item.category_name if item is not None else None) or "N/A"


def value_of(v):
    """Plain value of a str-enum column, passthrough otherwise."""
    return getattr(v, "value", v)
