"""Paged list envelope shared by every list endpoint."""
import math
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, computed_field
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    size: int = Field(ge=1)

    @computed_field
    @property
    def pages(self) -> int:
        # an empty result is still one (empty) page
        return max(1, math.ceil(self.total / self.size))

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page < self.pages


def paginate(
    db: Session,
    query: Select,
    page: int = 1,
    size: int = 50,
    transform: Callable[[Any], Any] | None = None,
) -> Page:
    """Count ``query``, fetch one page of it and wrap the rows in a :class:`Page`.

    ``transform`` maps each fetched row, for list views that flatten related
    records into the response.
    """
    total = db.scalar(select(func.count()).select_from(query.subquery())) or 0
    rows = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    if transform is not None:
        rows = [transform(row) for row in rows]
    return Page(items=list(rows), total=total, page=page, size=size)
