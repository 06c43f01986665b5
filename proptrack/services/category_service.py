"""Item categories.

Same lifecycle as locations: soft delete with restore, a purge that only
works on empty categories, and bulk reassignment of items.
"""
import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy import select, func, exists, update, or_
from fastapi import HTTPException

from proptrack.exceptions import CategoryError
from proptrack.models.category import Category
from proptrack.models.item import Item, IN_SERVICE_STATUSES
from proptrack.schemas.category import CategoryCreate, CategoryUpdate, CategoryStats
from proptrack.schemas.pagination import Page, paginate
from proptrack.services.activity_service import log_activity

logger = logging.getLogger(__name__)


def get_categories(
    db: Session,
    page: int = 1,
    size: int = 50,
    search: str = "",
    is_active: bool | None = None,
    with_deleted: bool = False,
) -> Page:
    query = select(Category)
    if not with_deleted:
        query = query.where(Category.deleted_at.is_(None))
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(Category.name.ilike(pattern), Category.code.ilike(pattern), Category.description.ilike(pattern))
        )
    if is_active is not None:
        query = query.where(Category.is_active == is_active)
    return paginate(db, query.order_by(Category.name), page, size)


def get_active_categories(db: Session) -> list[Category]:
    return db.scalars(
        select(Category)
        .where(Category.deleted_at.is_(None), Category.is_active == True)
        .order_by(Category.name)
    ).all()


def get_category(db: Session, category_id: int, include_deleted: bool = False) -> Category:
    category = db.get(Category, category_id)
    if not category or (category.is_deleted and not include_deleted):
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _ensure_code_free(db: Session, code: str, category_id: int | None = None) -> None:
    clash = select(Category.id).where(Category.code == code)
    if category_id is not None:
        clash = clash.where(Category.id != category_id)
    if db.scalar(select(clash.exists())):
        raise CategoryError(f"Category code '{code}' already exists.")


def _item_count(db: Session, category: Category, in_service_only: bool = False,
                include_retired: bool = False) -> int:
    query = select(func.count(Item.id)).where(Item.category_id == category.id)
    if in_service_only:
        query = query.where(Item.status.in_(IN_SERVICE_STATUSES))
    if not include_retired:
        query = query.where(Item.is_active == True)
    return db.scalar(query)


def create_category(db: Session, data: CategoryCreate, user_id: int | None = None) -> Category:
    _ensure_code_free(db, data.code)
    category = Category(**data.model_dump())
    db.add(category)
    db.flush()
    log_activity(db, "Category created", subject=category, properties={"code": category.code},
                 causer_id=user_id, event="created")
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category_id: int, data: CategoryUpdate, user_id: int | None = None) -> Category:
    category = get_category(db, category_id)
    changes = data.model_dump(exclude_unset=True)
    if "code" in changes:
        _ensure_code_free(db, changes["code"], category.id)
    if changes.get("is_active") is False and category.is_active and _item_count(db, category, in_service_only=True):
        raise CategoryError(
            f"Cannot deactivate category '{category.name}' because it has active items assigned."
        )
    old = {field: getattr(category, field) for field in changes}
    for field, value in changes.items():
        setattr(category, field, value)
    log_activity(db, "Category updated", subject=category, properties={"old": old, "new": changes},
                 causer_id=user_id, event="updated")
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: int, user_id: int | None = None) -> Category:
    category = get_category(db, category_id)
    if _item_count(db, category):
        raise CategoryError(
            f"Cannot delete category '{category.name}' because it has associated items. "
            "Please reassign or remove items first."
        )
    category.deleted_at = datetime.now(timezone.utc)
    log_activity(db, "Category deleted", subject=category, causer_id=user_id, event="deleted")
    db.commit()
    db.refresh(category)
    return category


def restore_category(db: Session, category_id: int, user_id: int | None = None) -> Category:
    category = get_category(db, category_id, include_deleted=True)
    if not category.is_deleted:
        raise CategoryError(f"Category '{category.name}' is not deleted.")
    category.deleted_at = None
    log_activity(db, "Category restored", subject=category, causer_id=user_id, event="restored")
    db.commit()
    db.refresh(category)
    return category


def purge_category(db: Session, category_id: int, user_id: int | None = None) -> None:
    category = get_category(db, category_id, include_deleted=True)
    if _item_count(db, category, include_retired=True):
        raise CategoryError(
            f"Cannot delete category '{category.name}' because it has associated items. "
            "Please reassign or remove items first."
        )
    log_activity(db, "Category permanently deleted",
                 properties={"category_id": category.id, "code": category.code},
                 causer_id=user_id, event="deleted")
    db.delete(category)
    db.commit()


def reassign_items(db: Session, from_id: int, to_id: int, user_id: int | None = None) -> int:
    if from_id == to_id:
        raise CategoryError("Items already belong to this category.")
    source = get_category(db, from_id)
    target = get_category(db, to_id)
    moved = db.execute(
        update(Item).where(Item.category_id == source.id).values(category_id=target.id)
    ).rowcount
    log_activity(
        db,
        "Items reassigned to another category",
        subject=source,
        properties={"to_category": target.name, "items_count": moved},
        causer_id=user_id,
        event="reassigned",
    )
    db.commit()
    logger.info("Moved %s items from category %s to %s", moved, source.code, target.code)
    return moved


def get_statistics(db: Session) -> CategoryStats:
    def count(*criteria) -> int:
        return db.scalar(select(func.count(Category.id)).where(*criteria))

    live = Category.deleted_at.is_(None)
    has_items = exists().where(Item.category_id == Category.id)
    return CategoryStats(
        total=count(live),
        active=count(live, Category.is_active == True),
        inactive=count(live, Category.is_active == False),
        deleted=count(Category.deleted_at.is_not(None)),
        with_items=count(live, has_items),
        empty=count(live, ~has_items),
    )
