"""Unit tests for the SQLAlchemy models."""
import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from proptrack.models.user import User
from proptrack.models.location import Location
from proptrack.models.item import Item, ItemStatus, ItemCondition
from proptrack.models.assignment import Assignment, AssignmentStatus
from proptrack.models.maintenance import Maintenance, MaintenanceStatus
from proptrack.models.disposal import Disposal, DisposalReason, DisposalStatus
from proptrack.models.activity import ActivityLog


# ─── User ────────────────────────────────────────────────────────────────────

def test_user_create(db):
    user = User(
        username="testuser",
        email="test@example.com",
        hashed_password="hashedpw",
        role="user",
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    assert user.id is not None
    assert user.username == "testuser"
    assert user.role == "user"
    assert user.is_active is True
    assert isinstance(user.created_at, datetime)
    assert user.display_name == "testuser"


def test_user_unique_username(db):
    db.add(User(username="dup", email="a@a.com", hashed_password="x"))
    db.commit()
    db.add(User(username="dup", email="b@b.com", hashed_password="x"))
    with pytest.raises(IntegrityError):
        db.commit()


def test_user_unique_email(db):
    db.add(User(username="u1", email="same@same.com", hashed_password="x"))
    db.commit()
    db.add(User(username="u2", email="same@same.com", hashed_password="x"))
    with pytest.raises(IntegrityError):
        db.commit()


# ─── Location ────────────────────────────────────────────────────────────────

def test_location_unique_code(db):
    db.add(Location(name="L1", code="CODE-1"))
    db.commit()
    db.add(Location(name="L2", code="CODE-1"))
    with pytest.raises(IntegrityError):
        db.commit()


# ─── Item ─────────────────────────────────────────────────────────────────────

def test_item_defaults(db):
    item = Item(code="ITEM-001", name="Laptop", purchase_price=Decimal("999.99"))
    db.add(item)
    db.commit()
    db.refresh(item)

    assert item.status == ItemStatus.available
    assert item.condition == ItemCondition.good
    assert item.is_active is True
    assert item.purchase_price == Decimal("999.99")


def test_item_unique_code(db):
    db.add(Item(code="SAME", name="A"))
    db.commit()
    db.add(Item(code="SAME", name="B"))
    with pytest.raises(IntegrityError):
        db.commit()


def test_item_location_relationship(db):
    loc = Location(name="Office 101", code="LOC-101")
    db.add(loc)
    db.commit()
    item = Item(code="I-LOC", name="Desk", location_id=loc.id)
    db.add(item)
    db.commit()
    db.refresh(loc)

    assert item.location.code == "LOC-101"
    assert [i.code for i in loc.items] == ["I-LOC"]


# ─── Assignment ──────────────────────────────────────────────────────────────

def test_assignment_defaults(db, user, make_item):
    item = make_item()
    a = Assignment(item_id=item.id, user_id=user.id)
    db.add(a)
    db.commit()
    db.refresh(a)

    assert a.status == AssignmentStatus.active
    assert a.assigned_date == datetime.now(timezone.utc).date()
    assert a.deleted_at is None
    assert a.user.username == "holder"


def test_assignment_is_overdue(db, user, make_item):
    today = datetime.now(timezone.utc).date()
    item = make_item()
    late = Assignment(item_id=item.id, user_id=user.id, due_date=today - timedelta(days=1))
    on_time = Assignment(item_id=item.id, user_id=user.id, due_date=today + timedelta(days=1))
    returned = Assignment(
        item_id=item.id, user_id=user.id, due_date=today - timedelta(days=1),
        status=AssignmentStatus.returned, returned_date=today,
    )
    db.add_all([late, on_time, returned])
    db.commit()

    assert late.is_overdue is True
    assert on_time.is_overdue is False
    assert returned.is_overdue is False


# ─── Maintenance ─────────────────────────────────────────────────────────────

def test_maintenance_defaults(db, make_item):
    item = make_item()
    m = Maintenance(item_id=item.id, title="Check", scheduled_date=date(2024, 5, 1))
    db.add(m)
    db.commit()
    db.refresh(m)

    assert m.status == MaintenanceStatus.scheduled
    assert m.item.id == item.id


# ─── Disposal ─────────────────────────────────────────────────────────────────

def test_disposal_create(db, user, make_item):
    item = make_item(name="Broken laptop")
    disposal = Disposal(
        item_id=item.id,
        reason=DisposalReason.liquidation,
        requested_by=user.id,
        note="Beyond repair",
        document_ref="LIQ-2024-001",
    )
    db.add(disposal)
    db.commit()
    db.refresh(disposal)

    assert disposal.status == DisposalStatus.pending
    assert disposal.reason == DisposalReason.liquidation
    assert disposal.requested_by_user.id == user.id
    assert isinstance(disposal.requested_at, datetime)
    assert disposal.executed_at is None


# ─── Activity ────────────────────────────────────────────────────────────────

def test_activity_log_properties_json(db, user):
    entry = ActivityLog(
        subject_type="Item", subject_id=1, event="status_changed",
        description="Status changed", properties={"old_status": "available"}, causer_id=user.id,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)

    assert entry.properties == {"old_status": "available"}
    assert entry.causer.username == "holder"
