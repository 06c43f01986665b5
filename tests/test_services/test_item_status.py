"""Item status changes and the transition table."""
import pytest
from sqlalchemy import select

from proptrack.exceptions import InvalidStatus, InvalidTransition
from proptrack.models.activity import ActivityLog
from proptrack.models.item import Item, ItemStatus
from proptrack.services import item_service, item_state_machine


def _status_notes(db, item):
    return db.scalars(
        select(ActivityLog).where(
            ActivityLog.subject_type == "Item",
            ActivityLog.subject_id == item.id,
            ActivityLog.event == "status_changed",
        )
    ).all()


# ─── State machine ───────────────────────────────────────────────────────────

def test_same_status_is_allowed():
    for status in ItemStatus:
        assert item_state_machine.can_transition(status, status)


def test_disposed_is_terminal():
    assert item_state_machine.allowed_transitions(ItemStatus.disposed) == []
    assert not item_state_machine.can_transition("disposed", "available")


def test_transitions_accept_plain_strings():
    assert item_state_machine.can_transition("available", "assigned")
    assert not item_state_machine.can_transition("damaged", "assigned")


def test_can_be_helpers():
    assert item_state_machine.can_be_assigned(Item(status=ItemStatus.available))
    assert not item_state_machine.can_be_assigned(Item(status=ItemStatus.under_maintenance))
    assert item_state_machine.can_be_maintained(Item(status=ItemStatus.damaged))
    assert not item_state_machine.can_be_maintained(Item(status=ItemStatus.disposed))
    assert item_state_machine.can_be_disposed(Item(status=ItemStatus.damaged))
    assert not item_state_machine.can_be_disposed(Item(status=ItemStatus.assigned))


# ─── change_status ───────────────────────────────────────────────────────────

def test_change_status_applies_and_logs(db, make_item, user):
    item = make_item()
    item_service.change_status(db, item, ItemStatus.assigned, "Handed out", causer_id=user.id)
    db.commit()

    assert item.status == ItemStatus.assigned
    notes = _status_notes(db, item)
    assert len(notes) == 1
    assert notes[0].properties == {"old_status": "available", "new_status": "assigned", "reason": "Handed out"}
    assert notes[0].causer_id == user.id
    assert notes[0].description == "Status changed from available to assigned"


def test_change_status_accepts_string(db, make_item):
    item = make_item()
    item_service.change_status(db, item, "under_maintenance")
    assert item.status == ItemStatus.under_maintenance


def test_change_status_without_item_is_noop(db):
    assert item_service.change_status(db, None, ItemStatus.assigned, "orphan") is None
    assert db.scalars(select(ActivityLog)).all() == []


def test_change_status_unknown_value(db, make_item):
    item = make_item()
    with pytest.raises(InvalidStatus) as exc:
        item_service.change_status(db, item, "borrowed")
    assert exc.value.status == "borrowed"
    assert item.status == ItemStatus.available
    assert _status_notes(db, item) == []


def test_change_status_forbidden_transition(db, make_item):
    item = make_item(status=ItemStatus.damaged)
    with pytest.raises(InvalidTransition) as exc:
        item_service.change_status(db, item, ItemStatus.assigned)
    assert "under_maintenance" in exc.value.allowed
    assert item.status == ItemStatus.damaged


def test_invalid_transition_is_invalid_status():
    """Callers catching InvalidStatus also see forbidden transitions."""
    assert issubclass(InvalidTransition, InvalidStatus)


def test_mark_lost_and_found(db, make_item):
    item = make_item()
    item_service.mark_as_lost(db, item.id)
    assert item.status == ItemStatus.lost
    item_service.mark_as_found(db, item.id)
    assert item.status == ItemStatus.available


def test_mark_found_requires_lost(db, make_item):
    item = make_item()
    with pytest.raises(InvalidTransition):
        item_service.mark_as_found(db, item.id)
