"""Request status transitions and predicates."""
import pytest

from proptrack.exceptions import InvalidRequestTransition
from proptrack.models.service_request import ServiceRequest, RequestStatus
from proptrack.services import request_state_machine as sm


def test_terminal_states():
    for status in ("rejected", "completed", "cancelled"):
        assert sm.is_terminal(status)
        assert sm.next_states(status) == []
    assert not sm.is_terminal(RequestStatus.pending)


def test_changes_requested_goes_back_to_pending():
    assert sm.next_states("changes_requested") == [RequestStatus.pending, RequestStatus.cancelled]
    assert not sm.can_transition("changes_requested", "approved")


def test_approved_can_only_complete_or_cancel():
    assert sm.can_transition("approved", "completed")
    assert sm.can_transition("approved", "cancelled")
    assert not sm.can_transition("approved", "rejected")


def test_transition_applies_or_raises():
    request = ServiceRequest(status=RequestStatus.pending)
    sm.transition(request, RequestStatus.under_review)
    assert request.status == RequestStatus.under_review

    with pytest.raises(InvalidRequestTransition, match="from 'under_review' to 'completed'"):
        sm.transition(request, RequestStatus.completed)
    assert request.status == RequestStatus.under_review


def test_predicates():
    def req(status):
        return ServiceRequest(status=status)

    assert sm.can_be_reviewed(req("changes_requested"))
    assert not sm.can_be_reviewed(req("approved"))
    assert sm.can_be_edited(req("pending"))
    assert not sm.can_be_edited(req("under_review"))
    assert sm.can_be_cancelled(req("approved"))
    assert not sm.can_be_cancelled(req("rejected"))
    assert sm.can_be_completed(req("approved"))
    assert not sm.can_be_completed(req("pending"))
