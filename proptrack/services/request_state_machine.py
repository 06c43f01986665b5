"""Allowed request status transitions.

    pending           -> under_review | approved | rejected | changes_requested | cancelled
    under_review      -> approved | rejected | changes_requested | cancelled | pending
    changes_requested -> pending | cancelled
    approved          -> completed | cancelled
    rejected, completed, cancelled (terminal)
"""
from proptrack.exceptions import InvalidRequestTransition
from proptrack.models.service_request import ServiceRequest, RequestStatus

S = RequestStatus

ALLOWED_TRANSITIONS: dict[RequestStatus, tuple[RequestStatus, ...]] = {
    S.pending: (S.under_review, S.approved, S.rejected, S.changes_requested, S.cancelled),
    S.under_review: (S.approved, S.rejected, S.changes_requested, S.cancelled, S.pending),
    S.changes_requested: (S.pending, S.cancelled),
    S.approved: (S.completed, S.cancelled),
    S.rejected: (),
    S.completed: (),
    S.cancelled: (),
}

REVIEWABLE = (S.pending, S.under_review, S.changes_requested)
EDITABLE = (S.pending, S.changes_requested)
AWAITING_REVIEW = (S.pending, S.under_review)


def can_transition(current: RequestStatus | str, new: RequestStatus | str) -> bool:
    return S(new) in ALLOWED_TRANSITIONS.get(S(current), ())


def next_states(status: RequestStatus | str) -> list[RequestStatus]:
    return list(ALLOWED_TRANSITIONS.get(S(status), ()))


def is_terminal(status: RequestStatus | str) -> bool:
    return not ALLOWED_TRANSITIONS.get(S(status))


def transition(request: ServiceRequest, new: RequestStatus) -> None:
    current = S(request.status)
    if not can_transition(current, new):
        raise InvalidRequestTransition(current.value, S(new).value)
    request.status = new


def can_be_reviewed(request: ServiceRequest) -> bool:
    return S(request.status) in REVIEWABLE


def can_be_edited(request: ServiceRequest) -> bool:
    return S(request.status) in EDITABLE


def can_be_cancelled(request: ServiceRequest) -> bool:
    return S(request.status) not in (S.completed, S.cancelled, S.rejected)


def can_be_completed(request: ServiceRequest) -> bool:
    return S(request.status) == S.approved
