"""Allowed item status transitions.

    create            -> available
    available         -> assigned | in_use | under_maintenance | damaged | pending_disposal | lost
    assigned          -> available | under_maintenance | damaged | lost
    in_use            -> available | under_maintenance | damaged | lost
    under_maintenance -> available | damaged | pending_disposal
    damaged           -> under_maintenance | pending_disposal
    pending_disposal  -> disposed | available | damaged
    lost              -> available | disposed
    disposed          (terminal)
"""
from proptrack.models.item import Item, ItemStatus

S = ItemStatus

ALLOWED_TRANSITIONS: dict[ItemStatus, tuple[ItemStatus, ...]] = {
    # damaged: damage confirmed when a returned item is inspected
    S.available: (S.assigned, S.in_use, S.under_maintenance, S.damaged, S.pending_disposal, S.lost),
    S.assigned: (S.available, S.under_maintenance, S.damaged, S.lost),
    S.in_use: (S.available, S.under_maintenance, S.damaged, S.lost),
    S.under_maintenance: (S.available, S.damaged, S.pending_disposal),
    S.damaged: (S.under_maintenance, S.pending_disposal),
    # rejected disposal returns the item to service, or back to damaged
    S.pending_disposal: (S.disposed, S.available, S.damaged),
    S.disposed: (),
    S.lost: (S.available, S.disposed),
}

_ASSIGNABLE = {S.available, S.in_use}
_MAINTAINABLE = {S.available, S.assigned, S.in_use, S.damaged}
_DISPOSABLE = {S.available, S.damaged, S.under_maintenance, S.pending_disposal}


def can_transition(current: ItemStatus | str, new: ItemStatus | str) -> bool:
    current, new = S(current), S(new)
    if current == new:
        return True
    return new in ALLOWED_TRANSITIONS.get(current, ())


def allowed_transitions(status: ItemStatus | str) -> list[ItemStatus]:
    return list(ALLOWED_TRANSITIONS.get(S(status), ()))


def can_be_assigned(item: Item) -> bool:
    return S(item.status) in _ASSIGNABLE


def can_be_maintained(item: Item) -> bool:
    return S(item.status) in _MAINTAINABLE


def can_be_disposed(item: Item) -> bool:
    return S(item.status) in _DISPOSABLE
