"""Record lifecycle events.

Write paths publish these after flushing a change and before committing, so
subscribers run inside the same transaction as the triggering write.
"""
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy.orm import Session


@dataclass
class RecordCreated:
    record: Any


@dataclass
class RecordUpdated:
    record: Any
    previous_status: str | None = None

    @property
    def status_changed(self) -> bool:
        return _value(self.previous_status) != _value(self.record.status)


@dataclass
class RecordDeleted:
    record: Any
    hard: bool = False


RecordEvent = RecordCreated | RecordUpdated | RecordDeleted
Handler = Callable[[Session, RecordEvent], None]


def _value(status):
    return getattr(status, "value", status)


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, record_type: type, handler: Handler) -> None:
        if handler not in self._handlers[record_type]:
            self._handlers[record_type].append(handler)

    def unsubscribe(self, record_type: type, handler: Handler) -> None:
        if handler in self._handlers[record_type]:
            self._handlers[record_type].remove(handler)

    def handlers(self, record_type: type) -> list[Handler]:
        return list(self._handlers.get(record_type, ()))

    def publish(self, db: Session, event: RecordEvent) -> None:
        for handler in self.handlers(type(event.record)):
            handler(db, event)


bus = EventBus()
