"""
Minimal event-sourcing primitives.

An aggregate keeps an immutable state object that is rebuilt by folding
domain events. New events are recorded in `changes` until the repository
appends them to the aggregate's stream and calls `clear_changes()`.
Stream versions are zero-based; a stream that does not exist has version -1.
"""
from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, Generic, Iterable, List, Type, TypeVar
import uuid

from rental.domain.errors import BusinessRuleViolation

NO_STREAM = -1

_EVENT_TYPES: Dict[str, Type["DomainEvent"]] = {}


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value):
        return {f.name: _encode(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


@dataclasses.dataclass(frozen=True)
class DomainEvent:
    """Base for all events. Subclasses are registered by their class name."""

    event_type: ClassVar[str] = "DomainEvent"

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.event_type = cls.__name__
        _EVENT_TYPES[cls.__name__] = cls

    def to_payload(self) -> Dict[str, Any]:
        return {f.name: _encode(getattr(self, f.name)) for f in dataclasses.fields(self)}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "DomainEvent":
        raise NotImplementedError


def event_class_for(event_type: str) -> Type[DomainEvent]:
    try:
        return _EVENT_TYPES[event_type]
    except KeyError:
        raise LookupError(f"Unknown event type: {event_type}") from None


def deserialize_event(event_type: str, payload: Dict[str, Any]) -> DomainEvent:
    return event_class_for(event_type).from_payload(payload)


S = TypeVar("S")


class Aggregate(Generic[S]):
    """Base aggregate root with a pending change list and version tracking."""

    stream_prefix: ClassVar[str] = "Aggregate"

    def __init__(self, aggregate_id: uuid.UUID | None = None):
        self.id = aggregate_id
        self.state: S = self.initial_state()
        self.changes: List[DomainEvent] = []
        self.original_version = NO_STREAM

    def initial_state(self) -> S:
        raise NotImplementedError

    @classmethod
    def stream_name(cls, aggregate_id: uuid.UUID) -> str:
        return f"{cls.stream_prefix}-{aggregate_id}"

    @property
    def current_version(self) -> int:
        return self.original_version + len(self.changes)

    def apply(self, event: DomainEvent) -> None:
        self.changes.append(event)
        self.state = self.state.when(event)

    def load(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            self.state = self.state.when(event)
            self.original_version += 1

    def clear_changes(self) -> None:
        self.original_version = self.current_version
        self.changes = []

    def ensure_exists(self) -> None:
        if not self.state.has_been_created:
            raise BusinessRuleViolation(f"{type(self).__name__} not found or not yet created")

    def ensure_does_not_exist(self) -> None:
        if self.state.has_been_created:
            raise BusinessRuleViolation(f"{type(self).__name__} already exists")
