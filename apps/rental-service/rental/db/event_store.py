"""
Relational event store.

Streams live in the `stored_events` table, keyed by (stream_name,
stream_version). Appends are optimistic: the caller passes the version it
loaded, and a mismatch (or a concurrent insert tripping the unique
constraint) raises `ConflictError`. Callers own the transaction.
"""
from __future__ import annotations

import logging
from typing import List, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rental.db import models
from rental.domain.errors import ConflictError
from rental.domain.eventsourcing import NO_STREAM, DomainEvent, deserialize_event

logger = logging.getLogger(__name__)


def stream_version(db: Session, stream_name: str) -> int:
    current = (
        db.query(func.max(models.StoredEvent.stream_version))
        .filter(models.StoredEvent.stream_name == stream_name)
        .scalar()
    )
    return NO_STREAM if current is None else current


def append_to_stream(db: Session, stream_name: str, expected_version: int, events: Sequence[DomainEvent]) -> int:
    """Append events and return the new stream version."""
    if not events:
        return expected_version
    current = stream_version(db, stream_name)
    if current != expected_version:
        raise ConflictError(
            f"Stream '{stream_name}' was modified concurrently (expected version {expected_version}, found {current})"
        )
    version = expected_version
    for event in events:
        version += 1
        db.add(models.StoredEvent(
            stream_name=stream_name,
            stream_version=version,
            event_type=event.event_type,
            payload=event.to_payload(),
        ))
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Stream '{stream_name}' was modified concurrently") from exc
    logger.debug("appended %d event(s) to %s, now at version %d", len(events), stream_name, version)
    return version


def read_stream(db: Session, stream_name: str) -> List[DomainEvent]:
    rows = (
        db.query(models.StoredEvent)
        .filter(models.StoredEvent.stream_name == stream_name)
        .order_by(models.StoredEvent.stream_version.asc())
        .all()
    )
    return [deserialize_event(row.event_type, row.payload) for row in rows]
