"""
Reservation repository functions.

Saves the event-sourced `Reservation` aggregate, projects it into the
`reservations` read model and answers availability and search queries.
"""
from __future__ import annotations

import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rental.db import event_store, models
from rental.domain.errors import ConflictError, EntityNotFoundError
from rental.domain.reservations import (
    BLOCKING_STATUSES,
    RESERVATION_SORT_FIELDS,
    BookingPeriod,
    Reservation,
    ReservationSearchParameters,
    ReservationState,
)


def load_reservation(db: Session, reservation_id: uuid.UUID) -> Reservation:
    events = event_store.read_stream(db, Reservation.stream_name(reservation_id))
    if not events:
        raise EntityNotFoundError("Reservation", reservation_id)
    reservation = Reservation(reservation_id)
    reservation.load(events)
    return reservation


def save_reservation(
    db: Session,
    reservation: Reservation,
    *,
    customer_name: Optional[str] = None,
    customer_email: Optional[str] = None,
    commit: bool = True,
) -> Reservation:
    if not reservation.changes:
        return reservation
    try:
        event_store.append_to_stream(
            db,
            Reservation.stream_name(reservation.id),
            reservation.original_version,
            reservation.changes,
        )
        project_reservation(db, reservation.id, reservation.state, customer_name, customer_email)
        db.flush()
        if commit:
            db.commit()
    except (ConflictError, SQLAlchemyError):
        db.rollback()
        raise
    reservation.clear_changes()
    return reservation


def project_reservation(
    db: Session,
    reservation_id: uuid.UUID,
    state: ReservationState,
    customer_name: Optional[str] = None,
    customer_email: Optional[str] = None,
) -> models.Reservation:
    row = db.get(models.Reservation, reservation_id)
    if row is None:
        row = models.Reservation(id=reservation_id, created_at=state.created_at)
        db.add(row)
    row.vehicle_id = state.vehicle_id
    row.customer_id = state.customer_id
    if customer_name is not None:
        row.customer_name = customer_name
    if customer_email is not None:
        row.customer_email = customer_email
    row.category_code = state.category_code
    row.pickup_date = state.period.pickup_date
    row.return_date = state.period.return_date
    row.rental_days = state.period.days
    row.pickup_location_code = state.pickup_location_code
    row.dropoff_location_code = state.dropoff_location_code
    row.total_price_net = state.total_price.net_amount
    row.total_price_vat = state.total_price.vat_amount
    row.total_price_gross = state.total_price.gross_amount
    row.currency = state.total_price.currency.code
    row.status = state.status.value
    row.cancellation_reason = state.cancellation_reason
    row.confirmed_at = state.confirmed_at
    row.cancelled_at = state.cancelled_at
    row.completed_at = state.completed_at
    return row


def get_reservation(db: Session, reservation_id: uuid.UUID) -> Optional[models.Reservation]:
    return db.get(models.Reservation, reservation_id)


def has_overlapping_reservation(
    db: Session,
    vehicle_id: uuid.UUID,
    period: BookingPeriod,
    exclude_id: Optional[uuid.UUID] = None,
) -> bool:
    R = models.Reservation
    q = db.query(R.id).filter(
        R.vehicle_id == vehicle_id,
        R.status.in_([s.value for s in BLOCKING_STATUSES]),
        R.pickup_date <= period.return_date,
        R.return_date >= period.pickup_date,
    )
    if exclude_id is not None:
        q = q.filter(R.id != exclude_id)
    return q.first() is not None


def search_reservations(db: Session, params: ReservationSearchParameters) -> Tuple[List[models.Reservation], int]:
    R = models.Reservation
    q = db.query(R)
    if params.status is not None:
        q = q.filter(R.status == params.status.value)
    if params.customer_id is not None:
        q = q.filter(R.customer_id == params.customer_id)
    if params.customer_name:
        q = q.filter(func.lower(R.customer_name).contains(params.customer_name.lower(), autoescape=True))
    if params.vehicle_id is not None:
        q = q.filter(R.vehicle_id == params.vehicle_id)
    if params.category_code:
        q = q.filter(R.category_code == params.category_code)
    if params.pickup_location_code:
        q = q.filter(R.pickup_location_code == params.pickup_location_code)
    if params.pickup_dates.from_date is not None:
        q = q.filter(R.pickup_date >= params.pickup_dates.from_date)
    if params.pickup_dates.to_date is not None:
        q = q.filter(R.pickup_date <= params.pickup_dates.to_date)
    if params.price_range.min_price is not None:
        q = q.filter(R.total_price_gross >= params.price_range.min_price)
    if params.price_range.max_price is not None:
        q = q.filter(R.total_price_gross <= params.price_range.max_price)

    total = q.count()
    column = getattr(R, RESERVATION_SORT_FIELDS[params.sorting.sort_by])
    q = q.order_by(column.desc() if params.sorting.descending else column.asc(), R.id.asc())
    items = q.offset(params.paging.skip).limit(params.paging.take).all()
    return items, total


def booked_vehicle_ids(db: Session, period: BookingPeriod) -> List[uuid.UUID]:
    R = models.Reservation
    rows = (
        db.query(R.vehicle_id)
        .filter(
            R.status.in_([s.value for s in BLOCKING_STATUSES]),
            R.pickup_date <= period.return_date,
            R.return_date >= period.pickup_date,
        )
        .distinct()
        .all()
    )
    return [row[0] for row in rows]


def update_customer_details(db: Session, customer_id: uuid.UUID, customer_name: str, customer_email: str) -> int:
    """Refresh the denormalized customer columns; caller commits."""
    return (
        db.query(models.Reservation)
        .filter(models.Reservation.customer_id == customer_id)
        .update(
            {models.Reservation.customer_name: customer_name, models.Reservation.customer_email: customer_email},
            synchronize_session=False,
        )
    )
