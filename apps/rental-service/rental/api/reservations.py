"""
Reservations API endpoints.

Booking and guest lookup are open to customers; lifecycle transitions and
search are call-center work.
"""
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from rental.api.auth import ROLE_CALL_CENTER, Principal
from rental.api.deps import require_call_center, require_customer_or_staff
from rental.db import models, schemas
from rental.db.database import get_db
from rental.db.repositories import customers as customer_repo
from rental.domain.reservations import Reservation, ReservationSearchParameters
from rental.services.reservation_service import ReservationService
from rental.utils.feature_flags import guest_booking_enabled

router = APIRouter(prefix="/api/reservations", tags=["reservations"])


def _created(reservation: Reservation) -> schemas.ReservationCreated:
    total = reservation.state.total_price
    return schemas.ReservationCreated(
        reservation_id=reservation.id,
        customer_id=reservation.state.customer_id,
        status=reservation.status.value,
        total_price_net=total.net_amount,
        total_price_vat=total.vat_amount,
        total_price_gross=total.gross_amount,
        currency=total.currency.code,
    )


def _status_changed(reservation: Reservation) -> schemas.ReservationStatusChanged:
    return schemas.ReservationStatusChanged(reservation_id=reservation.id, status=reservation.status.value)


def _is_staff(principal: Principal) -> bool:
    return principal.has_any_role(ROLE_CALL_CENTER)


@router.post("", response_model=schemas.ReservationCreated, status_code=status.HTTP_201_CREATED)
def create_reservation(
    payload: schemas.ReservationCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_customer_or_staff),
):
    if not _is_staff(principal):
        customer = customer_repo.get_customer(db, payload.customer_id)
        if customer is not None and customer.email != principal.email:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return _created(ReservationService(db).create_reservation(payload))


@router.post("/guest", response_model=schemas.ReservationCreated, status_code=status.HTTP_201_CREATED)
def create_guest_reservation(payload: schemas.GuestReservationCreate, db: Session = Depends(get_db)):
    if not guest_booking_enabled():
        raise HTTPException(status_code=404, detail="Guest booking is not available")
    return _created(ReservationService(db).create_guest_reservation(payload))


@router.get("/lookup", response_model=schemas.Reservation)
def lookup_guest_reservation(reservation_id: uuid.UUID, email: str, db: Session = Depends(get_db)):
    return ReservationService(db).lookup_guest_reservation(reservation_id, email)


@router.get("/search", response_model=schemas.Page[schemas.Reservation])
def search_reservations(
    status: Optional[str] = None,
    customer_id: Optional[uuid.UUID] = None,
    customer_name: Optional[str] = None,
    vehicle_id: Optional[uuid.UUID] = None,
    category_code: Optional[str] = None,
    pickup_location_code: Optional[str] = None,
    pickup_date_from: Optional[date] = None,
    pickup_date_to: Optional[date] = None,
    price_min: Optional[Decimal] = None,
    price_max: Optional[Decimal] = None,
    sort_by: Optional[str] = None,
    sort_descending: bool = True,
    page_number: int = 1,
    page_size: Optional[int] = None,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    params = ReservationSearchParameters.create(
        status=status,
        customer_id=customer_id,
        customer_name=customer_name,
        vehicle_id=vehicle_id,
        category_code=category_code,
        pickup_location_code=pickup_location_code,
        pickup_date_from=pickup_date_from,
        pickup_date_to=pickup_date_to,
        price_min=price_min,
        price_max=price_max,
        sort_by=sort_by,
        sort_descending=sort_descending,
        page_number=page_number,
        page_size=page_size,
    )
    items, total = ReservationService(db).search(params)
    return schemas.Page[schemas.Reservation].build(
        [schemas.Reservation.model_validate(row) for row in items],
        total,
        params.paging.page_number,
        params.paging.page_size,
    )


@router.get("/availability", response_model=schemas.VehicleAvailability)
def booked_vehicles(pickup_date: date, return_date: date, db: Session = Depends(get_db)):
    booked = ReservationService(db).booked_vehicle_ids(pickup_date, return_date)
    return schemas.VehicleAvailability(pickup_date=pickup_date, return_date=return_date, booked_vehicle_ids=booked)


@router.get("/{reservation_id}", response_model=schemas.Reservation)
def get_reservation(
    reservation_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_customer_or_staff),
):
    row: models.Reservation = ReservationService(db).get(reservation_id)
    if not _is_staff(principal) and (row.customer_email or "").lower() != principal.email.lower():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return row


@router.put("/{reservation_id}/confirm", response_model=schemas.ReservationStatusChanged)
def confirm_reservation(
    reservation_id: uuid.UUID,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    return _status_changed(ReservationService(db).confirm(reservation_id))


@router.put("/{reservation_id}/cancel", response_model=schemas.ReservationStatusChanged)
def cancel_reservation(
    reservation_id: uuid.UUID,
    payload: Optional[schemas.ReservationCancel] = Body(default=None),
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    reason = payload.reason if payload is not None else None
    return _status_changed(ReservationService(db).cancel(reservation_id, reason))


@router.put("/{reservation_id}/activate", response_model=schemas.ReservationStatusChanged)
def activate_reservation(
    reservation_id: uuid.UUID,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    return _status_changed(ReservationService(db).activate(reservation_id))


@router.put("/{reservation_id}/complete", response_model=schemas.ReservationStatusChanged)
def complete_reservation(
    reservation_id: uuid.UUID,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    return _status_changed(ReservationService(db).complete(reservation_id))


@router.put("/{reservation_id}/no-show", response_model=schemas.ReservationStatusChanged)
def mark_no_show(
    reservation_id: uuid.UUID,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    return _status_changed(ReservationService(db).mark_no_show(reservation_id))
