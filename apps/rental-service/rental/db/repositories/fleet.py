"""
Fleet repository functions: locations and vehicles.

Rows are mapped to the `rental.domain.fleet` entities so rule checks run on
domain objects; `save_*` copies the entity back onto its row and commits.
"""
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rental.db import models
from rental.domain.errors import ConflictError
from rental.domain.fleet import (
    FuelType,
    Location,
    LocationStatus,
    TransmissionType,
    Vehicle,
    VehicleCategory,
    VehicleSearchParameters,
    VehicleStatus,
)
from rental.domain.reservations import BLOCKING_STATUSES
from rental.domain.shared import Currency, Money


def _commit(db: Session, conflict_message: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(conflict_message) from exc
    except SQLAlchemyError:
        db.rollback()
        raise


# --- locations ------------------------------------------------------------

def location_from_row(row: models.Location) -> Location:
    return Location(row.code, row.name, row.street, row.city, row.postal_code, LocationStatus(row.status))


def create_location(db: Session, location: Location) -> models.Location:
    if db.get(models.Location, location.code) is not None:
        raise ConflictError(f"Location '{location.code}' already exists")
    row = models.Location(
        code=location.code,
        name=location.name,
        street=location.street,
        city=location.city,
        postal_code=location.postal_code,
        status=location.status.value,
    )
    db.add(row)
    _commit(db, f"Location '{location.code}' already exists")
    db.refresh(row)
    return row


def get_location(db: Session, code: str) -> Optional[models.Location]:
    return db.get(models.Location, code.strip().upper())


def get_locations(db: Session, active_only: bool = False) -> List[models.Location]:
    q = db.query(models.Location)
    if active_only:
        q = q.filter(models.Location.status == LocationStatus.ACTIVE.value)
    return q.order_by(models.Location.code.asc()).all()


def save_location(db: Session, row: models.Location, location: Location) -> models.Location:
    row.name = location.name
    row.street = location.street
    row.city = location.city
    row.postal_code = location.postal_code
    row.status = location.status.value
    _commit(db, f"Location '{location.code}' could not be saved")
    db.refresh(row)
    return row


# --- vehicles -------------------------------------------------------------

def vehicle_from_row(row: models.Vehicle) -> Vehicle:
    return Vehicle(
        id=row.id,
        name=row.name,
        category=VehicleCategory(row.category_code),
        location_code=row.location_code,
        daily_rate=Money(Decimal(row.daily_rate_net), Decimal(row.daily_rate_vat), Currency(row.currency)),
        seats=row.seats,
        fuel_type=FuelType(row.fuel_type),
        transmission_type=TransmissionType(row.transmission_type),
        status=VehicleStatus(row.status),
        license_plate=row.license_plate,
        manufacturer=row.manufacturer,
        model=row.model,
        year=row.year,
        image_url=row.image_url,
    )


def _copy_vehicle(row: models.Vehicle, vehicle: Vehicle) -> None:
    row.name = vehicle.name
    row.category_code = vehicle.category.value
    row.location_code = vehicle.location_code
    row.daily_rate_net = vehicle.daily_rate.net_amount
    row.daily_rate_vat = vehicle.daily_rate.vat_amount
    row.currency = vehicle.daily_rate.currency.code
    row.seats = vehicle.seats
    row.fuel_type = vehicle.fuel_type.value
    row.transmission_type = vehicle.transmission_type.value
    row.status = vehicle.status.value
    row.license_plate = vehicle.license_plate
    row.manufacturer = vehicle.manufacturer
    row.model = vehicle.model
    row.year = vehicle.year
    row.image_url = vehicle.image_url


def create_vehicle(db: Session, vehicle: Vehicle) -> models.Vehicle:
    row = models.Vehicle(id=vehicle.id)
    _copy_vehicle(row, vehicle)
    db.add(row)
    _commit(db, f"A vehicle with license plate '{vehicle.license_plate}' already exists")
    db.refresh(row)
    return row


def get_vehicle(db: Session, vehicle_id: uuid.UUID) -> Optional[models.Vehicle]:
    return db.get(models.Vehicle, vehicle_id)


def save_vehicle(db: Session, row: models.Vehicle, vehicle: Vehicle, *, commit: bool = True) -> models.Vehicle:
    _copy_vehicle(row, vehicle)
    if commit:
        _commit(db, f"A vehicle with license plate '{vehicle.license_plate}' already exists")
        db.refresh(row)
    return row


def search_vehicles(db: Session, params: VehicleSearchParameters) -> Tuple[List[models.Vehicle], int]:
    """Filter vehicles; with a period, drop those booked in an overlapping reservation."""
    V = models.Vehicle
    q = db.query(V)
    if params.status is not None:
        q = q.filter(V.status == params.status.value)
    else:
        q = q.filter(V.status == VehicleStatus.AVAILABLE.value)
    if params.location_code:
        q = q.filter(V.location_code == params.location_code)
    if params.category is not None:
        q = q.filter(V.category_code == params.category.value)
    if params.min_seats is not None:
        q = q.filter(V.seats >= params.min_seats)
    if params.fuel_type is not None:
        q = q.filter(V.fuel_type == params.fuel_type.value)
    if params.transmission_type is not None:
        q = q.filter(V.transmission_type == params.transmission_type.value)
    if params.max_daily_rate_gross is not None:
        q = q.filter((V.daily_rate_net + V.daily_rate_vat) <= params.max_daily_rate_gross)
    if params.pickup_date and params.return_date:
        R = models.Reservation
        booked = select(R.vehicle_id).where(
            R.status.in_([s.value for s in BLOCKING_STATUSES]),
            R.pickup_date <= params.return_date,
            R.return_date >= params.pickup_date,
        )
        q = q.filter(V.id.not_in(booked))

    total = q.count()
    items = (
        q.order_by(V.category_code.asc(), V.daily_rate_net.asc(), V.name.asc(), V.id.asc())
        .offset(params.paging.skip)
        .limit(params.paging.take)
        .all()
    )
    return items, total


def daily_rate_of(row: models.Vehicle) -> Money:
    return Money(Decimal(row.daily_rate_net), Decimal(row.daily_rate_vat), Currency(row.currency))
