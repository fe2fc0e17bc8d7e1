"""
Fleet service: vehicle and location administration plus the public vehicle search.
"""

import logging
import uuid
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy.orm import Session

from rental.db import models, schemas
from rental.db.repositories import fleet as fleet_repo
from rental.domain.errors import BusinessRuleViolation, DomainValidationError, EntityNotFoundError
from rental.domain.fleet import (
    FuelType,
    Location,
    LocationStatus,
    TransmissionType,
    Vehicle,
    VehicleCategory,
    VehicleSearchParameters,
    VehicleStatus,
    parse_enum,
)
from rental.domain.shared import Money

logger = logging.getLogger(__name__)


def vehicle_to_schema(row: models.Vehicle) -> schemas.Vehicle:
    rate = fleet_repo.daily_rate_of(row)
    category = VehicleCategory(row.category_code)
    return schemas.Vehicle(
        id=row.id,
        name=row.name,
        category_code=category.value,
        category_name=category.display_name,
        location_code=row.location_code,
        city=row.location.city if row.location is not None else None,
        seats=row.seats,
        fuel_type=row.fuel_type,
        transmission_type=row.transmission_type,
        status=row.status,
        license_plate=row.license_plate,
        manufacturer=row.manufacturer,
        model=row.model,
        year=row.year,
        image_url=row.image_url,
        daily_rate_net=rate.net_amount,
        daily_rate_vat=rate.vat_amount,
        daily_rate_gross=rate.gross_amount,
        currency=rate.currency.code,
    )


def _required_enum(enum_cls, value: str, field_name: str):
    parsed = parse_enum(enum_cls, value, field_name)
    if parsed is None:
        raise DomainValidationError(f"{field_name} is required", field_name)
    return parsed


class FleetService:

    def __init__(self, db: Session):
        self.db = db

    # --- vehicles ---

    def search_vehicles(self, params: VehicleSearchParameters) -> Tuple[List[models.Vehicle], int]:
        return fleet_repo.search_vehicles(self.db, params)

    def get_vehicle(self, vehicle_id: uuid.UUID) -> models.Vehicle:
        row = fleet_repo.get_vehicle(self.db, vehicle_id)
        if row is None:
            raise EntityNotFoundError("Vehicle", vehicle_id)
        return row

    def add_vehicle(self, payload: schemas.VehicleCreate) -> models.Vehicle:
        vehicle = Vehicle.create(
            name=payload.name,
            category=VehicleCategory.from_code(payload.category_code),
            location_code=payload.location_code,
            daily_rate=_daily_rate(payload.daily_rate_net),
            seats=payload.seats,
            fuel_type=_required_enum(FuelType, payload.fuel_type, "fuel_type"),
            transmission_type=_required_enum(TransmissionType, payload.transmission_type, "transmission_type"),
            license_plate=payload.license_plate,
            manufacturer=payload.manufacturer,
            model=payload.model,
            year=payload.year,
            image_url=payload.image_url,
        )
        self._active_location(vehicle.location_code)
        row = fleet_repo.create_vehicle(self.db, vehicle)
        logger.info("vehicle_added: id=%s category=%s location=%s", vehicle.id, vehicle.category.value, vehicle.location_code)
        return row

    def change_vehicle_status(self, vehicle_id: uuid.UUID, status: str) -> models.Vehicle:
        row = self.get_vehicle(vehicle_id)
        vehicle = fleet_repo.vehicle_from_row(row)
        new_status = _required_enum(VehicleStatus, status, "status")
        if new_status == VehicleStatus.MAINTENANCE:
            vehicle.mark_as_under_maintenance()
        elif new_status == VehicleStatus.RENTED:
            vehicle.mark_as_rented()
        else:
            vehicle.change_status(new_status)
        logger.info("vehicle_status_changed: id=%s status=%s", vehicle_id, new_status.value)
        return fleet_repo.save_vehicle(self.db, row, vehicle)

    def move_vehicle(self, vehicle_id: uuid.UUID, location_code: str) -> models.Vehicle:
        row = self.get_vehicle(vehicle_id)
        vehicle = fleet_repo.vehicle_from_row(row)
        target = self._active_location(location_code)
        vehicle.move_to_location(target.code)
        logger.info("vehicle_moved: id=%s location=%s", vehicle_id, target.code)
        return fleet_repo.save_vehicle(self.db, row, vehicle)

    def update_vehicle_rate(self, vehicle_id: uuid.UUID, daily_rate_net: Decimal) -> models.Vehicle:
        row = self.get_vehicle(vehicle_id)
        vehicle = fleet_repo.vehicle_from_row(row)
        vehicle.update_daily_rate(_daily_rate(daily_rate_net))
        return fleet_repo.save_vehicle(self.db, row, vehicle)

    # --- locations ---

    def list_locations(self, active_only: bool = False) -> List[models.Location]:
        return fleet_repo.get_locations(self.db, active_only=active_only)

    def get_location(self, code: str) -> models.Location:
        row = fleet_repo.get_location(self.db, code or "")
        if row is None:
            raise EntityNotFoundError("Location", code)
        return row

    def _active_location(self, code: str) -> models.Location:
        row = self.get_location(code)
        if not fleet_repo.location_from_row(row).is_active:
            raise BusinessRuleViolation(f"Location '{row.code}' is not active")
        return row

    def add_location(self, payload: schemas.LocationCreate) -> models.Location:
        location = Location.create(payload.code, payload.name, payload.street, payload.city, payload.postal_code)
        row = fleet_repo.create_location(self.db, location)
        logger.info("location_added: code=%s city=%s", location.code, location.city)
        return row

    def update_location(self, code: str, payload: schemas.LocationUpdate) -> models.Location:
        row = self.get_location(code)
        location = fleet_repo.location_from_row(row)
        location.update_information(payload.name, payload.street, payload.city, payload.postal_code)
        return fleet_repo.save_location(self.db, row, location)

    def change_location_status(self, code: str, status: str) -> models.Location:
        row = self.get_location(code)
        location = fleet_repo.location_from_row(row)
        location.change_status(_required_enum(LocationStatus, status, "status"))
        logger.info("location_status_changed: code=%s status=%s", row.code, location.status.value)
        return fleet_repo.save_location(self.db, row, location)


def _daily_rate(net: Decimal) -> Money:
    if net is None or net <= 0:
        raise DomainValidationError("Daily rate must be greater than zero", "daily_rate_net")
    return Money.euro(net)
