"""
Reservation service: booking, lifecycle transitions and lookups.

Each command loads the `Reservation` stream, applies the transition and
saves the new events together with any vehicle status change in one
transaction. Confirmation and cancellation emails go out after commit.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rental.db import models, schemas
from rental.db.repositories import customers as customer_repo
from rental.db.repositories import fleet as fleet_repo
from rental.db.repositories import reservations as reservation_repo
from rental.domain.errors import (
    BusinessRuleViolation,
    ConflictError,
    DomainValidationError,
    EntityNotFoundError,
)
from rental.domain.fleet import VehicleCategory, VehicleStatus, normalize_location_code
from rental.domain.reservations import BookingPeriod, Reservation, ReservationSearchParameters
from rental.domain.shared import Money
from rental.services.customer_service import CustomerCommandService
from rental.services.notification_service import NotificationService
from rental.services.pricing_service import PricingService

logger = logging.getLogger(__name__)

UNRENTABLE_VEHICLE_STATUSES = (VehicleStatus.OUT_OF_SERVICE, VehicleStatus.MAINTENANCE)


class ReservationService:
    """Service class for reservation commands and queries."""

    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        self.db = db
        self._notification_service = notification_service

    @property
    def notification_service(self) -> NotificationService:
        if self._notification_service is None:
            self._notification_service = NotificationService(self.db)
        return self._notification_service

    # === Commands ===

    def create_reservation(self, payload: schemas.ReservationCreate, *, commit: bool = True) -> Reservation:
        period = BookingPeriod.create(payload.pickup_date, payload.return_date)
        category = VehicleCategory.from_code(payload.category_code)
        pickup_code = normalize_location_code(payload.pickup_location_code)
        dropoff_code = normalize_location_code(payload.dropoff_location_code)

        customer = customer_repo.load_customer(self.db, payload.customer_id)
        eligibility = customer.validate_rental_eligibility(period.pickup_date)
        if not eligibility.is_eligible:
            raise BusinessRuleViolation("Customer is not eligible to rent: " + "; ".join(eligibility.issues))

        vehicle = fleet_repo.get_vehicle(self.db, payload.vehicle_id)
        if vehicle is None:
            raise EntityNotFoundError("Vehicle", payload.vehicle_id)
        if vehicle.category_code != category.value:
            raise DomainValidationError(
                f"Vehicle {vehicle.id} belongs to category '{vehicle.category_code}', not '{category.value}'",
                "category_code",
            )
        if VehicleStatus(vehicle.status) in UNRENTABLE_VEHICLE_STATUSES:
            raise BusinessRuleViolation(f"Vehicle is not available for rental (status: {vehicle.status})")

        for code in (pickup_code, dropoff_code):
            location = fleet_repo.get_location(self.db, code)
            if location is None:
                raise EntityNotFoundError("Location", code)
            if not fleet_repo.location_from_row(location).is_active:
                raise BusinessRuleViolation(f"Location '{code}' is not accepting reservations")

        if reservation_repo.has_overlapping_reservation(self.db, vehicle.id, period):
            raise ConflictError("Vehicle is already booked for the requested period")

        total_price = self._total_price(payload.total_price_net, category, period, pickup_code)

        reservation = Reservation()
        reservation.create(
            vehicle_id=vehicle.id,
            customer_id=customer.id,
            category_code=category.value,
            period=period,
            pickup_location_code=pickup_code,
            dropoff_location_code=dropoff_code,
            total_price=total_price,
        )
        reservation_repo.save_reservation(
            self.db,
            reservation,
            customer_name=customer.state.full_name,
            customer_email=customer.state.email.value,
            commit=commit,
        )
        logger.info(
            "reservation_created: id=%s vehicle=%s customer=%s days=%d total=%s",
            reservation.id, vehicle.id, customer.id, period.days, total_price,
        )
        return reservation

    def create_guest_reservation(self, payload: schemas.GuestReservationCreate) -> Reservation:
        """Register the guest and book in one transaction."""
        try:
            customer = CustomerCommandService(self.db).register(payload.customer, commit=False)
            reservation = self.create_reservation(
                schemas.ReservationCreate(
                    customer_id=customer.id,
                    vehicle_id=payload.vehicle_id,
                    category_code=payload.category_code,
                    pickup_date=payload.pickup_date,
                    return_date=payload.return_date,
                    pickup_location_code=payload.pickup_location_code,
                    dropoff_location_code=payload.dropoff_location_code,
                ),
                commit=False,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return reservation

    def confirm(self, reservation_id: uuid.UUID) -> Reservation:
        reservation = reservation_repo.load_reservation(self.db, reservation_id)
        reservation.confirm()
        reservation_repo.save_reservation(self.db, reservation)
        logger.info("reservation_confirmed: id=%s", reservation_id)
        self._notify(reservation_id, confirmed=True)
        return reservation

    def cancel(self, reservation_id: uuid.UUID, reason: Optional[str] = None) -> Reservation:
        reservation = reservation_repo.load_reservation(self.db, reservation_id)
        reservation.cancel(reason)
        if not reservation.changes:
            return reservation
        reservation_repo.save_reservation(self.db, reservation)
        logger.info("reservation_cancelled: id=%s", reservation_id)
        self._notify(reservation_id, confirmed=False)
        return reservation

    def activate(self, reservation_id: uuid.UUID) -> Reservation:
        reservation = reservation_repo.load_reservation(self.db, reservation_id)
        reservation.mark_as_active()
        vehicle_row, vehicle = self._vehicle_of(reservation)
        vehicle.mark_as_rented()
        self._save_with_vehicle(reservation, vehicle_row, vehicle)
        logger.info("reservation_activated: id=%s vehicle=%s", reservation_id, vehicle.id)
        return reservation

    def complete(self, reservation_id: uuid.UUID) -> Reservation:
        reservation = reservation_repo.load_reservation(self.db, reservation_id)
        reservation.complete()
        vehicle_row, vehicle = self._vehicle_of(reservation)
        vehicle.change_status(VehicleStatus.AVAILABLE)
        vehicle.move_to_location(reservation.state.dropoff_location_code)
        self._save_with_vehicle(reservation, vehicle_row, vehicle)
        logger.info("reservation_completed: id=%s vehicle=%s", reservation_id, vehicle.id)
        return reservation

    def mark_no_show(self, reservation_id: uuid.UUID) -> Reservation:
        reservation = reservation_repo.load_reservation(self.db, reservation_id)
        reservation.mark_as_no_show()
        reservation_repo.save_reservation(self.db, reservation)
        logger.info("reservation_no_show: id=%s", reservation_id)
        return reservation

    # === Queries ===

    def get(self, reservation_id: uuid.UUID) -> models.Reservation:
        row = reservation_repo.get_reservation(self.db, reservation_id)
        if row is None:
            raise EntityNotFoundError("Reservation", reservation_id)
        return row

    def lookup_guest_reservation(self, reservation_id: uuid.UUID, email: str) -> models.Reservation:
        """Guests see their booking only with the matching email address."""
        row = reservation_repo.get_reservation(self.db, reservation_id)
        supplied = (email or "").strip().lower()
        if row is None or not supplied or (row.customer_email or "").lower() != supplied:
            raise EntityNotFoundError("Reservation", reservation_id)
        return row

    def search(self, params: ReservationSearchParameters) -> Tuple[List[models.Reservation], int]:
        return reservation_repo.search_reservations(self.db, params)

    def booked_vehicle_ids(self, pickup_date: date, return_date: date) -> List[uuid.UUID]:
        if return_date <= pickup_date:
            raise DomainValidationError("Return date must be after pickup date", "return_date")
        return reservation_repo.booked_vehicle_ids(self.db, BookingPeriod(pickup_date, return_date))

    # === Helpers ===

    def _total_price(
        self,
        total_price_net: Optional[Decimal],
        category: VehicleCategory,
        period: BookingPeriod,
        pickup_code: str,
    ) -> Money:
        if total_price_net is not None:
            if total_price_net <= 0:
                raise DomainValidationError("Total price must be greater than zero", "total_price_net")
            return Money.euro(total_price_net)
        calculation = PricingService(self.db).calculate_price(
            category.value, period.pickup_date, period.return_date, pickup_code
        )
        return calculation.total_price

    def _vehicle_of(self, reservation: Reservation):
        row = fleet_repo.get_vehicle(self.db, reservation.state.vehicle_id)
        if row is None:
            raise EntityNotFoundError("Vehicle", reservation.state.vehicle_id)
        return row, fleet_repo.vehicle_from_row(row)

    def _save_with_vehicle(self, reservation: Reservation, vehicle_row: models.Vehicle, vehicle) -> None:
        reservation_repo.save_reservation(self.db, reservation, commit=False)
        fleet_repo.save_vehicle(self.db, vehicle_row, vehicle, commit=False)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def _notify(self, reservation_id: uuid.UUID, *, confirmed: bool) -> None:
        row = reservation_repo.get_reservation(self.db, reservation_id)
        if row is None:
            return
        try:
            if confirmed:
                self.notification_service.notify_reservation_confirmed(row)
            else:
                self.notification_service.notify_reservation_cancelled(row)
        except Exception as e:
            # notification problems never fail the reservation operation
            logger.warning("Failed to record notification for reservation %s: %s", reservation_id, e, exc_info=True)
