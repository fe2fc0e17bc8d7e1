"""
Reservation aggregate (event-sourced), its events and booking period.

Lifecycle: Pending -> Confirmed -> Active -> Completed, with Cancelled and
NoShow as terminal side exits.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from rental.domain.errors import BusinessRuleViolation, DomainValidationError
from rental.domain.eventsourcing import Aggregate, DomainEvent
from rental.domain.fleet import VehicleCategory, normalize_location_code
from rental.domain.shared import Currency, DateRange, Money, PagingInfo, PriceRange, SortingInfo

MAX_RENTAL_DAYS = 90


class ReservationStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "NoShow"


BLOCKING_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED, ReservationStatus.ACTIVE)


@dataclass(frozen=True)
class BookingPeriod:
    pickup_date: date
    return_date: date

    @classmethod
    def create(cls, pickup_date: date, return_date: date) -> "BookingPeriod":
        if pickup_date < date.today():
            raise DomainValidationError("Pickup date cannot be in the past", "pickup_date")
        if return_date <= pickup_date:
            raise DomainValidationError("Return date must be after pickup date", "return_date")
        period = cls(pickup_date, return_date)
        if period.days > MAX_RENTAL_DAYS:
            raise DomainValidationError(f"Rental period cannot exceed {MAX_RENTAL_DAYS} days", "return_date")
        return period

    @property
    def days(self) -> int:
        return (self.return_date - self.pickup_date).days + 1

    def overlaps_with(self, other: "BookingPeriod") -> bool:
        return self.pickup_date <= other.return_date and other.pickup_date <= self.return_date


def _money(payload) -> Money:
    return Money(Decimal(payload["net_amount"]), Decimal(payload["vat_amount"]), Currency(payload["currency"]["code"]))


def _period(payload) -> BookingPeriod:
    return BookingPeriod(date.fromisoformat(payload["pickup_date"]), date.fromisoformat(payload["return_date"]))


@dataclass(frozen=True)
class ReservationCreated(DomainEvent):
    reservation_id: uuid.UUID
    vehicle_id: uuid.UUID
    customer_id: uuid.UUID
    category_code: str
    period: BookingPeriod
    pickup_location_code: str
    dropoff_location_code: str
    total_price: Money
    created_at: datetime

    @classmethod
    def from_payload(cls, payload):
        return cls(
            reservation_id=uuid.UUID(payload["reservation_id"]),
            vehicle_id=uuid.UUID(payload["vehicle_id"]),
            customer_id=uuid.UUID(payload["customer_id"]),
            category_code=payload["category_code"],
            period=_period(payload["period"]),
            pickup_location_code=payload["pickup_location_code"],
            dropoff_location_code=payload["dropoff_location_code"],
            total_price=_money(payload["total_price"]),
            created_at=datetime.fromisoformat(payload["created_at"]),
        )


@dataclass(frozen=True)
class _StatusEvent(DomainEvent):
    reservation_id: uuid.UUID
    occurred_at: datetime

    @classmethod
    def from_payload(cls, payload):
        return cls(uuid.UUID(payload["reservation_id"]), datetime.fromisoformat(payload["occurred_at"]))


@dataclass(frozen=True)
class ReservationConfirmed(_StatusEvent):
    pass


@dataclass(frozen=True)
class ReservationActivated(_StatusEvent):
    pass


@dataclass(frozen=True)
class ReservationCompleted(_StatusEvent):
    pass


@dataclass(frozen=True)
class ReservationMarkedNoShow(_StatusEvent):
    pass


@dataclass(frozen=True)
class ReservationCancelled(DomainEvent):
    reservation_id: uuid.UUID
    reason: Optional[str]
    occurred_at: datetime

    @classmethod
    def from_payload(cls, payload):
        return cls(uuid.UUID(payload["reservation_id"]), payload.get("reason"), datetime.fromisoformat(payload["occurred_at"]))


_STATUS_BY_EVENT = {
    ReservationConfirmed: ReservationStatus.CONFIRMED,
    ReservationActivated: ReservationStatus.ACTIVE,
    ReservationCompleted: ReservationStatus.COMPLETED,
    ReservationMarkedNoShow: ReservationStatus.NO_SHOW,
    ReservationCancelled: ReservationStatus.CANCELLED,
}


@dataclass(frozen=True)
class ReservationState:
    id: Optional[uuid.UUID] = None
    vehicle_id: Optional[uuid.UUID] = None
    customer_id: Optional[uuid.UUID] = None
    category_code: Optional[str] = None
    period: Optional[BookingPeriod] = None
    pickup_location_code: Optional[str] = None
    dropoff_location_code: Optional[str] = None
    total_price: Optional[Money] = None
    status: ReservationStatus = ReservationStatus.PENDING
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def has_been_created(self) -> bool:
        return self.id is not None

    def when(self, event: DomainEvent) -> "ReservationState":
        if isinstance(event, ReservationCreated):
            return replace(
                self,
                id=event.reservation_id,
                vehicle_id=event.vehicle_id,
                customer_id=event.customer_id,
                category_code=event.category_code,
                period=event.period,
                pickup_location_code=event.pickup_location_code,
                dropoff_location_code=event.dropoff_location_code,
                total_price=event.total_price,
                status=ReservationStatus.PENDING,
                created_at=event.created_at,
            )
        status = _STATUS_BY_EVENT.get(type(event))
        if status is None:
            raise ValueError(f"Unhandled reservation event: {type(event).__name__}")
        changes = {"status": status}
        if isinstance(event, ReservationConfirmed):
            changes["confirmed_at"] = event.occurred_at
        elif isinstance(event, ReservationCancelled):
            changes["cancelled_at"] = event.occurred_at
            changes["cancellation_reason"] = event.reason
        elif isinstance(event, ReservationCompleted):
            changes["completed_at"] = event.occurred_at
        return replace(self, **changes)


def _now() -> datetime:
    return datetime.now(UTC)


class Reservation(Aggregate[ReservationState]):
    stream_prefix = "Reservation"

    def initial_state(self) -> ReservationState:
        return ReservationState()

    @property
    def status(self) -> ReservationStatus:
        return self.state.status

    @property
    def period(self) -> Optional[BookingPeriod]:
        return self.state.period

    def create(
        self,
        vehicle_id: uuid.UUID,
        customer_id: uuid.UUID,
        category_code: str,
        period: BookingPeriod,
        pickup_location_code: str,
        dropoff_location_code: str,
        total_price: Money,
        reservation_id: Optional[uuid.UUID] = None,
    ) -> None:
        self.ensure_does_not_exist()
        self.id = reservation_id or self.id or uuid.uuid4()
        self.apply(ReservationCreated(
            reservation_id=self.id,
            vehicle_id=vehicle_id,
            customer_id=customer_id,
            category_code=category_code,
            period=period,
            pickup_location_code=normalize_location_code(pickup_location_code),
            dropoff_location_code=normalize_location_code(dropoff_location_code),
            total_price=total_price,
            created_at=_now(),
        ))

    def confirm(self) -> None:
        self.ensure_exists()
        if self.status != ReservationStatus.PENDING:
            raise BusinessRuleViolation(f"Cannot confirm reservation in status: {self.status.value}")
        self.apply(ReservationConfirmed(self.id, _now()))

    def cancel(self, reason: Optional[str] = None) -> None:
        self.ensure_exists()
        if self.status == ReservationStatus.CANCELLED:
            return
        if self.status == ReservationStatus.COMPLETED:
            raise BusinessRuleViolation("Cannot cancel a completed reservation")
        if self.status == ReservationStatus.ACTIVE:
            raise BusinessRuleViolation("Cannot cancel an active rental. Please return the vehicle first.")
        if self.status == ReservationStatus.NO_SHOW:
            raise BusinessRuleViolation("Cannot cancel a reservation marked as no-show")
        self.apply(ReservationCancelled(self.id, reason, _now()))

    def mark_as_active(self) -> None:
        self.ensure_exists()
        if self.status != ReservationStatus.CONFIRMED:
            raise BusinessRuleViolation(f"Cannot activate reservation in status: {self.status.value}")
        if self.state.period.pickup_date > date.today():
            raise BusinessRuleViolation("Cannot activate reservation before pickup date")
        self.apply(ReservationActivated(self.id, _now()))

    def complete(self) -> None:
        self.ensure_exists()
        if self.status != ReservationStatus.ACTIVE:
            raise BusinessRuleViolation(f"Cannot complete reservation in status: {self.status.value}")
        self.apply(ReservationCompleted(self.id, _now()))

    def mark_as_no_show(self) -> None:
        self.ensure_exists()
        if self.status != ReservationStatus.CONFIRMED:
            raise BusinessRuleViolation(f"Cannot mark reservation as no-show in status: {self.status.value}")
        if self.state.period.pickup_date >= date.today():
            raise BusinessRuleViolation("Cannot mark as no-show before the pickup date has passed")
        self.apply(ReservationMarkedNoShow(self.id, _now()))

    def overlaps_with(self, period: BookingPeriod) -> bool:
        if self.status not in BLOCKING_STATUSES or self.state.period is None:
            return False
        return self.state.period.overlaps_with(period)


RESERVATION_SORT_FIELDS = {
    "PickupDate": "pickup_date",
    "Price": "total_price_gross",
    "Status": "status",
    "CreatedDate": "created_at",
}

DEFAULT_RESERVATION_PAGE_SIZE = 50


@dataclass(frozen=True)
class ReservationSearchParameters:
    status: Optional[ReservationStatus] = None
    customer_id: Optional[uuid.UUID] = None
    customer_name: Optional[str] = None
    vehicle_id: Optional[uuid.UUID] = None
    category_code: Optional[str] = None
    pickup_location_code: Optional[str] = None
    pickup_dates: DateRange = field(default_factory=DateRange)
    price_range: PriceRange = field(default_factory=PriceRange)
    sorting: SortingInfo = field(default_factory=lambda: SortingInfo("CreatedDate", True))
    paging: PagingInfo = field(default_factory=lambda: PagingInfo(1, DEFAULT_RESERVATION_PAGE_SIZE))

    @classmethod
    def create(
        cls,
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
    ) -> "ReservationSearchParameters":
        parsed_status = None
        if status:
            try:
                parsed_status = ReservationStatus(status)
            except ValueError:
                raise DomainValidationError(f"Invalid reservation status: {status}", "status") from None
        sort_key = sort_by or "CreatedDate"
        if sort_key not in RESERVATION_SORT_FIELDS:
            allowed = ", ".join(RESERVATION_SORT_FIELDS)
            raise DomainValidationError(f"Invalid sort field: {sort_by}. Allowed: {allowed}", "sort_by")
        return cls(
            status=parsed_status,
            customer_id=customer_id,
            customer_name=(customer_name or "").strip() or None,
            vehicle_id=vehicle_id,
            category_code=VehicleCategory.from_code(category_code).value if category_code else None,
            pickup_location_code=normalize_location_code(pickup_location_code) if pickup_location_code else None,
            pickup_dates=DateRange.create(pickup_date_from, pickup_date_to, "pickup_date"),
            price_range=PriceRange.create(price_min, price_max),
            sorting=SortingInfo(sort_key, sort_descending),
            paging=PagingInfo.create(page_number, page_size, default_page_size=DEFAULT_RESERVATION_PAGE_SIZE),
        )
