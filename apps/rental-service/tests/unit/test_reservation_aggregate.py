import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from rental.domain.errors import BusinessRuleViolation, DomainValidationError
from rental.domain.eventsourcing import deserialize_event
from rental.domain.reservations import (
    MAX_RENTAL_DAYS,
    BookingPeriod,
    Reservation,
    ReservationSearchParameters,
    ReservationStatus,
)
from rental.domain.shared import Money


def _reservation(pickup=None, days=3) -> Reservation:
    pickup = pickup or date.today() + timedelta(days=7)
    reservation = Reservation()
    reservation.create(
        vehicle_id=uuid.uuid4(),
        customer_id=uuid.uuid4(),
        category_code="KOMPAKT",
        # direct construction skips the not-in-the-past guard
        period=BookingPeriod(pickup, pickup + timedelta(days=days - 1)),
        pickup_location_code="ber-hbf",
        dropoff_location_code="MUC-FLG",
        total_price=Money.euro(Decimal("49.99")) * days,
    )
    return reservation


def test_booking_period_counts_days_inclusively():
    start = date.today() + timedelta(days=1)
    period = BookingPeriod.create(start, start + timedelta(days=2))
    assert period.days == 3


def test_booking_period_validation():
    today = date.today()
    with pytest.raises(DomainValidationError):
        BookingPeriod.create(today - timedelta(days=1), today + timedelta(days=1))
    with pytest.raises(DomainValidationError):
        BookingPeriod.create(today + timedelta(days=2), today + timedelta(days=2))
    with pytest.raises(DomainValidationError):
        BookingPeriod.create(today, today + timedelta(days=MAX_RENTAL_DAYS))
    assert BookingPeriod.create(today, today + timedelta(days=MAX_RENTAL_DAYS - 1)).days == MAX_RENTAL_DAYS


def test_booking_periods_overlap_on_shared_day():
    a = BookingPeriod(date(2030, 1, 1), date(2030, 1, 5))
    assert a.overlaps_with(BookingPeriod(date(2030, 1, 5), date(2030, 1, 8)))
    assert not a.overlaps_with(BookingPeriod(date(2030, 1, 6), date(2030, 1, 8)))


def test_create_starts_pending_and_normalizes_codes():
    reservation = _reservation()
    assert reservation.status == ReservationStatus.PENDING
    assert reservation.state.pickup_location_code == "BER-HBF"
    assert reservation.state.total_price.net_amount == Decimal("149.97")


def test_lifecycle_pending_to_completed():
    reservation = _reservation(pickup=date.today())
    reservation.confirm()
    assert reservation.state.confirmed_at is not None
    reservation.mark_as_active()
    reservation.complete()
    assert reservation.status == ReservationStatus.COMPLETED
    assert reservation.state.completed_at is not None
    assert len(reservation.changes) == 4


def test_confirm_only_from_pending():
    reservation = _reservation()
    reservation.confirm()
    with pytest.raises(BusinessRuleViolation):
        reservation.confirm()


def test_cannot_activate_before_pickup_date():
    reservation = _reservation(pickup=date.today() + timedelta(days=2))
    reservation.confirm()
    with pytest.raises(BusinessRuleViolation):
        reservation.mark_as_active()


def test_cancel_is_idempotent_and_keeps_reason():
    reservation = _reservation()
    reservation.cancel("Plans changed")
    reservation.cancel("again")
    assert reservation.status == ReservationStatus.CANCELLED
    assert reservation.state.cancellation_reason == "Plans changed"
    assert len(reservation.changes) == 2


def test_cannot_cancel_active_or_completed():
    reservation = _reservation(pickup=date.today())
    reservation.confirm()
    reservation.mark_as_active()
    with pytest.raises(BusinessRuleViolation):
        reservation.cancel()
    reservation.complete()
    with pytest.raises(BusinessRuleViolation):
        reservation.cancel()


def test_no_show_only_after_pickup_date_passed():
    reservation = _reservation(pickup=date.today())
    reservation.confirm()
    with pytest.raises(BusinessRuleViolation):
        reservation.mark_as_no_show()

    past = _reservation(pickup=date.today() - timedelta(days=2))
    past.confirm()
    past.mark_as_no_show()
    assert past.status == ReservationStatus.NO_SHOW
    with pytest.raises(BusinessRuleViolation):
        past.cancel()


def test_overlap_ignores_non_blocking_statuses():
    reservation = _reservation()
    period = reservation.period
    assert reservation.overlaps_with(period)
    reservation.cancel()
    assert not reservation.overlaps_with(period)


def test_rehydrated_reservation_matches_original():
    reservation = _reservation()
    reservation.confirm()
    events = [deserialize_event(e.event_type, e.to_payload()) for e in reservation.changes]
    rebuilt = Reservation(reservation.id)
    rebuilt.load(events)
    assert rebuilt.state == reservation.state
    assert rebuilt.original_version == 1


def test_search_parameters_validation():
    params = ReservationSearchParameters.create(status="Confirmed", sort_by="Price")
    assert params.status == ReservationStatus.CONFIRMED
    assert params.paging.page_size == 50
    with pytest.raises(DomainValidationError):
        ReservationSearchParameters.create(sort_by="Colour")
    with pytest.raises(DomainValidationError):
        ReservationSearchParameters.create(status="Unknown")
    with pytest.raises(DomainValidationError):
        ReservationSearchParameters.create(price_min=Decimal("100"), price_max=Decimal("50"))
