from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from rental.domain.errors import BusinessRuleViolation, DomainValidationError
from rental.domain.fleet import (
    FuelType,
    Location,
    LocationStatus,
    TransmissionType,
    Vehicle,
    VehicleCategory,
    VehicleSearchParameters,
    VehicleStatus,
    normalize_license_plate,
    normalize_location_code,
)
from rental.domain.pricing import PricingPolicy, RentalPeriod
from rental.domain.shared import Money


def _vehicle(**overrides):
    values = dict(
        name="VW Golf",
        category=VehicleCategory.KOMPAKT,
        location_code="ber-hbf",
        daily_rate=Money.euro(Decimal("49.99")),
        seats=5,
        fuel_type=FuelType.DIESEL,
        transmission_type=TransmissionType.MANUAL,
    )
    values.update(overrides)
    return Vehicle.create(**values)


def test_category_lookup_and_display_name():
    assert VehicleCategory.from_code(" kompakt ") is VehicleCategory.KOMPAKT
    assert VehicleCategory.LUXUS.display_name == "Luxusklasse"
    with pytest.raises(DomainValidationError):
        VehicleCategory.from_code("SPORT")


def test_location_code_format():
    assert normalize_location_code("muc-flg") == "MUC-FLG"
    with pytest.raises(DomainValidationError):
        normalize_location_code("MUNICH")


@pytest.mark.parametrize("plate", ["B-AB 1234", "M AB 123E", "HH-X1"])
def test_valid_german_plates(plate):
    assert normalize_license_plate(plate.lower()) == plate


def test_invalid_plate_rejected():
    with pytest.raises(DomainValidationError):
        normalize_license_plate("12-ABC")


def test_vehicle_create_validates_seats_and_year():
    assert _vehicle().location_code == "BER-HBF"
    with pytest.raises(DomainValidationError):
        _vehicle(seats=12)
    with pytest.raises(DomainValidationError):
        _vehicle(year=1980)
    with pytest.raises(DomainValidationError):
        _vehicle(image_url="ftp://example.de/car.png")


def test_vehicle_status_rules():
    vehicle = _vehicle()
    assert vehicle.is_available_for_rental()
    vehicle.mark_as_rented()
    with pytest.raises(BusinessRuleViolation):
        vehicle.move_to_location("MUC-FLG")
    with pytest.raises(BusinessRuleViolation):
        vehicle.mark_as_under_maintenance()
    with pytest.raises(BusinessRuleViolation):
        vehicle.mark_as_rented()
    vehicle.change_status(VehicleStatus.AVAILABLE)
    vehicle.move_to_location("muc-flg")
    assert vehicle.location_code == "MUC-FLG"


def test_location_create_and_update():
    location = Location.create("ham-hbf", "Hamburg Hbf", "Hachmannplatz 16", "Hamburg", "20099")
    assert location.code == "HAM-HBF"
    assert location.is_active
    assert location.full_address == "Hachmannplatz 16, 20099 Hamburg"
    location.update_information("Hamburg Hauptbahnhof", "Hachmannplatz 16", "Hamburg", "20099")
    assert location.name == "Hamburg Hauptbahnhof"
    location.change_status(LocationStatus.CLOSED)
    assert not location.is_active
    with pytest.raises(DomainValidationError):
        Location.create("HAM-HBF", "Hamburg", "Street 1", "Hamburg", "2009")


def test_vehicle_search_parameters_validation():
    start = date.today() + timedelta(days=1)
    params = VehicleSearchParameters.create(
        pickup_date=start,
        return_date=start + timedelta(days=2),
        category_code="suv",
        fuel_type="Electric",
    )
    assert params.category is VehicleCategory.SUV
    assert params.fuel_type is FuelType.ELECTRIC
    with pytest.raises(DomainValidationError):
        VehicleSearchParameters.create(pickup_date=start)
    with pytest.raises(DomainValidationError):
        VehicleSearchParameters.create(fuel_type="Steam")


def test_rental_period_total_days_is_inclusive():
    start = date.today() + timedelta(days=3)
    assert RentalPeriod.create(start, start + timedelta(days=4)).total_days == 5
    with pytest.raises(DomainValidationError):
        RentalPeriod.create(start, start)


def test_policy_calculates_total_price():
    policy = PricingPolicy(
        category=VehicleCategory.KLEIN,
        daily_rate=Money.euro(Decimal("29.99")),
        effective_from=datetime.now(UTC) - timedelta(days=1),
    )
    start = date.today() + timedelta(days=1)
    calculation = policy.calculate_price(RentalPeriod.create(start, start + timedelta(days=2)))
    assert calculation.period.total_days == 3
    assert calculation.total_price.net_amount == Decimal("89.97")
    assert calculation.total_price.gross_amount == Decimal("107.07")


def test_policy_validity_window():
    now = datetime.now(UTC)
    policy = PricingPolicy(
        category=VehicleCategory.KLEIN,
        daily_rate=Money.euro(Decimal("29.99")),
        effective_from=now - timedelta(days=10),
        effective_until=now + timedelta(days=10),
    )
    assert policy.is_valid_for(now)
    assert not policy.is_valid_on((now + timedelta(days=20)).date())
    policy.deactivate()
    assert not policy.is_valid_for(now)
    with pytest.raises(BusinessRuleViolation):
        policy.update_daily_rate(Money.euro(Decimal("10")))
