import os
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("PYTEST_RUNNING", "1")

import rental.db.database as db_module
from rental.api.main import app
from rental.db import models
from rental.db.repositories import fleet as fleet_repo
from rental.db.repositories import pricing as pricing_repo
from rental.domain.fleet import FuelType, Location, TransmissionType, Vehicle, VehicleCategory
from rental.domain.pricing import PricingPolicy
from rental.domain.shared import Money
from rental.utils.feature_flags import refresh_feature_flag_cache

_FLAG_ENV_VARS = (
    "FEATURE_GUEST_BOOKING_ENABLED",
    "FEATURE_EMAIL_NOTIFICATIONS_ENABLED",
    "FEATURE_DEMO_DATA_ENABLED",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """No dev-mode admin and default feature flags unless a test opts in."""
    monkeypatch.delenv("DEV_MODE", raising=False)
    for name in _FLAG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    refresh_feature_flag_cache()
    yield
    refresh_feature_flag_cache()


def _clear_tables():
    session = db_module.SessionLocal()
    try:
        for table in reversed(models.Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
    finally:
        session.close()


@pytest.fixture
def db_session():
    db_module.init_sqlite_schema()
    session = db_module.SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        _clear_tables()


# Backwards compatibility: some tests expect a 'db' fixture name
@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[db_module.get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(db_module.get_db, None)


def auth_headers(email: str, *roles: str) -> dict:
    return {
        "X-Auth-Request-Email": email,
        "X-Auth-Request-User": email.split("@")[0],
        "X-Auth-Request-Groups": ",".join(roles),
    }


@pytest.fixture
def make_headers():
    return auth_headers


@pytest.fixture
def call_center_headers():
    return auth_headers("agent@orange-rental.de", "call-center")


@pytest.fixture
def fleet_manager_headers():
    return auth_headers("fleet@orange-rental.de", "fleet-manager")


@pytest.fixture
def customer_headers():
    return auth_headers("max.mustermann@example.de", "customer")


@pytest.fixture
def customer_payload():
    def _build(**overrides):
        today = date.today()
        payload = {
            "salutation": "Herr",
            "first_name": "Max",
            "last_name": "Mustermann",
            "email": "max.mustermann@example.de",
            "phone_number": "+49 30 12345678",
            "date_of_birth": "1990-05-15",
            "street": "Hauptstraße 1",
            "city": "Berlin",
            "postal_code": "10115",
            "country": "Germany",
            "license_number": "B072RRE2I55",
            "license_issue_country": "Germany",
            "license_issue_date": "2010-06-01",
            "license_expiry_date": (today + timedelta(days=5 * 365)).isoformat(),
        }
        payload.update(overrides)
        return payload

    return _build


@pytest.fixture
def location_factory(db_session):
    def _create(code="BER-HBF", name="Berlin Hauptbahnhof", city="Berlin", postal_code="10557"):
        return fleet_repo.create_location(
            db_session, Location.create(code, name, "Europaplatz 1", city, postal_code)
        )

    return _create


@pytest.fixture
def vehicle_factory(db_session):
    def _create(
        name="VW Golf",
        category=VehicleCategory.KOMPAKT,
        location_code="BER-HBF",
        rate="49.99",
        seats=5,
        fuel_type=FuelType.PETROL,
        transmission_type=TransmissionType.MANUAL,
        license_plate=None,
    ):
        return fleet_repo.create_vehicle(db_session, Vehicle.create(
            name=name,
            category=category,
            location_code=location_code,
            daily_rate=Money.euro(Decimal(rate)),
            seats=seats,
            fuel_type=fuel_type,
            transmission_type=transmission_type,
            license_plate=license_plate,
        ))

    return _create


@pytest.fixture
def pricing_factory(db_session):
    def _create(category=VehicleCategory.KOMPAKT, rate="39.99", location_code=None):
        return pricing_repo.create_policy(db_session, PricingPolicy(
            category=category,
            daily_rate=Money.euro(Decimal(rate)),
            location_code=location_code,
            effective_from=datetime.now(UTC) - timedelta(days=1),
        ))

    return _create
