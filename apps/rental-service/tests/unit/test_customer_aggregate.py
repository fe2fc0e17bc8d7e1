from datetime import date, timedelta

import pytest

from rental.domain.customers import (
    Address,
    BirthDate,
    CompanyName,
    Customer,
    CustomerName,
    CustomerStatus,
    CustomerType,
    DriversLicense,
    Email,
    PaymentTerms,
    PhoneNumber,
    VatId,
)
from rental.domain.customers.events import CustomerRegistered, CustomerStatusChanged
from rental.domain.customers.value_objects import add_years
from rental.domain.errors import BusinessRuleViolation, DomainValidationError
from rental.domain.eventsourcing import NO_STREAM, deserialize_event


def _license(issue=date(2010, 6, 1), expiry=None, country="Germany"):
    return DriversLicense("B072RRE2I55", country, issue, expiry or date.today() + timedelta(days=1000))


def _registered(dob=date(1990, 5, 15), license=None) -> Customer:
    customer = Customer()
    customer.register(
        name=CustomerName.create("Max", "Mustermann", "Herr"),
        email=Email.create("max.mustermann@example.de"),
        phone_number=PhoneNumber.create("+49 30 12345678"),
        date_of_birth=BirthDate(dob),
        address=Address.create("Hauptstraße 1", "Berlin", "10115"),
        drivers_license=license or _license(),
    )
    return customer


def test_register_records_event_and_state():
    customer = _registered()
    assert len(customer.changes) == 1
    assert isinstance(customer.changes[0], CustomerRegistered)
    assert customer.state.status == CustomerStatus.ACTIVE
    assert customer.state.customer_type == CustomerType.INDIVIDUAL
    assert customer.state.full_name == "Max Mustermann"
    assert customer.original_version == NO_STREAM
    assert customer.current_version == 0


def test_register_twice_is_rejected():
    customer = _registered()
    with pytest.raises(BusinessRuleViolation):
        customer.register(
            name=customer.state.name,
            email=customer.state.email,
            phone_number=customer.state.phone_number,
            date_of_birth=customer.state.date_of_birth,
            address=customer.state.address,
            drivers_license=customer.state.drivers_license,
        )


def test_register_under_eighteen_is_rejected():
    dob = add_years(date.today(), -17)
    with pytest.raises(DomainValidationError) as exc:
        _registered(dob=dob, license=_license(issue=date.today() - timedelta(days=10)))
    assert exc.value.field == "date_of_birth"


def test_register_with_license_expiring_soon_is_rejected():
    with pytest.raises(DomainValidationError) as exc:
        _registered(license=_license(expiry=date.today() + timedelta(days=10)))
    assert "at least 30 days" in exc.value.message


def test_register_with_license_issued_before_seventeenth_birthday_is_rejected():
    with pytest.raises(DomainValidationError):
        _registered(license=_license(issue=date(2005, 1, 1)))


def test_events_round_trip_through_payload():
    customer = _registered()
    event = customer.changes[0]
    restored = deserialize_event(event.event_type, event.to_payload())
    rebuilt = Customer(customer.id)
    rebuilt.load([restored])
    assert rebuilt.state == customer.state
    assert rebuilt.original_version == 0


def test_change_status_requires_reason_and_is_idempotent():
    customer = _registered()
    customer.clear_changes()
    with pytest.raises(DomainValidationError):
        customer.change_status(CustomerStatus.SUSPENDED, " ")
    customer.suspend("Payment overdue")
    assert isinstance(customer.changes[-1], CustomerStatusChanged)
    customer.suspend("Payment overdue")
    assert len(customer.changes) == 1
    assert customer.status == CustomerStatus.SUSPENDED


def test_update_profile_without_changes_records_nothing():
    customer = _registered()
    customer.clear_changes()
    customer.update_profile(customer.state.name, customer.state.phone_number, customer.state.address)
    assert customer.changes == []


def test_upgrade_to_business_and_update_details():
    customer = _registered()
    customer.upgrade_to_business(CompanyName.create("Muster GmbH"), VatId.create("DE123456789"), PaymentTerms.NET_30)
    assert customer.state.is_business_customer
    with pytest.raises(BusinessRuleViolation):
        customer.upgrade_to_business(CompanyName.create("Other GmbH"), None, PaymentTerms.NET_14)
    customer.update_business_details(CompanyName.create("Muster AG"), None, PaymentTerms.NET_60)
    assert customer.state.company_name.value == "Muster AG"
    assert customer.state.payment_terms == PaymentTerms.NET_60


def test_update_business_details_requires_business_customer():
    customer = _registered()
    with pytest.raises(BusinessRuleViolation):
        customer.update_business_details(CompanyName.create("Muster GmbH"), None, PaymentTerms.NET_30)


def test_anonymize_blocks_and_replaces_personal_data():
    customer = _registered()
    customer.anonymize()
    state = customer.state
    assert state.is_anonymized
    assert state.status == CustomerStatus.BLOCKED
    assert state.email.value.endswith("@gdpr-deleted.local")
    assert state.name.first_name.startswith("[DELETED-")
    count = len(customer.changes)
    customer.anonymize()
    assert len(customer.changes) == count
    with pytest.raises(BusinessRuleViolation):
        customer.update_profile(
            CustomerName.create("Max", "Mustermann"),
            PhoneNumber.create("+49 30 12345678"),
            Address.create("Hauptstraße 1", "Berlin", "10115"),
        )


def test_eligible_customer():
    customer = _registered()
    result = customer.validate_rental_eligibility(date.today() + timedelta(days=7))
    assert result.is_eligible
    assert result.issues == []
    assert customer.can_make_reservation()


def test_customer_under_twenty_one_is_not_eligible():
    dob = add_years(date.today(), -19)
    customer = _registered(dob=dob, license=_license(issue=add_years(dob, 17)))
    result = customer.validate_rental_eligibility(date.today())
    assert not result.is_eligible
    assert any("21" in issue for issue in result.issues)


def test_suspended_customer_is_not_eligible():
    customer = _registered()
    customer.suspend("Fraud check")
    result = customer.validate_rental_eligibility(date.today())
    assert not result.is_eligible
    assert not customer.can_make_reservation()


def test_operations_on_unregistered_customer_fail():
    with pytest.raises(BusinessRuleViolation):
        Customer().suspend("reason")


def test_anonymized_customer_cannot_be_reactivated_or_changed():
    customer = _registered()
    customer.anonymize()
    with pytest.raises(BusinessRuleViolation):
        customer.change_status(CustomerStatus.ACTIVE, "reopen")
    with pytest.raises(BusinessRuleViolation):
        customer.activate()
    with pytest.raises(BusinessRuleViolation):
        customer.update_drivers_license(_license())
    with pytest.raises(BusinessRuleViolation):
        customer.update_email(Email.create("max.neu@example.de"))
    with pytest.raises(BusinessRuleViolation):
        customer.upgrade_to_business(CompanyName.create("Muster GmbH"), None, PaymentTerms.NET_30)
    assert customer.state.status == CustomerStatus.BLOCKED
    assert not customer.can_make_reservation()


def test_can_make_reservation_for_checks_license_over_whole_period():
    customer = _registered(license=_license(expiry=date.today() + timedelta(days=100)))
    today = date.today()
    assert customer.can_make_reservation_for(today + timedelta(days=10), today + timedelta(days=20))
    assert not customer.can_make_reservation_for(today + timedelta(days=90), today + timedelta(days=110))

    customer.suspend("Chargeback")
    assert not customer.can_make_reservation_for(today + timedelta(days=10), today + timedelta(days=20))
