"""
Customer command service.

Turns API payloads into value objects, runs them through the `Customer`
aggregate and saves the resulting events. Email uniqueness is checked here
against the read model, with the unique index as the final guard.
"""

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rental.db import schemas
from rental.db.repositories import customers as customer_repo
from rental.db.repositories import reservations as reservation_repo
from rental.domain.customers import (
    Address,
    BirthDate,
    CompanyName,
    Customer,
    CustomerName,
    CustomerStatus,
    DriversLicense,
    Email,
    PaymentTerms,
    PhoneNumber,
    RentalEligibilityResult,
    VatId,
)
from rental.domain.errors import ConflictError, DomainValidationError

logger = logging.getLogger(__name__)


def customer_from_payload(payload: schemas.CustomerCreate, customer_id: Optional[uuid.UUID] = None) -> Customer:
    """Build and register a new aggregate from a registration payload."""
    customer = Customer()
    customer.register(
        name=CustomerName.create(payload.first_name, payload.last_name, payload.salutation),
        email=Email.create(payload.email),
        phone_number=PhoneNumber.create(payload.phone_number),
        date_of_birth=BirthDate.create(payload.date_of_birth),
        address=Address.create(payload.street, payload.city, payload.postal_code, payload.country),
        drivers_license=DriversLicense.create(
            payload.license_number,
            payload.license_issue_country,
            payload.license_issue_date,
            payload.license_expiry_date,
        ),
        customer_id=customer_id,
    )
    return customer


class CustomerCommandService:
    """Write operations on customers."""

    def __init__(self, db: Session):
        self.db = db

    def register(self, payload: schemas.CustomerCreate, *, commit: bool = True) -> Customer:
        customer = customer_from_payload(payload)
        if customer_repo.exists_with_email(self.db, customer.state.email.value):
            raise ConflictError(f"A customer with email '{customer.state.email.value}' already exists")
        customer_repo.save_customer(self.db, customer, commit=commit)
        logger.info("customer_registered: id=%s", customer.id)
        return customer

    def update_profile(self, customer_id: uuid.UUID, payload: schemas.CustomerProfileUpdate) -> Customer:
        customer = customer_repo.load_customer(self.db, customer_id)
        customer.update_profile(
            CustomerName.create(payload.first_name, payload.last_name, payload.salutation),
            PhoneNumber.create(payload.phone_number),
            Address.create(payload.street, payload.city, payload.postal_code, payload.country),
        )
        return self._save_and_sync_reservations(customer)

    def update_drivers_license(self, customer_id: uuid.UUID, payload: schemas.DriversLicenseUpdate) -> Customer:
        customer = customer_repo.load_customer(self.db, customer_id)
        customer.update_drivers_license(
            DriversLicense.create(payload.license_number, payload.issue_country, payload.issue_date, payload.expiry_date)
        )
        return customer_repo.save_customer(self.db, customer)

    def change_status(self, customer_id: uuid.UUID, status: str, reason: Optional[str]) -> Customer:
        try:
            new_status = CustomerStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in CustomerStatus)
            raise DomainValidationError(f"Invalid customer status: {status}. Allowed: {allowed}", "status") from None
        customer = customer_repo.load_customer(self.db, customer_id)
        customer.change_status(new_status, reason)
        customer_repo.save_customer(self.db, customer)
        logger.info("customer_status_changed: id=%s status=%s", customer_id, new_status.value)
        return customer

    def update_email(self, customer_id: uuid.UUID, email: str) -> Customer:
        new_email = Email.create(email)
        if customer_repo.exists_with_email(self.db, new_email.value, exclude_id=customer_id):
            raise ConflictError(f"A customer with email '{new_email.value}' already exists")
        customer = customer_repo.load_customer(self.db, customer_id)
        customer.update_email(new_email)
        return self._save_and_sync_reservations(customer)

    def upgrade_to_business(self, customer_id: uuid.UUID, payload: schemas.BusinessDetails) -> Customer:
        customer = customer_repo.load_customer(self.db, customer_id)
        customer.upgrade_to_business(*_business_details(payload))
        return customer_repo.save_customer(self.db, customer)

    def update_business_details(self, customer_id: uuid.UUID, payload: schemas.BusinessDetails) -> Customer:
        customer = customer_repo.load_customer(self.db, customer_id)
        customer.update_business_details(*_business_details(payload))
        return customer_repo.save_customer(self.db, customer)

    def anonymize(self, customer_id: uuid.UUID) -> Customer:
        customer = customer_repo.load_customer(self.db, customer_id)
        customer.anonymize()
        self._save_and_sync_reservations(customer)
        logger.info("customer_anonymized: id=%s", customer_id)
        return customer

    def check_eligibility(self, customer_id: uuid.UUID, start_date: date) -> RentalEligibilityResult:
        customer = customer_repo.load_customer(self.db, customer_id)
        return customer.validate_rental_eligibility(start_date)

    def _save_and_sync_reservations(self, customer: Customer) -> Customer:
        if not customer.changes:
            return customer
        customer_repo.save_customer(self.db, customer, commit=False)
        reservation_repo.update_customer_details(
            self.db, customer.id, customer.state.full_name, customer.state.email.value
        )
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return customer


def _business_details(payload: schemas.BusinessDetails):
    return (
        CompanyName.create(payload.company_name),
        VatId.create(payload.vat_id) if payload.vat_id else None,
        PaymentTerms.create(payload.payment_terms_days),
    )
