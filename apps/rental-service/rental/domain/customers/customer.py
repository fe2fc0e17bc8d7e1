"""
Customer aggregate and its query model.

`CustomerState` is the fold of a customer's event stream; `Customer` is the
event-sourced aggregate root that enforces registration, licence and
eligibility rules before recording new events.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import List, Optional

from rental.domain.errors import BusinessRuleViolation, DomainValidationError
from rental.domain.eventsourcing import Aggregate, DomainEvent
from rental.domain.validation import ensure_not_blank
from rental.domain.customers.events import (
    BusinessDetailsUpdated,
    CustomerAnonymized,
    CustomerEmailChanged,
    CustomerProfileUpdated,
    CustomerRegistered,
    CustomerStatusChanged,
    CustomerUpgradedToBusiness,
    DriversLicenseUpdated,
)
from rental.domain.customers.value_objects import (
    Address,
    BirthDate,
    CompanyName,
    CustomerName,
    CustomerStatus,
    CustomerType,
    DriversLicense,
    Email,
    PaymentTerms,
    PhoneNumber,
    VatId,
    add_years,
    age_on,
)

MINIMUM_RENTAL_AGE_YEARS = 21
MINIMUM_REGISTRATION_AGE_YEARS = 18
MINIMUM_LICENSE_HELD_YEARS = 1
MINIMUM_LICENSE_VALIDITY_DAYS = 30


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class CustomerState:
    id: Optional[uuid.UUID] = None
    name: Optional[CustomerName] = None
    email: Optional[Email] = None
    phone_number: Optional[PhoneNumber] = None
    date_of_birth: Optional[BirthDate] = None
    address: Optional[Address] = None
    drivers_license: Optional[DriversLicense] = None
    status: CustomerStatus = CustomerStatus.ACTIVE
    customer_type: CustomerType = CustomerType.INDIVIDUAL
    company_name: Optional[CompanyName] = None
    vat_id: Optional[VatId] = None
    payment_terms: Optional[PaymentTerms] = None
    is_anonymized: bool = False
    registered_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_been_created(self) -> bool:
        return self.id is not None

    @property
    def full_name(self) -> str:
        return self.name.full_name if self.name else ""

    @property
    def formal_name(self) -> str:
        return self.name.formal_name if self.name else ""

    @property
    def age(self) -> int:
        return self.date_of_birth.age if self.date_of_birth else 0

    @property
    def is_business_customer(self) -> bool:
        return self.customer_type == CustomerType.BUSINESS

    @property
    def display_name(self) -> str:
        if self.is_business_customer and self.company_name:
            return self.company_name.value
        return self.full_name

    def when(self, event: DomainEvent) -> "CustomerState":
        if isinstance(event, CustomerRegistered):
            return replace(
                self,
                id=event.customer_id,
                name=event.name,
                email=event.email,
                phone_number=event.phone_number,
                date_of_birth=event.date_of_birth,
                address=event.address,
                drivers_license=event.drivers_license,
                status=CustomerStatus.ACTIVE,
                registered_at=event.registered_at,
                updated_at=event.registered_at,
            )
        if isinstance(event, CustomerProfileUpdated):
            return replace(self, name=event.name, phone_number=event.phone_number, address=event.address, updated_at=event.updated_at)
        if isinstance(event, DriversLicenseUpdated):
            return replace(self, drivers_license=event.new_license, updated_at=event.updated_at)
        if isinstance(event, CustomerStatusChanged):
            return replace(self, status=event.new_status, updated_at=event.changed_at)
        if isinstance(event, CustomerEmailChanged):
            return replace(self, email=event.new_email, updated_at=event.changed_at)
        if isinstance(event, (CustomerUpgradedToBusiness, BusinessDetailsUpdated)):
            ts = event.upgraded_at if isinstance(event, CustomerUpgradedToBusiness) else event.updated_at
            return replace(
                self,
                customer_type=CustomerType.BUSINESS,
                company_name=event.company_name,
                vat_id=event.vat_id,
                payment_terms=event.payment_terms,
                updated_at=ts,
            )
        if isinstance(event, CustomerAnonymized):
            return replace(
                self,
                name=event.name,
                email=event.email,
                phone_number=event.phone_number,
                address=event.address,
                drivers_license=event.drivers_license,
                company_name=None,
                vat_id=None,
                is_anonymized=True,
                status=CustomerStatus.BLOCKED,
                updated_at=event.anonymized_at,
            )
        raise ValueError(f"Unhandled customer event: {type(event).__name__}")


@dataclass(frozen=True)
class RentalEligibilityResult:
    is_eligible: bool
    issues: List[str] = field(default_factory=list)


def _validate_registration_age(date_of_birth: date) -> None:
    today = date.today()
    if date_of_birth > today:
        raise DomainValidationError("Date of birth cannot be in the future", "date_of_birth")
    age = age_on(date_of_birth, today)
    if age < MINIMUM_REGISTRATION_AGE_YEARS:
        raise DomainValidationError(
            f"Customer must be at least {MINIMUM_REGISTRATION_AGE_YEARS} years old to register. Current age: {age}",
            "date_of_birth",
        )
    if age > 150:
        raise DomainValidationError("Invalid date of birth - age cannot exceed 150 years", "date_of_birth")


def _validate_license(license: DriversLicense, date_of_birth: date) -> None:
    if not license.is_valid():
        raise DomainValidationError(
            f"Driver's license is expired. Expiry date: {license.expiry_date.isoformat()}", "drivers_license"
        )
    remaining = license.days_until_expiry()
    if remaining < MINIMUM_LICENSE_VALIDITY_DAYS:
        raise DomainValidationError(
            f"Driver's license must be valid for at least {MINIMUM_LICENSE_VALIDITY_DAYS} days. Days remaining: {remaining}",
            "drivers_license",
        )
    earliest_issue = add_years(date_of_birth, MINIMUM_REGISTRATION_AGE_YEARS - 1)
    if license.issue_date < earliest_issue:
        raise DomainValidationError(
            "Driver's license issue date seems inconsistent with date of birth. "
            f"License issued: {license.issue_date.isoformat()}, Date of birth: {date_of_birth.isoformat()}",
            "drivers_license",
        )


class Customer(Aggregate[CustomerState]):
    stream_prefix = "Customer"

    def initial_state(self) -> CustomerState:
        return CustomerState()

    @property
    def status(self) -> CustomerStatus:
        return self.state.status

    def register(
        self,
        name: CustomerName,
        email: Email,
        phone_number: PhoneNumber,
        date_of_birth: BirthDate,
        address: Address,
        drivers_license: DriversLicense,
        customer_id: Optional[uuid.UUID] = None,
    ) -> None:
        self.ensure_does_not_exist()
        _validate_registration_age(date_of_birth.value)
        _validate_license(drivers_license, date_of_birth.value)
        self.id = customer_id or self.id or uuid.uuid4()
        self.apply(CustomerRegistered(
            customer_id=self.id,
            name=name,
            email=email,
            phone_number=phone_number,
            date_of_birth=date_of_birth,
            address=address,
            drivers_license=drivers_license,
            registered_at=_now(),
        ))

    def _ensure_not_anonymized(self, action: str) -> None:
        self.ensure_exists()
        if self.state.is_anonymized:
            raise BusinessRuleViolation(f"Cannot {action} of an anonymized customer")

    def update_profile(self, name: CustomerName, phone_number: PhoneNumber, address: Address) -> None:
        self._ensure_not_anonymized("update the profile")
        if (name, phone_number, address) == (self.state.name, self.state.phone_number, self.state.address):
            return
        self.apply(CustomerProfileUpdated(self.id, name, phone_number, address, _now()))

    def update_drivers_license(self, new_license: DriversLicense) -> None:
        self._ensure_not_anonymized("update the driver's license")
        _validate_license(new_license, self.state.date_of_birth.value)
        if self.state.drivers_license == new_license:
            return
        self.apply(DriversLicenseUpdated(self.id, self.state.drivers_license, new_license, _now()))

    def change_status(self, new_status: CustomerStatus, reason: Optional[str]) -> None:
        self._ensure_not_anonymized("change the status")
        reason = ensure_not_blank(reason, "reason")
        if self.state.status == new_status:
            return
        self.apply(CustomerStatusChanged(self.id, self.state.status, new_status, reason, _now()))

    def activate(self, reason: str = "Account activated") -> None:
        self.change_status(CustomerStatus.ACTIVE, reason)

    def suspend(self, reason: str) -> None:
        self.change_status(CustomerStatus.SUSPENDED, reason)

    def block(self, reason: str) -> None:
        self.change_status(CustomerStatus.BLOCKED, reason)

    def update_email(self, new_email: Email) -> None:
        self._ensure_not_anonymized("change the email")
        if self.state.email == new_email:
            return
        self.apply(CustomerEmailChanged(self.id, self.state.email, new_email, _now()))

    def upgrade_to_business(self, company_name: CompanyName, vat_id: Optional[VatId], payment_terms: PaymentTerms) -> None:
        self._ensure_not_anonymized("upgrade the account")
        if self.state.is_business_customer:
            raise BusinessRuleViolation("Customer is already a business customer")
        self.apply(CustomerUpgradedToBusiness(self.id, company_name, vat_id, payment_terms, _now()))

    def update_business_details(self, company_name: CompanyName, vat_id: Optional[VatId], payment_terms: PaymentTerms) -> None:
        self._ensure_not_anonymized("update the business details")
        if not self.state.is_business_customer:
            raise BusinessRuleViolation("Business details can only be set for business customers")
        s = self.state
        if (company_name, vat_id, payment_terms) == (s.company_name, s.vat_id, s.payment_terms):
            return
        self.apply(BusinessDetailsUpdated(self.id, company_name, vat_id, payment_terms, _now()))

    def anonymize(self) -> None:
        """Replace personal data with placeholders and block the account (GDPR erasure)."""
        self.ensure_exists()
        if self.state.is_anonymized:
            return
        self.apply(CustomerAnonymized(
            customer_id=self.id,
            name=CustomerName.anonymized(),
            email=Email.anonymized(),
            phone_number=PhoneNumber.anonymized(),
            address=Address.anonymized(),
            drivers_license=DriversLicense.anonymized(),
            anonymized_at=_now(),
        ))

    def can_make_reservation(self) -> bool:
        if self.state.status != CustomerStatus.ACTIVE:
            return False
        license = self.state.drivers_license
        if license is None or not license.is_valid():
            return False
        return license.days_until_expiry() >= MINIMUM_LICENSE_VALIDITY_DAYS

    def can_make_reservation_for(self, start_date: date, end_date: date) -> bool:
        if not self.can_make_reservation():
            return False
        license = self.state.drivers_license
        return license.is_valid_on(start_date) and license.is_valid_on(end_date)

    def validate_rental_eligibility(self, start_date: date) -> RentalEligibilityResult:
        issues: List[str] = []
        s = self.state
        if s.status != CustomerStatus.ACTIVE:
            issues.append(f"Account is not active (status: {s.status.value})")
        if s.date_of_birth is not None:
            age = s.date_of_birth.age_on(start_date)
            if age < MINIMUM_RENTAL_AGE_YEARS:
                issues.append(
                    f"Must be at least {MINIMUM_RENTAL_AGE_YEARS} years old to rent (age on rental date: {age})"
                )
        else:
            issues.append("Date of birth is required")
        if s.drivers_license is not None:
            result = s.drivers_license.validate_for_german_rental(start_date)
            if not result.is_valid:
                issues.extend(result.issues)
        else:
            issues.append("Driver's license is required")
        return RentalEligibilityResult(not issues, issues)
