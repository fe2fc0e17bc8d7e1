"""Customer domain events and their payload decoding."""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from rental.domain.eventsourcing import DomainEvent
from rental.domain.customers.value_objects import (
    Address,
    BirthDate,
    CompanyName,
    CustomerName,
    CustomerStatus,
    DriversLicense,
    Email,
    PaymentTerms,
    PhoneNumber,
    Salutation,
    VatId,
)


def _name(data: Dict[str, Any]) -> CustomerName:
    salutation = data.get("salutation")
    return CustomerName(data["first_name"], data["last_name"], Salutation(salutation) if salutation else None)


def _address(data: Dict[str, Any]) -> Address:
    return Address(data["street"], data["city"], data["postal_code"], data["country"])


def _license(data: Dict[str, Any]) -> DriversLicense:
    return DriversLicense(
        data["license_number"],
        data["issue_country"],
        date.fromisoformat(data["issue_date"]),
        date.fromisoformat(data["expiry_date"]),
    )


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class CustomerRegistered(DomainEvent):
    customer_id: uuid.UUID
    name: CustomerName
    email: Email
    phone_number: PhoneNumber
    date_of_birth: BirthDate
    address: Address
    drivers_license: DriversLicense
    registered_at: datetime

    @classmethod
    def from_payload(cls, payload):
        return cls(
            customer_id=uuid.UUID(payload["customer_id"]),
            name=_name(payload["name"]),
            email=Email(payload["email"]["value"]),
            phone_number=PhoneNumber(payload["phone_number"]["value"]),
            date_of_birth=BirthDate(date.fromisoformat(payload["date_of_birth"]["value"])),
            address=_address(payload["address"]),
            drivers_license=_license(payload["drivers_license"]),
            registered_at=_ts(payload["registered_at"]),
        )


@dataclass(frozen=True)
class CustomerProfileUpdated(DomainEvent):
    customer_id: uuid.UUID
    name: CustomerName
    phone_number: PhoneNumber
    address: Address
    updated_at: datetime

    @classmethod
    def from_payload(cls, payload):
        return cls(
            customer_id=uuid.UUID(payload["customer_id"]),
            name=_name(payload["name"]),
            phone_number=PhoneNumber(payload["phone_number"]["value"]),
            address=_address(payload["address"]),
            updated_at=_ts(payload["updated_at"]),
        )


@dataclass(frozen=True)
class DriversLicenseUpdated(DomainEvent):
    customer_id: uuid.UUID
    old_license: DriversLicense
    new_license: DriversLicense
    updated_at: datetime

    @classmethod
    def from_payload(cls, payload):
        return cls(
            customer_id=uuid.UUID(payload["customer_id"]),
            old_license=_license(payload["old_license"]),
            new_license=_license(payload["new_license"]),
            updated_at=_ts(payload["updated_at"]),
        )


@dataclass(frozen=True)
class CustomerStatusChanged(DomainEvent):
    customer_id: uuid.UUID
    old_status: CustomerStatus
    new_status: CustomerStatus
    reason: str
    changed_at: datetime

    @classmethod
    def from_payload(cls, payload):
        return cls(
            customer_id=uuid.UUID(payload["customer_id"]),
            old_status=CustomerStatus(payload["old_status"]),
            new_status=CustomerStatus(payload["new_status"]),
            reason=payload["reason"],
            changed_at=_ts(payload["changed_at"]),
        )


@dataclass(frozen=True)
class CustomerEmailChanged(DomainEvent):
    customer_id: uuid.UUID
    old_email: Email
    new_email: Email
    changed_at: datetime

    @classmethod
    def from_payload(cls, payload):
        return cls(
            customer_id=uuid.UUID(payload["customer_id"]),
            old_email=Email(payload["old_email"]["value"]),
            new_email=Email(payload["new_email"]["value"]),
            changed_at=_ts(payload["changed_at"]),
        )


@dataclass(frozen=True)
class CustomerUpgradedToBusiness(DomainEvent):
    customer_id: uuid.UUID
    company_name: CompanyName
    vat_id: Optional[VatId]
    payment_terms: PaymentTerms
    upgraded_at: datetime

    @classmethod
    def from_payload(cls, payload):
        vat = payload.get("vat_id")
        return cls(
            customer_id=uuid.UUID(payload["customer_id"]),
            company_name=CompanyName(payload["company_name"]["value"]),
            vat_id=VatId(vat["value"]) if vat else None,
            payment_terms=PaymentTerms(payload["payment_terms"]["days_until_due"]),
            upgraded_at=_ts(payload["upgraded_at"]),
        )


@dataclass(frozen=True)
class BusinessDetailsUpdated(DomainEvent):
    customer_id: uuid.UUID
    company_name: CompanyName
    vat_id: Optional[VatId]
    payment_terms: PaymentTerms
    updated_at: datetime

    @classmethod
    def from_payload(cls, payload):
        vat = payload.get("vat_id")
        return cls(
            customer_id=uuid.UUID(payload["customer_id"]),
            company_name=CompanyName(payload["company_name"]["value"]),
            vat_id=VatId(vat["value"]) if vat else None,
            payment_terms=PaymentTerms(payload["payment_terms"]["days_until_due"]),
            updated_at=_ts(payload["updated_at"]),
        )


@dataclass(frozen=True)
class CustomerAnonymized(DomainEvent):
    customer_id: uuid.UUID
    name: CustomerName
    email: Email
    phone_number: PhoneNumber
    address: Address
    drivers_license: DriversLicense
    anonymized_at: datetime

    @classmethod
    def from_payload(cls, payload):
        return cls(
            customer_id=uuid.UUID(payload["customer_id"]),
            name=_name(payload["name"]),
            email=Email(payload["email"]["value"]),
            phone_number=PhoneNumber(payload["phone_number"]["value"]),
            address=_address(payload["address"]),
            drivers_license=_license(payload["drivers_license"]),
            anonymized_at=_ts(payload["anonymized_at"]),
        )
