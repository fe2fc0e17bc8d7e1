"""
Customer value objects.

Every object is an immutable dataclass. Use the `create` (or `of`)
classmethods for untrusted input: they normalize and validate. The plain
constructor is reserved for rehydrating already-validated data from events
and read models.
"""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from rental.domain.errors import DomainValidationError
from rental.domain.validation import (
    ensure,
    ensure_length_between,
    ensure_max_length,
    ensure_not_blank,
    ensure_range,
)

_EMAIL_PATTERN = re.compile(
    r"^[a-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$"
)

GERMAN_COUNTRY_NAMES = {"germany", "deutschland"}

EU_COUNTRIES = {
    name.lower()
    for name in (
        "Germany", "Deutschland", "France", "Italy", "Spain", "Netherlands",
        "Belgium", "Austria", "Poland", "Portugal", "Greece", "Sweden",
        "Denmark", "Finland", "Ireland", "Czech Republic", "Romania",
        "Hungary", "Slovakia", "Bulgaria", "Croatia", "Slovenia",
        "Lithuania", "Latvia", "Estonia", "Luxembourg", "Malta", "Cyprus",
    )
}


def add_years(value: date, years: int) -> date:
    """Shift by whole years; 29 February falls back to 28 February."""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)


def age_on(birth_date: date, as_of: date) -> int:
    age = as_of.year - birth_date.year
    if add_years(birth_date, age) > as_of:
        age -= 1
    return age


class CustomerStatus(str, Enum):
    ACTIVE = "Active"
    SUSPENDED = "Suspended"
    BLOCKED = "Blocked"


class CustomerType(str, Enum):
    INDIVIDUAL = "Individual"
    BUSINESS = "Business"


class Salutation(str, Enum):
    HERR = "Herr"
    FRAU = "Frau"
    DIVERS = "Divers"


@dataclass(frozen=True)
class Email:
    value: str

    @classmethod
    def create(cls, value: Optional[str]) -> "Email":
        if value is None or not value.strip():
            raise DomainValidationError("Email address cannot be empty", "email")
        normalized = value.strip().lower()
        at_index = normalized.find("@")
        valid = (
            0 < at_index < len(normalized) - 1
            and normalized.rfind("@") == at_index
            and "." in normalized[at_index + 1:]
            and _EMAIL_PATTERN.match(normalized) is not None
        )
        if not valid:
            raise DomainValidationError(f"Invalid email address format: {value}", "email")
        if len(normalized) > 254:
            raise DomainValidationError("Email address is too long (max 254 characters)", "email")
        return cls(normalized)

    @classmethod
    def anonymized(cls) -> "Email":
        return cls(f"anonymized-{uuid.uuid4()}@gdpr-deleted.local")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PhoneNumber:
    value: str

    @classmethod
    def create(cls, value: Optional[str]) -> "PhoneNumber":
        raw = ensure_not_blank(value, "phone_number")
        normalized = raw
        for ch in (" ", "-", "(", ")", "/"):
            normalized = normalized.replace(ch, "")
        if normalized.startswith("0") and not normalized.startswith("00"):
            normalized = "+49" + normalized[1:]
        elif normalized.startswith("0049"):
            normalized = "+49" + normalized[4:]

        ensure(normalized.startswith("+49"), f"Invalid German phone number format: {value}. Expected format: +49XXXXXXXXXX", "phone_number")
        ensure_length_between(normalized, 6, 16, "phone_number")
        digits = normalized[3:]
        ensure(
            digits.isdigit() and digits[0] != "0",
            f"Invalid German phone number format: {value}. Expected format: +49XXXXXXXXXX",
            "phone_number",
        )
        return cls(normalized)

    @classmethod
    def anonymized(cls) -> "PhoneNumber":
        return cls("+490000000000")

    @property
    def formatted(self) -> str:
        if len(self.value) <= 3:
            return self.value
        rest = self.value[3:]
        if len(rest) <= 3:
            return f"+49 {rest}"
        return f"+49 {rest[:3]} {rest[3:]}"

    def __str__(self) -> str:
        return self.formatted


@dataclass(frozen=True)
class Address:
    street: str
    city: str
    postal_code: str
    country: str = "Germany"

    @classmethod
    def create(cls, street: Optional[str], city: Optional[str], postal_code: Optional[str], country: Optional[str] = "Germany") -> "Address":
        street = ensure_max_length(ensure_not_blank(street, "street"), 200, "street")
        city = ensure_max_length(ensure_not_blank(city, "city"), 100, "city")
        postal_code = ensure_not_blank(postal_code, "postal_code")
        country = ensure_max_length((country or "Germany").strip() or "Germany", 100, "country")
        if country.lower() in GERMAN_COUNTRY_NAMES:
            ensure(
                len(postal_code) == 5 and postal_code.isdigit(),
                "German postal code must be exactly 5 digits",
                "postal_code",
            )
        return cls(street, city, postal_code, country)

    @classmethod
    def anonymized(cls) -> "Address":
        return cls("Anonymized Street", "Anonymized City", "00000", "Germany")

    @property
    def full_address(self) -> str:
        return f"{self.street}, {self.postal_code} {self.city}, {self.country}"

    def __str__(self) -> str:
        return self.full_address


@dataclass(frozen=True)
class LicenseValidationResult:
    is_valid: bool
    issues: List[str]


@dataclass(frozen=True)
class DriversLicense:
    license_number: str
    issue_country: str
    issue_date: date
    expiry_date: date

    MINIMUM_ISSUE_DATE = date(1950, 1, 1)

    @classmethod
    def create(cls, license_number: Optional[str], issue_country: Optional[str], issue_date: date, expiry_date: date) -> "DriversLicense":
        number = ensure_not_blank(license_number, "license_number").upper()
        ensure_length_between(number, 5, 20, "license_number")
        ensure(
            all(ch.isalnum() or ch.isspace() for ch in number),
            "License number must contain only letters, digits, and spaces",
            "license_number",
        )
        country = ensure_max_length(ensure_not_blank(issue_country, "issue_country"), 100, "issue_country")
        ensure_range(issue_date, cls.MINIMUM_ISSUE_DATE, date.today(), "issue_date")
        ensure(expiry_date > issue_date, "License expiry date must be after issue date", "expiry_date")
        return cls(number, country, issue_date, expiry_date)

    @classmethod
    def anonymized(cls) -> "DriversLicense":
        return cls("ANONYMIZED000000", "Germany", date(2000, 1, 1), date(2099, 12, 31))

    def is_valid(self) -> bool:
        return self.expiry_date >= date.today()

    def is_valid_on(self, on: date) -> bool:
        return self.issue_date <= on <= self.expiry_date

    def is_eu_license(self) -> bool:
        return self.issue_country.lower() in EU_COUNTRIES

    def days_until_expiry(self) -> int:
        return (self.expiry_date - date.today()).days

    def validate_for_german_rental(self, rental_date: date) -> LicenseValidationResult:
        issues: List[str] = []
        valid = True
        if self.expiry_date < rental_date:
            issues.append(f"License expires on {self.expiry_date.isoformat()}, before the rental date")
            valid = False
        if add_years(self.issue_date, 1) > rental_date:
            issues.append("License must have been held for at least 1 year")
            valid = False
        if not self.is_eu_license():
            # informational only; the counter staff checks the permit at pickup
            issues.append("Non-EU license: an International Driving Permit is required")
        return LicenseValidationResult(valid, issues)

    def __str__(self) -> str:
        return f"{self.license_number} ({self.issue_country}, expires {self.expiry_date.isoformat()})"


@dataclass(frozen=True)
class CustomerName:
    first_name: str
    last_name: str
    salutation: Optional[Salutation] = None

    @classmethod
    def create(cls, first_name: Optional[str], last_name: Optional[str], salutation: Optional[Salutation | str] = None) -> "CustomerName":
        first = ensure_max_length(ensure_not_blank(first_name, "first_name"), 100, "first_name")
        last = ensure_max_length(ensure_not_blank(last_name, "last_name"), 100, "last_name")
        if salutation is not None and not isinstance(salutation, Salutation):
            try:
                salutation = Salutation(salutation)
            except ValueError:
                raise DomainValidationError(f"Invalid salutation: {salutation}", "salutation") from None
        return cls(first, last, salutation)

    @classmethod
    def anonymized(cls) -> "CustomerName":
        marker = uuid.uuid4().hex[:8]
        return cls(f"[DELETED-{marker}]", f"[DELETED-{marker}]", None)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def formal_name(self) -> str:
        if self.salutation is None:
            return self.full_name
        return f"{self.salutation.value} {self.full_name}"


@dataclass(frozen=True)
class BirthDate:
    value: date

    @classmethod
    def create(cls, value: Optional[date]) -> "BirthDate":
        if value is None:
            raise DomainValidationError("Date of birth is required", "date_of_birth")
        today = date.today()
        ensure(value <= today, "Date of birth cannot be in the future", "date_of_birth")
        ensure(age_on(value, today) <= 150, "Invalid date of birth - age cannot exceed 150 years", "date_of_birth")
        return cls(value)

    @property
    def age(self) -> int:
        return age_on(self.value, date.today())

    def age_on(self, as_of: date) -> int:
        return age_on(self.value, as_of)


_VAT_ID_PATTERN = re.compile(r"^DE\d{9}$")


@dataclass(frozen=True)
class VatId:
    value: str

    @classmethod
    def create(cls, value: Optional[str]) -> "VatId":
        raw = ensure_not_blank(value, "vat_id")
        normalized = raw.replace(" ", "").upper()
        ensure(
            _VAT_ID_PATTERN.match(normalized) is not None,
            "German VAT ID must be 'DE' followed by 9 digits",
            "vat_id",
        )
        return cls(normalized)

    @classmethod
    def try_create(cls, value: Optional[str]) -> Optional["VatId"]:
        try:
            return cls.create(value)
        except DomainValidationError:
            return None

    @property
    def country_code(self) -> str:
        return self.value[:2]

    @property
    def numeric_part(self) -> str:
        return self.value[2:]

    @property
    def formatted(self) -> str:
        return f"{self.country_code} {self.numeric_part}"

    def __str__(self) -> str:
        return self.value


_GERMAN_LEGAL_FORMS = (
    "gmbh & co. kg", "gmbh", "ag", "kg", "ohg", "ug", "se", "e.k.", "gbr", "ltd.", "ltd",
)


@dataclass(frozen=True)
class CompanyName:
    value: str

    @classmethod
    def create(cls, value: Optional[str]) -> "CompanyName":
        return cls(ensure_max_length(ensure_not_blank(value, "company_name"), 200, "company_name"))

    def has_german_legal_form(self) -> bool:
        lowered = self.value.lower()
        for form in _GERMAN_LEGAL_FORMS:
            if lowered.endswith(" " + form) or f" {form} " in lowered or f" {form}," in lowered:
                return True
        return False

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PaymentTerms:
    days_until_due: int

    @classmethod
    def create(cls, days_until_due: int) -> "PaymentTerms":
        ensure_range(days_until_due, 0, 90, "payment_terms")
        return cls(days_until_due)

    @property
    def is_immediate(self) -> bool:
        return self.days_until_due == 0

    def due_date(self, invoice_date: date) -> date:
        return invoice_date + timedelta(days=self.days_until_due)

    @property
    def german_name(self) -> str:
        if self.is_immediate:
            return "Sofort fällig"
        return f"Zahlungsziel {self.days_until_due} Tage"

    @property
    def english_name(self) -> str:
        if self.is_immediate:
            return "Due immediately"
        return f"Net {self.days_until_due} days"

    def __str__(self) -> str:
        return self.english_name


PaymentTerms.IMMEDIATE = PaymentTerms(0)
PaymentTerms.NET_7 = PaymentTerms(7)
PaymentTerms.NET_14 = PaymentTerms(14)
PaymentTerms.NET_30 = PaymentTerms(30)
PaymentTerms.NET_60 = PaymentTerms(60)
