"""
Fleet domain: vehicle categories, vehicles and rental locations.
"""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from rental.domain.errors import BusinessRuleViolation, DomainValidationError
from rental.domain.shared import Money, PagingInfo
from rental.domain.validation import ensure, ensure_max_length, ensure_not_blank, ensure_range


class VehicleCategory(str, Enum):
    KLEIN = "KLEIN"
    KOMPAKT = "KOMPAKT"
    MITTEL = "MITTEL"
    OBER = "OBER"
    SUV = "SUV"
    KOMBI = "KOMBI"
    TRANS = "TRANS"
    LUXUS = "LUXUS"

    @property
    def display_name(self) -> str:
        return _CATEGORY_NAMES[self]

    @classmethod
    def from_code(cls, code: Optional[str]) -> "VehicleCategory":
        normalized = (code or "").strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            raise DomainValidationError(f"Unknown vehicle category: {code}", "category_code") from None


_CATEGORY_NAMES = {
    VehicleCategory.KLEIN: "Kleinwagen",
    VehicleCategory.KOMPAKT: "Kompaktklasse",
    VehicleCategory.MITTEL: "Mittelklasse",
    VehicleCategory.OBER: "Oberklasse",
    VehicleCategory.SUV: "SUV",
    VehicleCategory.KOMBI: "Kombi",
    VehicleCategory.TRANS: "Transporter",
    VehicleCategory.LUXUS: "Luxusklasse",
}


class FuelType(str, Enum):
    PETROL = "Petrol"
    DIESEL = "Diesel"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"


class TransmissionType(str, Enum):
    MANUAL = "Manual"
    AUTOMATIC = "Automatic"


class VehicleStatus(str, Enum):
    AVAILABLE = "Available"
    RENTED = "Rented"
    MAINTENANCE = "Maintenance"
    OUT_OF_SERVICE = "OutOfService"
    RESERVED = "Reserved"


class LocationStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    CLOSED = "Closed"
    UNDER_MAINTENANCE = "UnderMaintenance"


_PLATE_PATTERN = re.compile(r"^[A-ZÄÖÜ]{1,3}[ -]?[A-Z]{1,2}[ -]?\d{1,4}[EH]?$")
_LOCATION_CODE_PATTERN = re.compile(r"^[A-Z]{3}-[A-Z]{3}$")


def normalize_license_plate(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    plate = ensure_max_length(value.strip().upper(), 20, "license_plate")
    ensure(_PLATE_PATTERN.match(plate) is not None, f"Invalid German license plate: {value}", "license_plate")
    return plate


def normalize_location_code(value: Optional[str]) -> str:
    code = ensure_not_blank(value, "location_code").upper()
    ensure(
        _LOCATION_CODE_PATTERN.match(code) is not None,
        f"Location code must look like 'BER-HBF': {value}",
        "location_code",
    )
    return code


def _validate_image_url(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    url = ensure_max_length(value.strip(), 500, "image_url")
    ensure(url.startswith(("http://", "https://")), "Image URL must be an http(s) URL", "image_url")
    return url


@dataclass
class Vehicle:
    """A rentable car. Mutable entity; rules live in its methods."""

    name: str
    category: VehicleCategory
    location_code: str
    daily_rate: Money
    seats: int
    fuel_type: FuelType
    transmission_type: TransmissionType
    status: VehicleStatus = VehicleStatus.AVAILABLE
    license_plate: Optional[str] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    image_url: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def create(
        cls,
        name: str,
        category: VehicleCategory,
        location_code: str,
        daily_rate: Money,
        seats: int,
        fuel_type: FuelType,
        transmission_type: TransmissionType,
        license_plate: Optional[str] = None,
        manufacturer: Optional[str] = None,
        model: Optional[str] = None,
        year: Optional[int] = None,
        image_url: Optional[str] = None,
    ) -> "Vehicle":
        name = ensure_max_length(ensure_not_blank(name, "name"), 100, "name")
        ensure_range(seats, 2, 9, "seats")
        if manufacturer is not None:
            manufacturer = ensure_max_length(ensure_not_blank(manufacturer, "manufacturer"), 100, "manufacturer")
        if model is not None:
            model = ensure_max_length(ensure_not_blank(model, "model"), 100, "model")
        if year is not None:
            ensure_range(year, 1990, date.today().year + 1, "year")
        return cls(
            name=name,
            category=category,
            location_code=normalize_location_code(location_code),
            daily_rate=daily_rate,
            seats=seats,
            fuel_type=fuel_type,
            transmission_type=transmission_type,
            license_plate=normalize_license_plate(license_plate),
            manufacturer=manufacturer,
            model=model,
            year=year,
            image_url=_validate_image_url(image_url),
        )

    def update_daily_rate(self, new_rate: Money) -> None:
        self.daily_rate = new_rate

    def move_to_location(self, location_code: str) -> None:
        if self.status == VehicleStatus.RENTED:
            raise BusinessRuleViolation("Cannot move a rented vehicle")
        self.location_code = normalize_location_code(location_code)

    def change_status(self, new_status: VehicleStatus) -> None:
        self.status = new_status

    def mark_as_rented(self) -> None:
        if self.status not in (VehicleStatus.AVAILABLE, VehicleStatus.RESERVED):
            raise BusinessRuleViolation(f"Cannot rent vehicle in status {self.status.value}")
        self.status = VehicleStatus.RENTED

    def mark_as_under_maintenance(self) -> None:
        if self.status == VehicleStatus.RENTED:
            raise BusinessRuleViolation("Cannot put a rented vehicle into maintenance")
        self.status = VehicleStatus.MAINTENANCE

    def is_available_for_rental(self) -> bool:
        return self.status == VehicleStatus.AVAILABLE


@dataclass
class Location:
    code: str
    name: str
    street: str
    city: str
    postal_code: str
    status: LocationStatus = LocationStatus.ACTIVE

    @classmethod
    def create(cls, code: str, name: str, street: str, city: str, postal_code: str) -> "Location":
        code = normalize_location_code(code)
        name = ensure_max_length(ensure_not_blank(name, "name"), 100, "name")
        street = ensure_max_length(ensure_not_blank(street, "street"), 200, "street")
        city = ensure_max_length(ensure_not_blank(city, "city"), 100, "city")
        postal_code = ensure_not_blank(postal_code, "postal_code")
        ensure(len(postal_code) == 5 and postal_code.isdigit(), "German postal code must be exactly 5 digits", "postal_code")
        return cls(code, name, street, city, postal_code)

    @property
    def full_address(self) -> str:
        return f"{self.street}, {self.postal_code} {self.city}"

    def update_information(self, name: str, street: str, city: str, postal_code: str) -> None:
        updated = Location.create(self.code, name, street, city, postal_code)
        self.name, self.street, self.city, self.postal_code = updated.name, updated.street, updated.city, updated.postal_code

    def change_status(self, new_status: LocationStatus) -> None:
        self.status = new_status

    @property
    def is_active(self) -> bool:
        return self.status == LocationStatus.ACTIVE


@dataclass(frozen=True)
class VehicleSearchParameters:
    pickup_date: Optional[date] = None
    return_date: Optional[date] = None
    location_code: Optional[str] = None
    category: Optional[VehicleCategory] = None
    min_seats: Optional[int] = None
    fuel_type: Optional[FuelType] = None
    transmission_type: Optional[TransmissionType] = None
    max_daily_rate_gross: Optional[Decimal] = None
    status: Optional[VehicleStatus] = None
    paging: PagingInfo = field(default_factory=PagingInfo)

    @classmethod
    def create(
        cls,
        pickup_date: Optional[date] = None,
        return_date: Optional[date] = None,
        location_code: Optional[str] = None,
        category_code: Optional[str] = None,
        min_seats: Optional[int] = None,
        fuel_type: Optional[str] = None,
        transmission_type: Optional[str] = None,
        max_daily_rate_gross: Optional[Decimal] = None,
        status: Optional[str] = None,
        page_number: int = 1,
        page_size: Optional[int] = None,
    ) -> "VehicleSearchParameters":
        if (pickup_date is None) != (return_date is None):
            raise DomainValidationError("Both pickup_date and return_date are required to filter by period", "pickup_date")
        if pickup_date and return_date and return_date <= pickup_date:
            raise DomainValidationError("Return date must be after pickup date", "return_date")
        if min_seats is not None:
            ensure_range(min_seats, 1, 9, "min_seats")
        if max_daily_rate_gross is not None and max_daily_rate_gross < 0:
            raise DomainValidationError("max_daily_rate_gross cannot be negative", "max_daily_rate_gross")
        return cls(
            pickup_date=pickup_date,
            return_date=return_date,
            location_code=normalize_location_code(location_code) if location_code else None,
            category=VehicleCategory.from_code(category_code) if category_code else None,
            min_seats=min_seats,
            fuel_type=parse_enum(FuelType, fuel_type, "fuel_type"),
            transmission_type=parse_enum(TransmissionType, transmission_type, "transmission_type"),
            max_daily_rate_gross=max_daily_rate_gross,
            status=parse_enum(VehicleStatus, status, "status"),
            paging=PagingInfo.create(page_number, page_size),
        )


def parse_enum(enum_cls, value: Optional[str], field_name: str):
    if value is None or not str(value).strip():
        return None
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise DomainValidationError(f"Invalid {field_name}: {value}. Allowed: {allowed}", field_name) from None
