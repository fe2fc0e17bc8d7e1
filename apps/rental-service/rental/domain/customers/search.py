"""Search criteria for the customer read model."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from rental.domain.errors import DomainValidationError
from rental.domain.shared import DateRange, IntRange, PagingInfo, SortingInfo
from rental.domain.customers.value_objects import CustomerStatus, PhoneNumber

CUSTOMER_SORT_FIELDS = (
    "last_name",
    "first_name",
    "email",
    "registered_at",
    "status",
    "city",
    "date_of_birth",
)


@dataclass(frozen=True)
class CustomerSearchParameters:
    search_term: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    status: Optional[CustomerStatus] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    age_range: IntRange = field(default_factory=IntRange)
    license_expiring_within_days: Optional[int] = None
    registered: DateRange = field(default_factory=DateRange)
    sorting: SortingInfo = field(default_factory=lambda: SortingInfo("registered_at", True))
    paging: PagingInfo = field(default_factory=PagingInfo)

    @classmethod
    def create(
        cls,
        search_term: Optional[str] = None,
        email: Optional[str] = None,
        phone_number: Optional[str] = None,
        status: Optional[str] = None,
        city: Optional[str] = None,
        postal_code: Optional[str] = None,
        min_age: Optional[int] = None,
        max_age: Optional[int] = None,
        license_expiring_within_days: Optional[int] = None,
        registered_from: Optional[date] = None,
        registered_to: Optional[date] = None,
        sort_by: Optional[str] = None,
        sort_descending: bool = False,
        page_number: int = 1,
        page_size: Optional[int] = None,
    ) -> "CustomerSearchParameters":
        parsed_status = None
        if status:
            try:
                parsed_status = CustomerStatus(status)
            except ValueError:
                raise DomainValidationError(f"Invalid customer status: {status}", "status") from None
        if license_expiring_within_days is not None and license_expiring_within_days < 0:
            raise DomainValidationError("license_expiring_within_days cannot be negative", "license_expiring_within_days")
        if sort_by is None:
            sorting = SortingInfo("registered_at", True)
        elif sort_by in CUSTOMER_SORT_FIELDS:
            sorting = SortingInfo(sort_by, sort_descending)
        else:
            raise DomainValidationError(f"Cannot sort customers by '{sort_by}'", "sort_by")
        return cls(
            search_term=(search_term or "").strip() or None,
            email=(email or "").strip().lower() or None,
            phone_number=PhoneNumber.create(phone_number).value if (phone_number or "").strip() else None,
            status=parsed_status,
            city=(city or "").strip() or None,
            postal_code=(postal_code or "").strip() or None,
            age_range=IntRange.create(min_age, max_age, "age"),
            license_expiring_within_days=license_expiring_within_days,
            registered=DateRange.create(registered_from, registered_to, "registered"),
            sorting=sorting,
            paging=PagingInfo.create(page_number, page_size),
        )
