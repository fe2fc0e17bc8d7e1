"""Customer bounded context: value objects, events and the Customer aggregate."""

from .value_objects import (
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
    Salutation,
    VatId,
)
from .customer import Customer, CustomerState, RentalEligibilityResult

__all__ = [
    "Address",
    "BirthDate",
    "CompanyName",
    "CustomerName",
    "CustomerStatus",
    "CustomerType",
    "DriversLicense",
    "Email",
    "PaymentTerms",
    "PhoneNumber",
    "Salutation",
    "VatId",
    "Customer",
    "CustomerState",
    "RentalEligibilityResult",
]
