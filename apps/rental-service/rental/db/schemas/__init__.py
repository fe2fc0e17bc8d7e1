"""
Domain-split Pydantic schemas with an aggregator.

Routers write `schemas.Customer`, `schemas.Vehicle`, ... regardless of the
module a schema lives in.
"""

from .common import Page
from .customers import (
    CustomerBase,
    CustomerCreate,
    CustomerRegistered,
    CustomerProfileUpdate,
    DriversLicenseUpdate,
    CustomerStatusUpdate,
    CustomerEmailUpdate,
    BusinessDetails,
    Customer,
    RentalEligibility,
)
from .fleet import (
    LocationBase,
    LocationCreate,
    LocationUpdate,
    LocationStatusUpdate,
    Location,
    VehicleBase,
    VehicleCreate,
    VehicleStatusUpdate,
    VehicleLocationUpdate,
    VehicleDailyRateUpdate,
    Vehicle,
    VehicleCategoryInfo,
)
from .pricing import (
    PriceCalculationRequest,
    PriceCalculation,
    PricingPolicyCreate,
    PricingPolicyRateUpdate,
    PricingPolicy,
)
from .reservations import (
    ReservationBase,
    ReservationCreate,
    GuestReservationCreate,
    ReservationCreated,
    ReservationCancel,
    ReservationStatusChanged,
    Reservation,
    VehicleAvailability,
)

__all__ = [
    "Page",
    "CustomerBase",
    "CustomerCreate",
    "CustomerRegistered",
    "CustomerProfileUpdate",
    "DriversLicenseUpdate",
    "CustomerStatusUpdate",
    "CustomerEmailUpdate",
    "BusinessDetails",
    "Customer",
    "RentalEligibility",
    "LocationBase",
    "LocationCreate",
    "LocationUpdate",
    "LocationStatusUpdate",
    "Location",
    "VehicleBase",
    "VehicleCreate",
    "VehicleStatusUpdate",
    "VehicleLocationUpdate",
    "VehicleDailyRateUpdate",
    "Vehicle",
    "VehicleCategoryInfo",
    "PriceCalculationRequest",
    "PriceCalculation",
    "PricingPolicyCreate",
    "PricingPolicyRateUpdate",
    "PricingPolicy",
    "ReservationBase",
    "ReservationCreate",
    "GuestReservationCreate",
    "ReservationCreated",
    "ReservationCancel",
    "ReservationStatusChanged",
    "Reservation",
    "VehicleAvailability",
]
