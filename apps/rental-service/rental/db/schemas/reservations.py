import uuid
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict

from .customers import CustomerCreate


class ReservationBase(BaseModel):
    vehicle_id: uuid.UUID
    category_code: str
    pickup_date: date
    return_date: date
    pickup_location_code: str
    dropoff_location_code: str


class ReservationCreate(ReservationBase):
    customer_id: uuid.UUID
    total_price_net: Decimal | None = None


class GuestReservationCreate(ReservationBase):
    customer: CustomerCreate


class ReservationCreated(BaseModel):
    reservation_id: uuid.UUID
    customer_id: uuid.UUID
    status: str
    total_price_net: Decimal
    total_price_vat: Decimal
    total_price_gross: Decimal
    currency: str


class ReservationCancel(BaseModel):
    reason: str | None = None


class ReservationStatusChanged(BaseModel):
    reservation_id: uuid.UUID
    status: str


class Reservation(ReservationBase):
    id: uuid.UUID
    customer_id: uuid.UUID
    customer_name: str | None = None
    customer_email: str | None = None
    rental_days: int
    total_price_net: Decimal
    total_price_vat: Decimal
    total_price_gross: Decimal
    currency: str
    status: str
    cancellation_reason: str | None = None
    created_at: datetime
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    completed_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class VehicleAvailability(BaseModel):
    pickup_date: date
    return_date: date
    booked_vehicle_ids: list[uuid.UUID]
