import uuid
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict


class LocationBase(BaseModel):
    code: str
    name: str
    street: str
    city: str
    postal_code: str


class LocationCreate(LocationBase):
    pass


class LocationUpdate(BaseModel):
    name: str
    street: str
    city: str
    postal_code: str


class LocationStatusUpdate(BaseModel):
    status: str


class Location(LocationBase):
    status: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class VehicleBase(BaseModel):
    name: str
    category_code: str
    location_code: str
    seats: int
    fuel_type: str
    transmission_type: str
    license_plate: str | None = None
    manufacturer: str | None = None
    model: str | None = None
    year: int | None = None
    image_url: str | None = None


class VehicleCreate(VehicleBase):
    daily_rate_net: Decimal


class VehicleStatusUpdate(BaseModel):
    status: str


class VehicleLocationUpdate(BaseModel):
    location_code: str


class VehicleDailyRateUpdate(BaseModel):
    daily_rate_net: Decimal


class Vehicle(VehicleBase):
    id: uuid.UUID
    category_name: str
    status: str
    daily_rate_net: Decimal
    daily_rate_vat: Decimal
    daily_rate_gross: Decimal
    currency: str
    city: str | None = None


class VehicleCategoryInfo(BaseModel):
    code: str
    name: str
