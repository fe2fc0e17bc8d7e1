import uuid
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict


class CustomerBase(BaseModel):
    salutation: str | None = None
    first_name: str
    last_name: str
    email: str
    phone_number: str
    date_of_birth: date
    street: str
    city: str
    postal_code: str
    country: str = 'Germany'
    license_number: str
    license_issue_country: str
    license_issue_date: date
    license_expiry_date: date


class CustomerCreate(CustomerBase):
    pass


class CustomerRegistered(BaseModel):
    customer_id: uuid.UUID
    email: str
    status: str
    registered_at: datetime


class CustomerProfileUpdate(BaseModel):
    salutation: str | None = None
    first_name: str
    last_name: str
    phone_number: str
    street: str
    city: str
    postal_code: str
    country: str = 'Germany'


class DriversLicenseUpdate(BaseModel):
    license_number: str
    issue_country: str
    issue_date: date
    expiry_date: date


class CustomerStatusUpdate(BaseModel):
    status: str
    reason: str | None = None


class CustomerEmailUpdate(BaseModel):
    email: str


class BusinessDetails(BaseModel):
    company_name: str
    vat_id: str | None = None
    payment_terms_days: int = 30


class Customer(CustomerBase):
    id: uuid.UUID
    status: str
    customer_type: str
    company_name: str | None = None
    vat_id: str | None = None
    payment_terms_days: int | None = None
    is_anonymized: bool = False
    registered_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class RentalEligibility(BaseModel):
    customer_id: uuid.UUID
    start_date: date
    is_eligible: bool
    issues: list[str] = []
