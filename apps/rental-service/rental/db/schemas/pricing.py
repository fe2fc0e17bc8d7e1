import uuid
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel


class PriceCalculationRequest(BaseModel):
    category_code: str
    pickup_date: date
    return_date: date
    location_code: str | None = None


class PriceCalculation(BaseModel):
    category_code: str
    total_days: int
    daily_rate_net: Decimal
    daily_rate_gross: Decimal
    total_price_net: Decimal
    total_price_vat: Decimal
    total_price_gross: Decimal
    vat_rate: Decimal
    currency: str
    pickup_date: date
    return_date: date


class PricingPolicyCreate(BaseModel):
    category_code: str
    daily_rate_net: Decimal
    location_code: str | None = None
    effective_from: datetime | None = None
    effective_until: datetime | None = None


class PricingPolicyRateUpdate(BaseModel):
    daily_rate_net: Decimal


class PricingPolicy(BaseModel):
    id: uuid.UUID
    category_code: str
    location_code: str | None = None
    daily_rate_net: Decimal
    daily_rate_vat: Decimal
    daily_rate_gross: Decimal
    currency: str
    effective_from: datetime
    effective_until: datetime | None = None
    is_active: bool
