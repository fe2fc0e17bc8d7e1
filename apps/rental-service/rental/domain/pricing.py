"""Pricing domain: rental periods and per-category pricing policies."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Optional

from rental.domain.errors import BusinessRuleViolation, DomainValidationError
from rental.domain.fleet import VehicleCategory
from rental.domain.shared import Money


@dataclass(frozen=True)
class RentalPeriod:
    pickup_date: date
    return_date: date

    @classmethod
    def create(cls, pickup_date: date, return_date: date) -> "RentalPeriod":
        if pickup_date < date.today():
            raise DomainValidationError("Pickup date cannot be in the past", "pickup_date")
        if return_date <= pickup_date:
            raise DomainValidationError("Return date must be after pickup date", "return_date")
        return cls(pickup_date, return_date)

    @property
    def total_days(self) -> int:
        return (self.return_date - self.pickup_date).days + 1

    def __str__(self) -> str:
        return f"{self.total_days} day(s) from {self.pickup_date.isoformat()} to {self.return_date.isoformat()}"


@dataclass(frozen=True)
class PriceCalculation:
    category: VehicleCategory
    period: RentalPeriod
    daily_rate: Money
    total_price: Money


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class PricingPolicy:
    category: VehicleCategory
    daily_rate: Money
    effective_from: datetime = field(default_factory=_utcnow)
    effective_until: Optional[datetime] = None
    location_code: Optional[str] = None
    is_active: bool = True
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def is_valid_for(self, moment: datetime) -> bool:
        if not self.is_active:
            return False
        if moment < self.effective_from:
            return False
        if self.effective_until is not None and moment >= self.effective_until:
            return False
        return True

    def is_valid_on(self, day: date) -> bool:
        """Day-granular validity; a policy created today prices today's pickups."""
        if not self.is_active:
            return False
        if day < self.effective_from.date():
            return False
        if self.effective_until is not None and day >= self.effective_until.date():
            return False
        return True

    def calculate_price(self, period: RentalPeriod) -> PriceCalculation:
        if not self.is_valid_on(period.pickup_date):
            raise BusinessRuleViolation(
                f"Pricing policy for category '{self.category.value}' is not valid for {period.pickup_date.isoformat()}"
            )
        return PriceCalculation(self.category, period, self.daily_rate, self.daily_rate * period.total_days)

    def update_daily_rate(self, new_rate: Money) -> None:
        if not self.is_active:
            raise BusinessRuleViolation("Cannot update the rate of an inactive pricing policy")
        self.daily_rate = new_rate

    def deactivate(self) -> None:
        self.is_active = False
        self.effective_until = _utcnow()
