"""
Pricing service: price quotes and pricing policy administration.
"""

import logging
import uuid
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from rental.db import models, schemas
from rental.db.repositories import pricing as pricing_repo
from rental.domain.errors import DomainValidationError, EntityNotFoundError
from rental.domain.fleet import VehicleCategory, normalize_location_code
from rental.domain.pricing import PriceCalculation, PricingPolicy, RentalPeriod
from rental.domain.shared import Money

logger = logging.getLogger(__name__)


def policy_to_schema(policy: PricingPolicy) -> schemas.PricingPolicy:
    return schemas.PricingPolicy(
        id=policy.id,
        category_code=policy.category.value,
        location_code=policy.location_code,
        daily_rate_net=policy.daily_rate.net_amount,
        daily_rate_vat=policy.daily_rate.vat_amount,
        daily_rate_gross=policy.daily_rate.gross_amount,
        currency=policy.daily_rate.currency.code,
        effective_from=policy.effective_from,
        effective_until=policy.effective_until,
        is_active=policy.is_active,
    )


def calculation_to_schema(calculation: PriceCalculation) -> schemas.PriceCalculation:
    total = calculation.total_price
    return schemas.PriceCalculation(
        category_code=calculation.category.value,
        total_days=calculation.period.total_days,
        daily_rate_net=calculation.daily_rate.net_amount,
        daily_rate_gross=calculation.daily_rate.gross_amount,
        total_price_net=total.net_amount,
        total_price_vat=total.vat_amount,
        total_price_gross=total.gross_amount,
        vat_rate=calculation.daily_rate.vat_rate,
        currency=total.currency.code,
        pickup_date=calculation.period.pickup_date,
        return_date=calculation.period.return_date,
    )


class PricingService:

    def __init__(self, db: Session):
        self.db = db

    def calculate_price(
        self,
        category_code: str,
        pickup_date: date,
        return_date: date,
        location_code: Optional[str] = None,
    ) -> PriceCalculation:
        category = VehicleCategory.from_code(category_code)
        period = RentalPeriod.create(pickup_date, return_date)
        location = normalize_location_code(location_code) if location_code else None
        policy = pricing_repo.find_active_policy(self.db, category, period.pickup_date, location)
        if policy is None:
            raise EntityNotFoundError(
                "Pricing policy",
                category.value,
                message=f"No active pricing policy found for category '{category.value}'",
            )
        return policy.calculate_price(period)

    def list_policies(self, category_code: Optional[str] = None, active_only: bool = False) -> List[PricingPolicy]:
        category = VehicleCategory.from_code(category_code) if category_code else None
        rows = pricing_repo.get_policies(self.db, category=category, active_only=active_only)
        return [pricing_repo.policy_from_row(row) for row in rows]

    def create_policy(self, payload: schemas.PricingPolicyCreate) -> PricingPolicy:
        effective_from = _aware(payload.effective_from) or datetime.now(UTC)
        effective_until = _aware(payload.effective_until)
        if effective_until is not None and effective_until <= effective_from:
            raise DomainValidationError("effective_until must be after effective_from", "effective_until")
        policy = PricingPolicy(
            category=VehicleCategory.from_code(payload.category_code),
            daily_rate=_daily_rate(payload.daily_rate_net),
            effective_from=effective_from,
            effective_until=effective_until,
            location_code=normalize_location_code(payload.location_code) if payload.location_code else None,
        )
        pricing_repo.create_policy(self.db, policy)
        logger.info("pricing_policy_created: id=%s category=%s rate=%s", policy.id, policy.category.value, policy.daily_rate)
        return policy

    def update_daily_rate(self, policy_id: uuid.UUID, daily_rate_net: Decimal) -> PricingPolicy:
        row, policy = self._load(policy_id)
        policy.update_daily_rate(_daily_rate(daily_rate_net))
        pricing_repo.save_policy(self.db, row, policy)
        return policy

    def deactivate(self, policy_id: uuid.UUID) -> PricingPolicy:
        row, policy = self._load(policy_id)
        policy.deactivate()
        pricing_repo.save_policy(self.db, row, policy)
        logger.info("pricing_policy_deactivated: id=%s", policy_id)
        return policy

    def _load(self, policy_id: uuid.UUID) -> tuple[models.PricingPolicy, PricingPolicy]:
        row = pricing_repo.get_policy(self.db, policy_id)
        if row is None:
            raise EntityNotFoundError("Pricing policy", policy_id)
        return row, pricing_repo.policy_from_row(row)


def _daily_rate(net: Decimal) -> Money:
    if net is None or net <= 0:
        raise DomainValidationError("Daily rate must be greater than zero", "daily_rate_net")
    return Money.euro(net)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
