"""Pricing policy repository functions."""
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rental.db import models
from rental.domain.fleet import VehicleCategory
from rental.domain.pricing import PricingPolicy
from rental.domain.shared import Currency, Money


def policy_from_row(row: models.PricingPolicy) -> PricingPolicy:
    return PricingPolicy(
        id=row.id,
        category=VehicleCategory(row.category_code),
        daily_rate=Money(Decimal(row.daily_rate_net), Decimal(row.daily_rate_vat), Currency(row.currency)),
        effective_from=row.effective_from,
        effective_until=row.effective_until,
        location_code=row.location_code,
        is_active=row.is_active,
    )


def _copy_policy(row: models.PricingPolicy, policy: PricingPolicy) -> None:
    row.category_code = policy.category.value
    row.location_code = policy.location_code
    row.daily_rate_net = policy.daily_rate.net_amount
    row.daily_rate_vat = policy.daily_rate.vat_amount
    row.currency = policy.daily_rate.currency.code
    row.effective_from = policy.effective_from
    row.effective_until = policy.effective_until
    row.is_active = policy.is_active


def create_policy(db: Session, policy: PricingPolicy) -> models.PricingPolicy:
    row = models.PricingPolicy(id=policy.id)
    _copy_policy(row, policy)
    db.add(row)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(row)
    return row


def save_policy(db: Session, row: models.PricingPolicy, policy: PricingPolicy) -> models.PricingPolicy:
    _copy_policy(row, policy)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(row)
    return row


def get_policy(db: Session, policy_id: uuid.UUID) -> Optional[models.PricingPolicy]:
    return db.get(models.PricingPolicy, policy_id)


def get_policies(db: Session, *, category: Optional[VehicleCategory] = None, active_only: bool = False) -> List[models.PricingPolicy]:
    q = db.query(models.PricingPolicy)
    if category is not None:
        q = q.filter(models.PricingPolicy.category_code == category.value)
    if active_only:
        q = q.filter(models.PricingPolicy.is_active.is_(True))
    return q.order_by(models.PricingPolicy.category_code.asc(), models.PricingPolicy.effective_from.desc()).all()


def find_active_policy(
    db: Session,
    category: VehicleCategory,
    on: date,
    location_code: Optional[str] = None,
) -> Optional[PricingPolicy]:
    """Most recent policy valid on `on`; location-specific first, then the general one."""
    candidates = [
        policy_from_row(row)
        for row in get_policies(db, category=category, active_only=True)
    ]
    valid = [p for p in candidates if p.is_valid_on(on)]
    if location_code:
        for policy in valid:
            if policy.location_code == location_code:
                return policy
    for policy in valid:
        if policy.location_code is None:
            return policy
    return None
