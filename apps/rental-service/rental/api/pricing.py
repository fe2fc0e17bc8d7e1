"""
Pricing API endpoints: public price quotes and policy administration.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rental.api.auth import Principal
from rental.api.deps import require_fleet_manager
from rental.db import schemas
from rental.db.database import get_db
from rental.services.pricing_service import PricingService, calculation_to_schema, policy_to_schema

router = APIRouter(prefix="/api/pricing", tags=["pricing"])


@router.post("/calculate", response_model=schemas.PriceCalculation)
def calculate_price(payload: schemas.PriceCalculationRequest, db: Session = Depends(get_db)):
    calculation = PricingService(db).calculate_price(
        payload.category_code,
        payload.pickup_date,
        payload.return_date,
        payload.location_code,
    )
    return calculation_to_schema(calculation)


@router.get("/policies", response_model=List[schemas.PricingPolicy])
def list_policies(
    category_code: Optional[str] = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    policies = PricingService(db).list_policies(category_code=category_code, active_only=active_only)
    return [policy_to_schema(p) for p in policies]


@router.post("/policies", response_model=schemas.PricingPolicy, status_code=status.HTTP_201_CREATED)
def create_policy(
    payload: schemas.PricingPolicyCreate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return policy_to_schema(PricingService(db).create_policy(payload))


@router.put("/policies/{policy_id}/daily-rate", response_model=schemas.PricingPolicy)
def update_policy_rate(
    policy_id: uuid.UUID,
    payload: schemas.PricingPolicyRateUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return policy_to_schema(PricingService(db).update_daily_rate(policy_id, payload.daily_rate_net))


@router.post("/policies/{policy_id}/deactivate", response_model=schemas.PricingPolicy)
def deactivate_policy(
    policy_id: uuid.UUID,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return policy_to_schema(PricingService(db).deactivate(policy_id))
