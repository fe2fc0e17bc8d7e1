"""
Vehicles API endpoints: public search and fleet administration.
"""
import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rental.api.auth import Principal
from rental.api.deps import require_fleet_manager
from rental.db import schemas
from rental.db.database import get_db
from rental.domain.fleet import VehicleCategory, VehicleSearchParameters
from rental.services.fleet_service import FleetService, vehicle_to_schema

router = APIRouter(prefix="/api/vehicles", tags=["vehicles"])


@router.get("", response_model=schemas.Page[schemas.Vehicle])
def search_vehicles(
    pickup_date: Optional[date] = None,
    return_date: Optional[date] = None,
    location_code: Optional[str] = None,
    category_code: Optional[str] = None,
    min_seats: Optional[int] = None,
    fuel_type: Optional[str] = None,
    transmission_type: Optional[str] = None,
    max_daily_rate_gross: Optional[Decimal] = None,
    status: Optional[str] = None,
    page_number: int = 1,
    page_size: Optional[int] = None,
    db: Session = Depends(get_db),
):
    params = VehicleSearchParameters.create(
        pickup_date=pickup_date,
        return_date=return_date,
        location_code=location_code,
        category_code=category_code,
        min_seats=min_seats,
        fuel_type=fuel_type,
        transmission_type=transmission_type,
        max_daily_rate_gross=max_daily_rate_gross,
        status=status,
        page_number=page_number,
        page_size=page_size,
    )
    items, total = FleetService(db).search_vehicles(params)
    return schemas.Page[schemas.Vehicle].build(
        [vehicle_to_schema(row) for row in items],
        total,
        params.paging.page_number,
        params.paging.page_size,
    )


@router.get("/categories", response_model=List[schemas.VehicleCategoryInfo])
def list_categories():
    return [schemas.VehicleCategoryInfo(code=c.value, name=c.display_name) for c in VehicleCategory]


@router.get("/{vehicle_id}", response_model=schemas.Vehicle)
def get_vehicle(vehicle_id: uuid.UUID, db: Session = Depends(get_db)):
    return vehicle_to_schema(FleetService(db).get_vehicle(vehicle_id))


@router.post("", response_model=schemas.Vehicle, status_code=status.HTTP_201_CREATED)
def add_vehicle(
    payload: schemas.VehicleCreate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return vehicle_to_schema(FleetService(db).add_vehicle(payload))


@router.put("/{vehicle_id}/status", response_model=schemas.Vehicle)
def change_vehicle_status(
    vehicle_id: uuid.UUID,
    payload: schemas.VehicleStatusUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return vehicle_to_schema(FleetService(db).change_vehicle_status(vehicle_id, payload.status))


@router.put("/{vehicle_id}/location", response_model=schemas.Vehicle)
def move_vehicle(
    vehicle_id: uuid.UUID,
    payload: schemas.VehicleLocationUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return vehicle_to_schema(FleetService(db).move_vehicle(vehicle_id, payload.location_code))


@router.put("/{vehicle_id}/daily-rate", response_model=schemas.Vehicle)
def update_daily_rate(
    vehicle_id: uuid.UUID,
    payload: schemas.VehicleDailyRateUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return vehicle_to_schema(FleetService(db).update_vehicle_rate(vehicle_id, payload.daily_rate_net))
