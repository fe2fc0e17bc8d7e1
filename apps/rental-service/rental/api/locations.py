"""
Locations API endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rental.api.auth import Principal
from rental.api.deps import require_fleet_manager
from rental.db import schemas
from rental.db.database import get_db
from rental.services.fleet_service import FleetService

router = APIRouter(prefix="/api/locations", tags=["locations"])


@router.get("", response_model=List[schemas.Location])
def list_locations(active_only: bool = False, db: Session = Depends(get_db)):
    return FleetService(db).list_locations(active_only=active_only)


@router.get("/{code}", response_model=schemas.Location)
def get_location(code: str, db: Session = Depends(get_db)):
    return FleetService(db).get_location(code)


@router.post("", response_model=schemas.Location, status_code=status.HTTP_201_CREATED)
def add_location(
    payload: schemas.LocationCreate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return FleetService(db).add_location(payload)


@router.put("/{code}", response_model=schemas.Location)
def update_location(
    code: str,
    payload: schemas.LocationUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return FleetService(db).update_location(code, payload)


@router.put("/{code}/status", response_model=schemas.Location)
def change_location_status(
    code: str,
    payload: schemas.LocationStatusUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_fleet_manager),
):
    return FleetService(db).change_location_status(code, payload.status)
