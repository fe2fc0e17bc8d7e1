"""
Customers API endpoints.

Registration is public; everything else is call-center work, except that
customers may read their own record and rental eligibility.
"""
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from rental.api.auth import ROLE_CALL_CENTER, Principal
from rental.api.deps import require_call_center, require_customer_or_staff
from rental.db import models, schemas
from rental.db.database import get_db
from rental.db.repositories import customers as customer_repo
from rental.domain.customers.search import CustomerSearchParameters
from rental.services.customer_service import CustomerCommandService

router = APIRouter(prefix="/api/customers", tags=["customers"])


def _get_row_or_404(db: Session, customer_id: uuid.UUID) -> models.Customer:
    row = customer_repo.get_customer(db, customer_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return row


def _ensure_may_read(principal: Principal, row: models.Customer) -> None:
    if principal.has_any_role(ROLE_CALL_CENTER):
        return
    if row.email != principal.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post("", response_model=schemas.CustomerRegistered, status_code=status.HTTP_201_CREATED)
def register_customer(payload: schemas.CustomerCreate, db: Session = Depends(get_db)):
    customer = CustomerCommandService(db).register(payload)
    return schemas.CustomerRegistered(
        customer_id=customer.id,
        email=customer.state.email.value,
        status=customer.state.status.value,
        registered_at=customer.state.registered_at,
    )


@router.get("/search", response_model=schemas.Page[schemas.Customer])
def search_customers(
    search_term: Optional[str] = None,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
    status: Optional[str] = None,
    city: Optional[str] = None,
    postal_code: Optional[str] = None,
    min_age: Optional[int] = None,
    max_age: Optional[int] = None,
    license_expiring_within_days: Optional[int] = None,
    registered_from: Optional[date] = None,
    registered_to: Optional[date] = None,
    sort_by: Optional[str] = None,
    sort_descending: bool = False,
    page_number: int = 1,
    page_size: Optional[int] = None,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    params = CustomerSearchParameters.create(
        search_term=search_term,
        email=email,
        phone_number=phone_number,
        status=status,
        city=city,
        postal_code=postal_code,
        min_age=min_age,
        max_age=max_age,
        license_expiring_within_days=license_expiring_within_days,
        registered_from=registered_from,
        registered_to=registered_to,
        sort_by=sort_by,
        sort_descending=sort_descending,
        page_number=page_number,
        page_size=page_size,
    )
    items, total = customer_repo.search_customers(db, params)
    return schemas.Page[schemas.Customer].build(
        [schemas.Customer.model_validate(row) for row in items],
        total,
        params.paging.page_number,
        params.paging.page_size,
    )


@router.get("/by-email/{email}", response_model=schemas.Customer)
def get_customer_by_email(
    email: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_customer_or_staff),
):
    row = customer_repo.get_customer_by_email(db, email)
    if row is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    _ensure_may_read(principal, row)
    return row


@router.get("/{customer_id}", response_model=schemas.Customer)
def get_customer(
    customer_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_customer_or_staff),
):
    row = _get_row_or_404(db, customer_id)
    _ensure_may_read(principal, row)
    return row


@router.get("/{customer_id}/eligibility", response_model=schemas.RentalEligibility)
def check_eligibility(
    customer_id: uuid.UUID,
    start_date: date,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_customer_or_staff),
):
    _ensure_may_read(principal, _get_row_or_404(db, customer_id))
    result = CustomerCommandService(db).check_eligibility(customer_id, start_date)
    return schemas.RentalEligibility(
        customer_id=customer_id,
        start_date=start_date,
        is_eligible=result.is_eligible,
        issues=list(result.issues),
    )


@router.put("/{customer_id}/profile", response_model=schemas.Customer)
def update_profile(
    customer_id: uuid.UUID,
    payload: schemas.CustomerProfileUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    CustomerCommandService(db).update_profile(customer_id, payload)
    return _get_row_or_404(db, customer_id)


@router.put("/{customer_id}/license", response_model=schemas.Customer)
def update_drivers_license(
    customer_id: uuid.UUID,
    payload: schemas.DriversLicenseUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    CustomerCommandService(db).update_drivers_license(customer_id, payload)
    return _get_row_or_404(db, customer_id)


@router.put("/{customer_id}/status", response_model=schemas.Customer)
def change_status(
    customer_id: uuid.UUID,
    payload: schemas.CustomerStatusUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    CustomerCommandService(db).change_status(customer_id, payload.status, payload.reason)
    return _get_row_or_404(db, customer_id)


@router.put("/{customer_id}/email", response_model=schemas.Customer)
def update_email(
    customer_id: uuid.UUID,
    payload: schemas.CustomerEmailUpdate,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    CustomerCommandService(db).update_email(customer_id, payload.email)
    return _get_row_or_404(db, customer_id)


@router.post("/{customer_id}/business", response_model=schemas.Customer)
def upgrade_to_business(
    customer_id: uuid.UUID,
    payload: schemas.BusinessDetails,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    CustomerCommandService(db).upgrade_to_business(customer_id, payload)
    return _get_row_or_404(db, customer_id)


@router.put("/{customer_id}/business", response_model=schemas.Customer)
def update_business_details(
    customer_id: uuid.UUID,
    payload: schemas.BusinessDetails,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    CustomerCommandService(db).update_business_details(customer_id, payload)
    return _get_row_or_404(db, customer_id)


@router.post("/{customer_id}/anonymize", response_model=schemas.Customer)
def anonymize_customer(
    customer_id: uuid.UUID,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_call_center),
):
    CustomerCommandService(db).anonymize(customer_id)
    return _get_row_or_404(db, customer_id)
