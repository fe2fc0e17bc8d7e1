"""
Customer repository functions.

The write side loads and saves the event-sourced `Customer` aggregate and
projects its state into the `customers` read model inside the same
transaction. The read side queries that projection.
"""
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timedelta, UTC
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rental.db import event_store, models
from rental.domain.customers import Customer, CustomerState
from rental.domain.customers.search import CustomerSearchParameters
from rental.domain.customers.value_objects import add_years
from rental.domain.errors import ConflictError, EntityNotFoundError

logger = logging.getLogger(__name__)


# --- write side -----------------------------------------------------------

def load_customer(db: Session, customer_id: uuid.UUID) -> Customer:
    events = event_store.read_stream(db, Customer.stream_name(customer_id))
    if not events:
        raise EntityNotFoundError("Customer", customer_id)
    customer = Customer(customer_id)
    customer.load(events)
    return customer


def customer_exists(db: Session, customer_id: uuid.UUID) -> bool:
    return event_store.stream_version(db, Customer.stream_name(customer_id)) >= 0


def save_customer(db: Session, customer: Customer, *, commit: bool = True) -> Customer:
    """Append pending events, refresh the read model and (optionally) commit."""
    if not customer.changes:
        return customer
    try:
        event_store.append_to_stream(
            db,
            Customer.stream_name(customer.id),
            customer.original_version,
            customer.changes,
        )
        project_customer(db, customer.id, customer.state)
        db.flush()
        if commit:
            db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("A customer with this email address already exists") from exc
    except (ConflictError, SQLAlchemyError):
        db.rollback()
        raise
    customer.clear_changes()
    return customer


def project_customer(db: Session, customer_id: uuid.UUID, state: CustomerState) -> models.Customer:
    row = db.get(models.Customer, customer_id)
    if row is None:
        row = models.Customer(id=customer_id, registered_at=state.registered_at)
        db.add(row)
    row.salutation = state.name.salutation.value if state.name.salutation else None
    row.first_name = state.name.first_name
    row.last_name = state.name.last_name
    row.email = state.email.value
    row.phone_number = state.phone_number.value
    row.date_of_birth = state.date_of_birth.value
    row.street = state.address.street
    row.city = state.address.city
    row.postal_code = state.address.postal_code
    row.country = state.address.country
    row.license_number = state.drivers_license.license_number
    row.license_issue_country = state.drivers_license.issue_country
    row.license_issue_date = state.drivers_license.issue_date
    row.license_expiry_date = state.drivers_license.expiry_date
    row.status = state.status.value
    row.customer_type = state.customer_type.value
    row.company_name = state.company_name.value if state.company_name else None
    row.vat_id = state.vat_id.value if state.vat_id else None
    row.payment_terms_days = state.payment_terms.days_until_due if state.payment_terms else None
    row.is_anonymized = state.is_anonymized
    row.updated_at = state.updated_at
    return row


# --- read side ------------------------------------------------------------

def get_customer(db: Session, customer_id: uuid.UUID) -> Optional[models.Customer]:
    return db.get(models.Customer, customer_id)


def get_customer_by_email(db: Session, email: str) -> Optional[models.Customer]:
    return db.query(models.Customer).filter(models.Customer.email == email.strip().lower()).first()


def exists_with_email(db: Session, email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    q = db.query(models.Customer.id).filter(models.Customer.email == email.strip().lower())
    if exclude_id is not None:
        q = q.filter(models.Customer.id != exclude_id)
    return q.first() is not None


def get_customers(db: Session, skip: int = 0, limit: int = 100) -> List[models.Customer]:
    return (
        db.query(models.Customer)
        .order_by(models.Customer.registered_at.desc(), models.Customer.id)
        .offset(skip)
        .limit(limit)
        .all()
    )


_SORT_COLUMNS = {
    "last_name": models.Customer.last_name,
    "first_name": models.Customer.first_name,
    "email": models.Customer.email,
    "registered_at": models.Customer.registered_at,
    "status": models.Customer.status,
    "city": models.Customer.city,
    "date_of_birth": models.Customer.date_of_birth,
}


def search_customers(db: Session, params: CustomerSearchParameters) -> Tuple[List[models.Customer], int]:
    """Filter, sort and page the read model. Returns (items, total_count)."""
    C = models.Customer
    q = db.query(C)

    if params.search_term:
        term = params.search_term.lower()
        q = q.filter(or_(
            func.lower(C.first_name).contains(term, autoescape=True),
            func.lower(C.last_name).contains(term, autoescape=True),
            func.lower(C.email).contains(term, autoescape=True),
        ))
    if params.email:
        q = q.filter(C.email == params.email)
    if params.phone_number:
        q = q.filter(C.phone_number == params.phone_number)
    if params.status is not None:
        q = q.filter(C.status == params.status.value)
    if params.city:
        q = q.filter(func.lower(C.city) == params.city.lower())
    if params.postal_code:
        q = q.filter(C.postal_code == params.postal_code)

    today = date.today()
    if params.age_range.minimum is not None:
        q = q.filter(C.date_of_birth <= add_years(today, -params.age_range.minimum))
    if params.age_range.maximum is not None:
        q = q.filter(C.date_of_birth > add_years(today, -(params.age_range.maximum + 1)))
    if params.license_expiring_within_days is not None:
        q = q.filter(
            C.license_expiry_date >= today,
            C.license_expiry_date <= today + timedelta(days=params.license_expiring_within_days),
        )
    if params.registered.from_date is not None:
        q = q.filter(C.registered_at >= datetime.combine(params.registered.from_date, time.min, tzinfo=UTC))
    if params.registered.to_date is not None:
        upper = params.registered.to_date + timedelta(days=1)
        q = q.filter(C.registered_at < datetime.combine(upper, time.min, tzinfo=UTC))

    total = q.count()
    column = _SORT_COLUMNS[params.sorting.sort_by or "registered_at"]
    q = q.order_by(column.desc() if params.sorting.descending else column.asc(), C.id.asc())
    items = q.offset(params.paging.skip).limit(params.paging.take).all()
    return items, total
