"""
SQLAlchemy models split per bounded context, re-exported from one place
so callers can write `models.Customer`, `models.Vehicle`, ...
"""

from .base import Base, now_utc  # re-export

from .events import StoredEvent
from .customers import Customer
from .fleet import Location, Vehicle
from .pricing import PricingPolicy
from .reservations import Reservation
from .notifications import EmailNotificationLog

__all__ = [
    # base
    "Base",
    "now_utc",
    # event store
    "StoredEvent",
    # read models
    "Customer",
    "Reservation",
    # fleet / pricing
    "Location",
    "Vehicle",
    "PricingPolicy",
    # notifications
    "EmailNotificationLog",
]
