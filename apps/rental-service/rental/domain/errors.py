"""
Domain exception hierarchy.

Routers never catch these directly; the handlers in `rental.api.errors`
translate them into HTTP responses.
"""


class RentalError(Exception):
    """Base class for all domain-level failures."""


class DomainValidationError(RentalError, ValueError):
    """A value object or command argument failed validation (HTTP 400)."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class BusinessRuleViolation(RentalError):
    """An operation is not allowed in the aggregate's current state (HTTP 400)."""


class EntityNotFoundError(RentalError):
    """A referenced entity does not exist (HTTP 404)."""

    def __init__(self, entity: str, key=None, *, message: str | None = None):
        super().__init__(message or f"{entity} '{key}' not found")
        self.entity = entity
        self.key = key


class ConflictError(RentalError):
    """Duplicate data, overlapping bookings or stale stream versions (HTTP 409)."""
