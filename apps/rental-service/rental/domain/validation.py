"""Small guard helpers shared by value objects and aggregates."""
from __future__ import annotations

from typing import Any, Optional

from rental.domain.errors import DomainValidationError


def ensure(condition: bool, message: str, field: Optional[str] = None) -> None:
    if not condition:
        raise DomainValidationError(message, field)


def ensure_not_blank(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise DomainValidationError(f"{field} cannot be empty", field)
    return str(value).strip()


def ensure_max_length(value: str, max_length: int, field: str) -> str:
    if len(value) > max_length:
        raise DomainValidationError(
            f"{field} is too long (max {max_length} characters)", field
        )
    return value


def ensure_length_between(value: str, min_length: int, max_length: int, field: str) -> str:
    if len(value) < min_length or len(value) > max_length:
        raise DomainValidationError(
            f"{field} must be between {min_length} and {max_length} characters", field
        )
    return value


def ensure_range(value: Any, minimum: Any, maximum: Any, field: str) -> Any:
    if value < minimum or value > maximum:
        raise DomainValidationError(
            f"{field} must be between {minimum} and {maximum}", field
        )
    return value
