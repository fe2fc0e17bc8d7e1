"""Environment-driven switches for guest booking, email delivery and demo data."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"", "0", "false", "no", "off"}


def _flag(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return default


@dataclass(frozen=True)
class FeatureFlags:
    guest_booking_enabled: bool
    email_notifications_enabled: bool
    demo_data_enabled: bool


@lru_cache(maxsize=1)
def get_feature_flags() -> FeatureFlags:
    """Flag values as read from the environment on first use."""
    return FeatureFlags(
        guest_booking_enabled=_flag("FEATURE_GUEST_BOOKING_ENABLED", True),
        email_notifications_enabled=_flag("FEATURE_EMAIL_NOTIFICATIONS_ENABLED", False),
        demo_data_enabled=_flag("FEATURE_DEMO_DATA_ENABLED", False),
    )


def guest_booking_enabled() -> bool:
    """Allow anonymous visitors to register and book in one request."""
    return get_feature_flags().guest_booking_enabled


def email_notifications_enabled() -> bool:
    """Send reservation emails over SMTP instead of only recording them."""
    return get_feature_flags().email_notifications_enabled


def demo_data_enabled() -> bool:
    return get_feature_flags().demo_data_enabled


def refresh_feature_flag_cache() -> None:
    get_feature_flags.cache_clear()
