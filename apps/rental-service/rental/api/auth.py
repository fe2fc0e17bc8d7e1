"""
Authentication helpers and identity resolution.

The service sits behind an authenticating reverse proxy. Identity arrives
in X-Auth-Request-* / X-Forwarded-* headers and roles in
X-Auth-Request-Groups (comma separated).
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

ROLE_ADMIN = "admin"
ROLE_CALL_CENTER = "call-center"
ROLE_FLEET_MANAGER = "fleet-manager"
ROLE_CUSTOMER = "customer"

ALL_ROLES = frozenset({ROLE_ADMIN, ROLE_CALL_CENTER, ROLE_FLEET_MANAGER, ROLE_CUSTOMER})


@dataclass(frozen=True)
class Principal:
    email: str
    name: Optional[str] = None
    roles: FrozenSet[str] = field(default_factory=frozenset)

    def has_any_role(self, *roles: str) -> bool:
        return ROLE_ADMIN in self.roles or any(role in self.roles for role in roles)


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.strip().lower()


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    user = x_auth_request_user or x_forwarded_user
    email = _normalize_email(x_auth_request_email or x_forwarded_email)
    return user, email


def parse_roles(raw: Optional[str]) -> FrozenSet[str]:
    """Known roles from a comma separated group header; unknown groups are ignored."""
    roles = set()
    for entry in (raw or "").split(","):
        cleaned = entry.strip().strip('"').strip("'").lower()
        if cleaned.startswith("role:"):
            cleaned = cleaned[len("role:"):]
        if cleaned in ALL_ROLES:
            roles.add(cleaned)
    return frozenset(roles)
