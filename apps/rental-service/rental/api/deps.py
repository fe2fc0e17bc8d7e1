"""
API dependency helpers.

Resolves the calling principal from proxy headers and guards routes by role.
"""
import logging
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from rental.api.auth import (
    ROLE_ADMIN,
    ROLE_CALL_CENTER,
    ROLE_CUSTOMER,
    ROLE_FLEET_MANAGER,
    Principal,
    parse_roles,
    resolve_identity_from_headers,
)
from rental.utils.runtime import dev_mode_active

logger = logging.getLogger(__name__)

DEV_PRINCIPAL = Principal(email="dev@localhost", name="Development User", roles=frozenset({ROLE_ADMIN}))


def get_optional_principal(
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
    x_auth_request_groups: Optional[str] = Header(default=None),
) -> Optional[Principal]:
    if dev_mode_active():
        return DEV_PRINCIPAL
    name, email = resolve_identity_from_headers(
        x_auth_request_user=x_auth_request_user,
        x_auth_request_email=x_auth_request_email,
        x_forwarded_user=x_forwarded_user,
        x_forwarded_email=x_forwarded_email,
    )
    if not email:
        return None
    return Principal(email=email, name=name, roles=parse_roles(x_auth_request_groups))


def get_current_principal(principal: Optional[Principal] = Depends(get_optional_principal)) -> Principal:
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return principal


def require_roles(*roles: str) -> Callable[..., Principal]:
    """Dependency factory: 401 without identity, 403 without one of `roles` (admin always passes)."""

    def _dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.has_any_role(*roles):
            logger.warning("forbidden: email=%s roles=%s required=%s", principal.email, sorted(principal.roles), roles)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return principal

    return _dependency


require_call_center = require_roles(ROLE_CALL_CENTER)
require_fleet_manager = require_roles(ROLE_FLEET_MANAGER)
require_customer_or_staff = require_roles(ROLE_CUSTOMER, ROLE_CALL_CENTER)
