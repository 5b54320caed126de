"""
Security guards for session and role-based access control.

Every protected endpoint goes through ``evaluate_access`` via one of the
``require_*`` dependencies, so the "is this caller an admin" rule lives in a
single place.
"""

import enum
from typing import Optional
from fastapi import Depends
from shippro.app.models.enums import UserRole
from shippro.app.core.dependencies import Principal, get_optional_principal
from shippro.app.core.exceptions import AuthenticationError, InsufficientPermissionsError


class AccessDecision(str, enum.Enum):
    """Outcome of the access policy."""
    ALLOW = "ALLOW"
    DENY = "DENY"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"


def evaluate_access(principal: Optional[Principal], required_role: Optional[UserRole] = None) -> AccessDecision:
    """
    Decide whether a caller may use a resource.

    Args:
        principal: Authenticated caller, or None when there is no valid session
        required_role: Role the resource demands; None means any session will do

    Returns:
        ALLOW, DENY (session present, role missing) or NOT_AUTHENTICATED
    """
    if principal is None:
        return AccessDecision.NOT_AUTHENTICATED

    if required_role is None:
        return AccessDecision.ALLOW

    if principal.role == required_role.value:
        return AccessDecision.ALLOW

    return AccessDecision.DENY


def enforce(decision: AccessDecision) -> None:
    """Translate a policy decision into the matching API error."""
    if decision == AccessDecision.NOT_AUTHENTICATED:
        raise AuthenticationError()
    if decision == AccessDecision.DENY:
        raise InsufficientPermissionsError()


def require_role(required_role: Optional[UserRole] = None):
    """
    Dependency factory for policy-checked endpoints.

    Usage:
        @router.get("/admin/stats")
        async def stats(admin: Principal = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    async def role_checker(principal: Optional[Principal] = Depends(get_optional_principal)) -> Principal:
        enforce(evaluate_access(principal, required_role))
        return principal

    return role_checker


# Any signed-in user
require_session = require_role()

# Admin-only endpoints
require_admin = require_role(UserRole.ADMIN)
