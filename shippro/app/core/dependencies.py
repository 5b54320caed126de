"""
Authentication dependencies for FastAPI.

Resolves the bearer token on a request into a ``Principal``. The token is
optional at this layer; whether a route needs one is decided by the access
policy in ``guards``.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from shippro.app.core.jwt import decode_access_token

# HTTP Bearer security scheme (missing header is not an error here)
security = HTTPBearer(auto_error=False)


@dataclass
class Principal:
    """Authenticated caller as described by the identity provider."""
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict)


def principal_from_claims(payload: Dict[str, Any]) -> Optional[Principal]:
    """Build a Principal from decoded token claims, None if the subject is missing."""
    user_id = payload.get("sub") or payload.get("user_id")
    if not user_id:
        return None

    metadata = payload.get("public_metadata") or {}
    role = metadata.get("role") if isinstance(metadata, dict) else None

    return Principal(
        user_id=str(user_id),
        email=payload.get("email"),
        role=role or payload.get("role"),
        claims=payload,
    )


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Principal]:
    """
    FastAPI dependency returning the caller's Principal, or None.

    Invalid, expired and subject-less tokens all resolve to None.
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        return None

    return principal_from_claims(payload)
