"""
Session token verification.

The identity provider signs HS256 bearer tokens with a secret shared with
this service. The role lives in ``public_metadata.role``. Minting is only
needed by local tooling and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from shippro.app.core.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign ``data`` with an ``exp`` claim.

    Default lifetime is ``ACCESS_TOKEN_EXPIRE_MINUTES``; a negative
    ``expires_delta`` produces an already-expired token.
    """
    lifetime = expires_delta if expires_delta is not None else timedelta(minutes=settings.access_token_expire_minutes)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.auth_secret_key, algorithm=settings.auth_algorithm)


def issue_session_token(user_id: str, email: Optional[str] = None, role: str = "user") -> str:
    """A token shaped like the identity provider's session tokens."""
    return create_access_token({
        "sub": user_id,
        "email": email,
        "public_metadata": {"role": role},
    })


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Claims of a valid, unexpired token; None for anything else."""
    try:
        return jwt.decode(token, settings.auth_secret_key, algorithms=[settings.auth_algorithm])
    except JWTError:
        return None
