"""
Bearer tokens issued at login.

Tokens are HMAC-signed JWTs whose ``sub`` is the user id. Role and property
access are not trusted from the token; they are read from the database on
every request.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from fnb_cost.core.database.entities import User
from fnb_cost.core.errors import AuthenticationError
from fnb_cost.server.core.config import settings


def create_access_token(user: User, *, now: Optional[datetime] = None) -> str:
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.auth.jwt_expiry_minutes),
    }
    return jwt.encode(payload, settings.auth.jwt_secret, algorithm=settings.auth.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry.

    Raises:
        AuthenticationError: The token is expired, tampered with or malformed
    """
    try:
        return jwt.decode(
            token,
            settings.auth.jwt_secret,
            algorithms=[settings.auth.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")
