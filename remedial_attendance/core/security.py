# remedial_attendance/core/security.py

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from remedial_attendance.core.config import settings
from remedial_attendance.core.errors import AuthenticationError
from remedial_attendance.core.logging import logger


def verify_token(token: str, token_type: Optional[str] = "access") -> Dict[str, Any]:
    """
    Verify JWT token and optionally check token type
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError as e:
        logger.warning(f"Token verification failed: {str(e)}")
        raise AuthenticationError("Could not validate credentials")

    if token_type and payload.get("type") != token_type:
        raise AuthenticationError(f"Invalid token type. Expected {token_type}")

    if not payload.get("sub"):
        raise AuthenticationError("Token has no subject")

    return payload


def create_access_token(
    user_id: int,
    role: str,
    extra_claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create access token carrying the user id, role and profile ids"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "exp": expire,
        "jti": secrets.token_urlsafe(16),
    }
    if extra_claims:
        to_encode.update(extra_claims)

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
