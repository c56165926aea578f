"""
JWT token utilities for authentication.

This module provides functions for encoding and decoding JWT tokens.
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import ExpiredSignatureError, JWTError, jwt
from backend.app.core.config import settings


class TokenExpiredError(Exception):
    """The token signature is valid but its ``exp`` claim has passed."""


class TokenInvalidError(Exception):
    """The token is malformed or its signature does not verify."""


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data payload to encode in the token (should include: sub, user_id, role)
        expires_delta: Optional custom expiration time, defaults to JWT_EXPIRES_IN

    Returns:
        Encoded JWT token string

    Example payload:
        {
            "sub": "admin@aivodrive.com",
            "user_id": 1,
            "role": "admin",
            "exp": 1234567890
        }
    """
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or settings.jwt_expires_delta)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload (includes: sub, user_id, role, exp)

    Raises:
        TokenExpiredError: signature is fine but the token has expired
        TokenInvalidError: token cannot be decoded or verified
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise TokenExpiredError(str(exc)) from exc
    except JWTError as exc:
        raise TokenInvalidError(str(exc)) from exc
