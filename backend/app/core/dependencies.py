"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT authentication.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.exceptions import AuthenticationError, TokenRevokedError
from backend.app.core.jwt import decode_access_token, TokenExpiredError, TokenInvalidError
from backend.app.core.token_revocation import is_token_revoked
from backend.app.db.session import get_db
from backend.app.models.enums import UserRole
from backend.app.models.user import User

# HTTP Bearer security scheme; a missing header is reported by us, not FastAPI
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller, attached to every protected request."""
    id: int
    role: UserRole
    email: str
    token: str

    @property
    def is_driver(self) -> bool:
        return self.role == UserRole.DRIVER


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> CurrentUser:
    """
    FastAPI dependency for JWT authentication.

    Checks, in order:
    1. A bearer token is present
    2. The token signature and expiry are valid
    3. The token has not been revoked through logout
    4. The user still exists and is active (real-time check)

    Raises:
        AuthenticationError: 401 for any failed check, with a message that
        distinguishes a missing token from an invalid or expired one
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token, authorization denied")

    token = credentials.credentials

    try:
        payload = decode_access_token(token)
    except TokenExpiredError:
        raise AuthenticationError("Token expired. Please log in again.", error_code="ERR_AUTH_003")
    except TokenInvalidError:
        raise AuthenticationError("Token is not valid")

    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError("Token is not valid")

    if await is_token_revoked(token):
        raise TokenRevokedError()

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("Token is not valid")

    if not user.is_active:
        raise AuthenticationError("Your account has been deactivated")

    return CurrentUser(id=user.id, role=user.role, email=user.email, token=token)
