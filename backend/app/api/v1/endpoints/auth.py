"""
Authentication API endpoints.

Provides login, logout and profile endpoints.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser, get_current_user
from backend.app.core.exceptions import AuthenticationError, BusinessRuleError, ResourceNotFoundError
from backend.app.core.jwt import create_access_token
from backend.app.core.responses import success_response
from backend.app.core.security import verify_password
from backend.app.core.token_revocation import revoke_token
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.auth import LoginRequest, LoginResponse, ProfileUpdate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


async def _load_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return user


@router.post("/login")
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Login user and return JWT token.

    The same 401 is returned for an unknown email and a wrong password.
    """
    if not credentials.email or not credentials.password:
        raise BusinessRuleError("Please provide email and password")

    result = await db.execute(select(User).where(User.email == credentials.email.strip().lower()))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(credentials.password, user.hashed_password):
        logger.warning("Failed login attempt for %s", credentials.email)
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        raise AuthenticationError("Your account is inactive. Please contact an administrator.")

    user.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    token = create_access_token(data={"sub": user.email, "user_id": user.id, "role": user.role.value})
    logger.info("User %s logged in", user.id)

    return success_response(
        "Login successful",
        LoginResponse(user=UserResponse.model_validate(user), token=token)
    )


@router.post("/logout")
async def logout(current_user: CurrentUser = Depends(get_current_user)):
    """
    Revoke the presented token.

    Revocation is best effort: if Redis is unreachable the token simply
    lives until it expires.
    """
    if not await revoke_token(current_user.token, current_user.id):
        logger.warning("Token for user %s could not be revoked", current_user.id)
    return success_response("Logged out successfully")


@router.get("/profile")
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user = await _load_user(db, current_user.id)
    return success_response("User profile retrieved successfully", {"user": UserResponse.model_validate(user)})


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update the caller's own name and phone."""
    user = await _load_user(db, current_user.id)

    if payload.name is not None:
        user.name = payload.name
    if "phone" in payload.model_fields_set:
        user.phone = payload.phone

    await db.commit()
    await db.refresh(user)
    return success_response("Profile updated successfully", {"user": UserResponse.model_validate(user)})
