"""
Authentication Pydantic schemas.

Defines request and response models for login and the user profile.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from backend.app.models.enums import UserRole
from backend.app.schemas.common import CamelModel


class LoginRequest(CamelModel):
    """
    Login credentials.

    Both fields are optional at the schema level so a missing value gets the
    friendly "Please provide email and password" message instead of a
    generic validation error.
    """
    email: Optional[str] = Field(None, description="Account email")
    password: Optional[str] = Field(None, description="Account password")


class UserResponse(CamelModel):
    """Public view of a user account (never includes the password hash)."""
    id: int
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    user: UserResponse
    token: str


class ProfileUpdate(CamelModel):
    """Only name and phone can be changed through the profile endpoint."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
