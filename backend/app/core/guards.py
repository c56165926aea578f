"""
Security guards for role-based access control.

Every protected route declares its allow-list through ``require_role``.
"""

from typing import List

from fastapi import Depends

from backend.app.core.dependencies import CurrentUser, get_current_user
from backend.app.core.exceptions import InsufficientPermissionsError
from backend.app.models.enums import UserRole


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/drivers")
        async def list_drivers(current_user: CurrentUser = Depends(require_role([UserRole.ADMIN]))):
            ...

    Args:
        allowed_roles: List of UserRole enums that are allowed to access the endpoint

    Returns:
        FastAPI dependency function that validates user role

    Raises:
        InsufficientPermissionsError (403) if user role is not in allowed_roles
    """
    async def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise InsufficientPermissionsError(
                details={"required": [role.value for role in allowed_roles]}
            )
        return current_user

    return role_checker


# Shorthands for the allow-lists used across the API
require_admin = require_role([UserRole.ADMIN])
require_staff = require_role([UserRole.ADMIN, UserRole.DISPATCHER])
require_any_role = require_role([UserRole.ADMIN, UserRole.DISPATCHER, UserRole.DRIVER])
