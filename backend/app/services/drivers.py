"""
Driver service.

A driver is a ``User`` with the driver role plus a ``Driver`` profile. Both
are created, updated and deleted together, and every change to the
assigned vehicle goes through ``backend.app.services.assignment``.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, desc, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import BusinessRuleError, DuplicateFieldError, ResourceNotFoundError
from backend.app.core.security import get_password_hash
from backend.app.core.thresholds import DOCUMENT_EXPIRY_WINDOW
from backend.app.models.driver import Driver
from backend.app.models.enums import DriverStatus, TripStatus, UserRole
from backend.app.models.fuel import FuelRecord
from backend.app.models.trip import Trip
from backend.app.models.user import User
from backend.app.schemas.driver import DriverCreate, DriverStats, DriverUpdate
from backend.app.services.assignment import assign_vehicle, unassign_vehicle
from backend.app.services.queries import count_by, count_where, like, paginate

logger = logging.getLogger(__name__)

_USER_FIELDS = ("name", "phone")


async def get_driver_with_user(db: AsyncSession, driver_id: int) -> Tuple[Driver, Optional[User]]:
    result = await db.execute(
        select(Driver, User).outerjoin(User, Driver.user_id == User.id).where(Driver.id == driver_id)
    )
    row = result.first()
    if row is None:
        raise ResourceNotFoundError("Driver", driver_id)
    return row[0], row[1]


async def get_driver_for_user(db: AsyncSession, user_id: int) -> Optional[Driver]:
    """The driver profile linked to a user account, if there is one."""
    result = await db.execute(select(Driver).where(Driver.user_id == user_id))
    return result.scalar_one_or_none()


async def _ensure_license_free(db: AsyncSession, license_number: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(Driver.id).where(Driver.license_number == license_number)
    if exclude_id is not None:
        stmt = stmt.where(Driver.id != exclude_id)
    if await db.scalar(stmt) is not None:
        raise DuplicateFieldError("Driver with this license number already exists", "licenseNumber")


def _check_manual_status(status: DriverStatus) -> None:
    if status == DriverStatus.ON_TRIP:
        raise BusinessRuleError("Driver status on_trip is set by starting a trip")


async def list_drivers(
    db: AsyncSession,
    page: int,
    limit: int,
    status: Optional[DriverStatus] = None,
    search: Optional[str] = None
) -> Tuple[List[Tuple[Driver, Optional[User]]], int]:
    stmt = select(Driver, User).outerjoin(User, Driver.user_id == User.id)
    if status:
        stmt = stmt.where(Driver.status == status)
    if search:
        pattern = like(search)
        stmt = stmt.where(or_(
            User.name.ilike(pattern),
            User.email.ilike(pattern),
            Driver.license_number.ilike(pattern),
        ))
    stmt = stmt.order_by(desc(Driver.created_at), desc(Driver.id))
    rows, total = await paginate(db, stmt, page, limit, scalars=False)
    return [(row[0], row[1]) for row in rows], total


async def create_driver(db: AsyncSession, payload: DriverCreate) -> Tuple[Driver, User]:
    """
    Create the user account and driver profile, then assign the vehicle if one was given.

    Raises:
        DuplicateFieldError: email or licence number already in use
        ResourceNotFoundError: the requested vehicle does not exist
        BusinessRuleError: the vehicle already has a driver
    """
    email = payload.email.lower()
    if await db.scalar(select(User.id).where(User.email == email)) is not None:
        raise DuplicateFieldError("User with this email already exists", "email")
    await _ensure_license_free(db, payload.license_number)
    _check_manual_status(payload.status)

    user = User(
        name=payload.name,
        email=email,
        hashed_password=get_password_hash(payload.password),
        phone=payload.phone,
        role=UserRole.DRIVER,
        is_active=True,
    )
    db.add(user)
    await db.flush()

    profile = payload.model_dump(
        exclude={"name", "email", "password", "phone", "assigned_vehicle_id", "hire_date"},
    )
    driver = Driver(user_id=user.id, **profile)
    if payload.hire_date is not None:
        driver.hire_date = payload.hire_date
    db.add(driver)
    await db.flush()

    await assign_vehicle(db, driver, payload.assigned_vehicle_id)

    await db.commit()
    await db.refresh(driver)
    await db.refresh(user)

    logger.info("Driver %s created for user %s", driver.id, user.id)
    return driver, user


async def update_driver(db: AsyncSession, driver_id: int, payload: DriverUpdate) -> Tuple[Driver, Optional[User]]:
    driver, user = await get_driver_with_user(db, driver_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("license_number") and changes["license_number"] != driver.license_number:
        await _ensure_license_free(db, changes["license_number"], exclude_id=driver.id)

    new_status = changes.get("status")
    if new_status and new_status != driver.status:
        _check_manual_status(new_status)
        if driver.status == DriverStatus.ON_TRIP:
            raise BusinessRuleError("Driver is on a trip; complete or cancel the trip first")

    if "assigned_vehicle_id" in changes:
        await assign_vehicle(db, driver, changes.pop("assigned_vehicle_id"))

    for field in _USER_FIELDS:
        if field in changes:
            value = changes.pop(field)
            if user is not None and (value is not None or field == "phone"):
                setattr(user, field, value)

    for field, value in changes.items():
        if value is None and not Driver.__table__.c[field].nullable:
            continue
        setattr(driver, field, value)

    await db.commit()
    await db.refresh(driver)
    if user is not None:
        await db.refresh(user)
    return driver, user


async def delete_driver(db: AsyncSession, driver_id: int) -> None:
    """
    Delete a driver profile, its trips and its user account.

    The assigned vehicle is released first so it does not keep pointing at
    the removed user.
    """
    driver, user = await get_driver_with_user(db, driver_id)

    if await count_where(db, Trip, Trip.driver_id == driver.id, Trip.status == TripStatus.IN_PROGRESS):
        raise BusinessRuleError("Cannot delete driver while a trip is in progress")

    await unassign_vehicle(db, driver)

    await db.execute(update(FuelRecord).where(FuelRecord.driver_id == driver.id).values(driver_id=None))
    await db.execute(delete(Trip).where(Trip.driver_id == driver.id))

    await db.delete(driver)
    await db.flush()
    if user is not None:
        await db.delete(user)
    await db.commit()

    logger.info("Driver %s deleted", driver_id)


async def driver_stats(db: AsyncSession, now: Optional[datetime] = None) -> DriverStats:
    now = now or datetime.utcnow()
    total = await count_where(db, Driver)
    assigned = await count_where(db, Driver, Driver.assigned_vehicle_id.is_not(None))

    return DriverStats(
        total=total,
        by_status=await count_by(db, Driver.status),
        expiring_licenses=await count_where(
            db, Driver, Driver.license_expiry >= now, Driver.license_expiry <= now + DOCUMENT_EXPIRY_WINDOW
        ),
        assigned=assigned,
        unassigned=total - assigned,
    )
