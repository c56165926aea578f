"""
Driver ↔ Vehicle assignment.

``drivers.assigned_vehicle_id`` and ``vehicles.current_driver_id`` describe the
same link from both ends (the vehicle side stores the driver's *user* id).
These helpers are the only code that writes either column, and they always
write both.
"""

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import BusinessRuleError
from backend.app.models.driver import Driver
from backend.app.models.vehicle import Vehicle
from backend.app.services.queries import get_or_404

logger = logging.getLogger(__name__)


async def unassign_vehicle(db: AsyncSession, driver: Driver) -> None:
    """Clear the driver's vehicle and that vehicle's current driver."""
    if driver.assigned_vehicle_id is None:
        return

    vehicle_id = driver.assigned_vehicle_id
    await db.execute(
        update(Vehicle)
        .where(Vehicle.id == vehicle_id, Vehicle.current_driver_id == driver.user_id)
        .values(current_driver_id=None)
    )
    driver.assigned_vehicle_id = None
    logger.info("Vehicle %s unassigned from driver %s", vehicle_id, driver.id)


async def assign_vehicle(db: AsyncSession, driver: Driver, vehicle_id: Optional[int]) -> None:
    """
    Point ``driver`` at ``vehicle_id`` (or at nothing) and keep the vehicle side in step.

    The previous vehicle, if any, is released first.

    Raises:
        ResourceNotFoundError: the vehicle does not exist
        BusinessRuleError: the vehicle is already held by another driver
    """
    if driver.assigned_vehicle_id == vehicle_id:
        return

    vehicle = None
    if vehicle_id is not None:
        vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")
        if vehicle.current_driver_id is not None and vehicle.current_driver_id != driver.user_id:
            raise BusinessRuleError("Vehicle is already assigned to another driver")

    await unassign_vehicle(db, driver)

    if vehicle is not None:
        vehicle.current_driver_id = driver.user_id
        driver.assigned_vehicle_id = vehicle.id
        logger.info("Vehicle %s assigned to driver %s", vehicle.id, driver.id)
