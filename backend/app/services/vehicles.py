"""
Vehicle service: persistence and statistics for the vehicle endpoints.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, desc, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import BusinessRuleError, DuplicateFieldError
from backend.app.core.thresholds import DOCUMENT_EXPIRY_WINDOW, SERVICE_INTERVAL
from backend.app.models.driver import Driver
from backend.app.models.enums import MaintenanceStatus, TripStatus, VehicleStatus
from backend.app.models.fuel import FuelRecord
from backend.app.models.maintenance import Maintenance
from backend.app.models.trip import Trip
from backend.app.models.vehicle import Vehicle
from backend.app.schemas.vehicle import VehicleCreate, VehicleStats, VehicleUpdate
from backend.app.services.queries import count_by, count_where, get_or_404, like, paginate

logger = logging.getLogger(__name__)


async def _ensure_plate_free(db: AsyncSession, plate: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(Vehicle.id).where(Vehicle.license_plate == plate)
    if exclude_id is not None:
        stmt = stmt.where(Vehicle.id != exclude_id)
    if await db.scalar(stmt) is not None:
        raise DuplicateFieldError("Vehicle with this license plate already exists", "licensePlate")


async def _check_manual_status(db: AsyncSession, vehicle: Optional[Vehicle], status: VehicleStatus) -> None:
    """
    MAINTENANCE is owned by the maintenance records: it cannot be set by hand,
    and cannot be left while a record is still in progress.
    """
    if status == VehicleStatus.MAINTENANCE:
        if vehicle is not None and vehicle.status == VehicleStatus.MAINTENANCE:
            return
        raise BusinessRuleError("Vehicle status maintenance is set by starting a maintenance record")

    if vehicle is not None and vehicle.status == VehicleStatus.MAINTENANCE:
        running = await count_where(
            db, Maintenance,
            Maintenance.vehicle_id == vehicle.id,
            Maintenance.status == MaintenanceStatus.IN_PROGRESS,
        )
        if running:
            raise BusinessRuleError("Vehicle has maintenance in progress; complete or cancel it first")


async def list_vehicles(
    db: AsyncSession,
    page: int,
    limit: int,
    status: Optional[VehicleStatus] = None,
    search: Optional[str] = None
) -> Tuple[List[Vehicle], int]:
    stmt = select(Vehicle)
    if status:
        stmt = stmt.where(Vehicle.status == status)
    if search:
        pattern = like(search)
        stmt = stmt.where(or_(
            Vehicle.make.ilike(pattern),
            Vehicle.model.ilike(pattern),
            Vehicle.license_plate.ilike(pattern),
        ))
    stmt = stmt.order_by(desc(Vehicle.created_at), desc(Vehicle.id))
    return await paginate(db, stmt, page, limit)


async def create_vehicle(db: AsyncSession, payload: VehicleCreate) -> Vehicle:
    await _ensure_plate_free(db, payload.license_plate)
    await _check_manual_status(db, None, payload.status)

    vehicle = Vehicle(**payload.model_dump())
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    logger.info("Vehicle %s created (%s)", vehicle.id, vehicle.license_plate)
    return vehicle


async def update_vehicle(db: AsyncSession, vehicle: Vehicle, payload: VehicleUpdate) -> Vehicle:
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("license_plate") and changes["license_plate"] != vehicle.license_plate:
        await _ensure_plate_free(db, changes["license_plate"], exclude_id=vehicle.id)

    if changes.get("status") and changes["status"] != vehicle.status:
        await _check_manual_status(db, vehicle, changes["status"])

    for field, value in changes.items():
        if value is None and not Vehicle.__table__.c[field].nullable:
            continue
        setattr(vehicle, field, value)

    await db.commit()
    await db.refresh(vehicle)
    return vehicle


async def delete_vehicle(db: AsyncSession, vehicle_id: int) -> None:
    """
    Delete a vehicle together with its trip, maintenance and fuel history.

    Raises:
        BusinessRuleError: a driver is still assigned, or a trip is running
    """
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")

    if vehicle.current_driver_id is not None:
        raise BusinessRuleError("Cannot delete vehicle that is currently assigned to a driver")

    if await count_where(db, Trip, Trip.vehicle_id == vehicle.id, Trip.status == TripStatus.IN_PROGRESS):
        raise BusinessRuleError("Cannot delete vehicle while a trip is in progress")

    # Stale profile pointers, if any, must not outlive the vehicle.
    await db.execute(
        update(Driver).where(Driver.assigned_vehicle_id == vehicle.id).values(assigned_vehicle_id=None)
    )
    for model in (Trip, Maintenance, FuelRecord):
        await db.execute(delete(model).where(model.vehicle_id == vehicle.id))

    await db.delete(vehicle)
    await db.commit()
    logger.info("Vehicle %s deleted", vehicle_id)


async def vehicle_stats(db: AsyncSession, now: Optional[datetime] = None) -> VehicleStats:
    now = now or datetime.utcnow()
    expiry_cutoff = now + DOCUMENT_EXPIRY_WINDOW

    return VehicleStats(
        total=await count_where(db, Vehicle),
        by_status=await count_by(db, Vehicle.status),
        maintenance_due=await count_where(
            db, Vehicle,
            or_(Vehicle.last_service_date.is_(None), Vehicle.last_service_date < now - SERVICE_INTERVAL)
        ),
        expiring_registration=await count_where(
            db, Vehicle, Vehicle.registration_expiry >= now, Vehicle.registration_expiry <= expiry_cutoff
        ),
        expiring_insurance=await count_where(
            db, Vehicle, Vehicle.insurance_expiry >= now, Vehicle.insurance_expiry <= expiry_cutoff
        ),
    )
