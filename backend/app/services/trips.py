"""
Trip service.

Applies the trip status-sync rule to the driver table. Every request that
touches a trip and its driver does so in a single transaction, and the
driver claim is a conditional update:

    UPDATE drivers SET status = 'on_trip'
    WHERE id = :driver_id AND status = 'available'

so two requests racing to start trips for the same driver cannot both win.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.core.exceptions import BusinessRuleError, InsufficientPermissionsError
from backend.app.models.driver import Driver
from backend.app.models.enums import DriverStatus, TripStatus, VehicleStatus
from backend.app.models.trip import Trip
from backend.app.models.vehicle import Vehicle
from backend.app.schemas.trip import DRIVER_UPDATABLE_FIELDS, Location, TripCreate, TripStats, TripUpdate
from backend.app.services.drivers import get_driver_for_user
from backend.app.services.queries import count_by, count_where, get_or_404, like, paginate
from backend.app.services.status_sync import DriverEffect, check_driver_transition, trip_transition_effect

logger = logging.getLogger(__name__)


def _require_active_vehicle(vehicle: Vehicle) -> None:
    if vehicle.status != VehicleStatus.ACTIVE:
        raise BusinessRuleError(f"Vehicle is not active, current status: {vehicle.status.value}")


def _require_available_driver(driver: Driver) -> None:
    if driver.status != DriverStatus.AVAILABLE:
        raise BusinessRuleError(f"Driver is not available, current status: {driver.status.value}")


def _set_location(trip: Trip, prefix: str, location: Optional[Location]) -> None:
    if location is None:
        return
    lat, lng = location.coordinates if location.coordinates else (None, None)
    setattr(trip, f"{prefix}_address", location.address)
    setattr(trip, f"{prefix}_lat", lat)
    setattr(trip, f"{prefix}_lng", lng)


async def claim_driver(db: AsyncSession, driver_id: int) -> None:
    """
    Move a driver from AVAILABLE to ON_TRIP, or fail without changing anything.

    Raises:
        BusinessRuleError: the driver was not AVAILABLE at the time of the update
    """
    result = await db.execute(
        update(Driver)
        .where(Driver.id == driver_id, Driver.status == DriverStatus.AVAILABLE)
        .values(status=DriverStatus.ON_TRIP)
    )
    if result.rowcount != 1:
        current = await db.scalar(select(Driver.status).where(Driver.id == driver_id))
        status = current.value if current is not None else "unknown"
        raise BusinessRuleError(f"Driver is not available, current status: {status}")
    logger.info("Driver %s is now on a trip", driver_id)


async def release_driver(db: AsyncSession, driver_id: int) -> None:
    """Move a driver from ON_TRIP back to AVAILABLE; any other status is left alone."""
    await db.execute(
        update(Driver)
        .where(Driver.id == driver_id, Driver.status == DriverStatus.ON_TRIP)
        .values(status=DriverStatus.AVAILABLE)
    )
    logger.info("Driver %s released", driver_id)


async def apply_driver_effect(db: AsyncSession, driver_id: int, effect: DriverEffect) -> None:
    if effect.claim:
        await claim_driver(db, driver_id)
    if effect.release:
        await release_driver(db, driver_id)
    if effect.trips_increment or effect.distance_increment:
        await db.execute(
            update(Driver)
            .where(Driver.id == driver_id)
            .values(
                total_trips=Driver.total_trips + effect.trips_increment,
                total_distance=Driver.total_distance + effect.distance_increment,
            )
        )
        logger.info(
            "Driver %s credited with %s trip(s) and %s km",
            driver_id, effect.trips_increment, effect.distance_increment
        )


async def get_trip_for_user(db: AsyncSession, trip_id: int, current_user: CurrentUser) -> Trip:
    """Load a trip, hiding other drivers' trips from users with the driver role."""
    trip = await get_or_404(db, Trip, trip_id, "Trip")
    if current_user.is_driver:
        driver = await get_driver_for_user(db, current_user.id)
        if driver is None or trip.driver_id != driver.id:
            raise InsufficientPermissionsError("Not authorized to access this trip")
    return trip


async def list_trips(
    db: AsyncSession,
    current_user: CurrentUser,
    page: int,
    limit: int,
    status: Optional[TripStatus] = None,
    vehicle_id: Optional[int] = None,
    driver_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None
) -> Tuple[List[Trip], int]:
    stmt = select(Trip)

    if current_user.is_driver:
        driver = await get_driver_for_user(db, current_user.id)
        if driver is None:
            return [], 0
        stmt = stmt.where(Trip.driver_id == driver.id)
    elif driver_id:
        stmt = stmt.where(Trip.driver_id == driver_id)

    if status:
        stmt = stmt.where(Trip.status == status)
    if vehicle_id:
        stmt = stmt.where(Trip.vehicle_id == vehicle_id)
    if start_date:
        stmt = stmt.where(Trip.start_time >= start_date)
    if end_date:
        stmt = stmt.where(Trip.start_time <= end_date)
    if search:
        pattern = like(search)
        stmt = stmt.where(or_(
            Trip.origin_address.ilike(pattern),
            Trip.destination_address.ilike(pattern),
            Trip.purpose.ilike(pattern),
        ))

    stmt = stmt.order_by(desc(Trip.start_time), desc(Trip.id))
    return await paginate(db, stmt, page, limit)


async def create_trip(db: AsyncSession, payload: TripCreate, current_user: CurrentUser) -> Trip:
    """
    Create a trip for an ACTIVE vehicle and an AVAILABLE driver.

    A trip created directly as IN_PROGRESS claims its driver.
    """
    if payload.missing_required():
        raise BusinessRuleError("Please provide all required fields")

    vehicle = await get_or_404(db, Vehicle, payload.vehicle_id, "Vehicle")
    _require_active_vehicle(vehicle)
    driver = await get_or_404(db, Driver, payload.driver_id, "Driver")
    _require_available_driver(driver)

    trip = Trip(
        vehicle_id=vehicle.id,
        driver_id=driver.id,
        start_time=payload.start_time,
        end_time=payload.end_time,
        estimated_distance=payload.estimated_distance,
        actual_distance=payload.actual_distance,
        status=payload.status,
        purpose=payload.purpose,
        notes=payload.notes,
        start_odometer=payload.start_odometer,
        end_odometer=payload.end_odometer,
        fuel_consumed=payload.fuel_consumed,
        created_by=current_user.id,
    )
    _set_location(trip, "origin", payload.origin)
    _set_location(trip, "destination", payload.destination)
    if payload.status == TripStatus.COMPLETED and trip.end_time is None:
        trip.end_time = datetime.utcnow()
    db.add(trip)

    effect = trip_transition_effect(TripStatus.SCHEDULED, payload.status, payload.actual_distance)
    await apply_driver_effect(db, driver.id, effect)

    await db.commit()
    await db.refresh(trip)

    logger.info("Trip %s created (%s) by user %s", trip.id, trip.status.value, current_user.id)
    return trip


async def update_trip(db: AsyncSession, trip: Trip, payload: TripUpdate, current_user: CurrentUser) -> Trip:
    """
    Update a trip and keep its driver in step.

    Drivers may only touch status, actual distance and notes on their own
    trips, and only along scheduled → in_progress → completed. Admins and
    dispatchers may change anything, including the vehicle and driver.
    """
    changes = payload.model_dump(exclude_unset=True)
    previous = trip.status

    if current_user.is_driver:
        driver = await get_driver_for_user(db, current_user.id)
        if driver is None or trip.driver_id != driver.id:
            raise InsufficientPermissionsError("Not authorized to update this trip")
        if set(changes) - DRIVER_UPDATABLE_FIELDS:
            raise BusinessRuleError("Drivers can only update status, actual distance, and notes")
        if changes.get("status"):
            check_driver_transition(previous, changes["status"])

    new_status = changes.get("status") or previous
    new_vehicle_id = changes.get("vehicle_id") or trip.vehicle_id
    new_driver_id = changes.get("driver_id") or trip.driver_id
    effective_previous = previous

    if new_vehicle_id != trip.vehicle_id:
        vehicle = await get_or_404(db, Vehicle, new_vehicle_id, "Vehicle")
        _require_active_vehicle(vehicle)

    if new_driver_id != trip.driver_id:
        new_driver = await get_or_404(db, Driver, new_driver_id, "Driver")
        if previous == TripStatus.IN_PROGRESS:
            # The old driver is done with this trip; for the new driver it starts fresh.
            await release_driver(db, trip.driver_id)
            effective_previous = TripStatus.SCHEDULED
        _require_available_driver(new_driver)

    distance = changes.get("actual_distance")
    if distance is None:
        distance = trip.actual_distance
    effect = trip_transition_effect(effective_previous, new_status, distance)

    if effect.claim:
        vehicle = await get_or_404(db, Vehicle, new_vehicle_id, "Vehicle")
        _require_active_vehicle(vehicle)

    await apply_driver_effect(db, new_driver_id, effect)

    for field in ("origin", "destination"):
        if field in changes:
            _set_location(trip, field, getattr(payload, field))
            changes.pop(field)

    for field, value in changes.items():
        if value is None and not Trip.__table__.c[field].nullable:
            continue
        setattr(trip, field, value)

    if new_status == TripStatus.COMPLETED and previous != TripStatus.COMPLETED and trip.end_time is None:
        trip.end_time = datetime.utcnow()

    await db.commit()
    await db.refresh(trip)

    if previous != new_status:
        logger.info("Trip %s moved from %s to %s", trip.id, previous.value, new_status.value)
    return trip


async def delete_trip(db: AsyncSession, trip_id: int) -> None:
    trip = await get_or_404(db, Trip, trip_id, "Trip")
    if trip.status == TripStatus.IN_PROGRESS:
        await release_driver(db, trip.driver_id)
    await db.delete(trip)
    await db.commit()
    logger.info("Trip %s deleted", trip_id)


async def trip_stats(db: AsyncSession, now: Optional[datetime] = None) -> TripStats:
    now = now or datetime.utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = today - timedelta(days=today.weekday())

    distance_row = (await db.execute(
        select(func.coalesce(func.sum(Trip.actual_distance), 0), func.count(Trip.id))
        .where(Trip.status == TripStatus.COMPLETED)
    )).one()
    total_distance, completed = float(distance_row[0] or 0), distance_row[1] or 0

    return TripStats(
        total=await count_where(db, Trip),
        by_status=await count_by(db, Trip.status),
        today=await count_where(db, Trip, Trip.start_time >= today, Trip.start_time < today + timedelta(days=1)),
        this_week=await count_where(db, Trip, Trip.start_time >= week_start),
        distance={
            "total": total_distance,
            "average": total_distance / completed if completed else 0,
            "completed_trips": completed,
        },
    )
