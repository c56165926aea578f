"""
Alert generation batch.

Each rule is a pure function: it takes a snapshot of rows plus ``now`` and
returns the alerts that should exist. ``regenerate_alerts`` loads the
snapshot, clears the alert table and stores the union of all rules.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.thresholds import (
    INSURANCE_ALERT_WINDOW,
    LICENSE_ALERT_WINDOW,
    MAINTENANCE_DUE_ALERT_TTL,
    OVERDUE_MAINTENANCE_ALERT_TTL,
    REGISTRATION_ALERT_WINDOW,
    SERVICE_INTERVAL,
    TRIP_DELAY_ALERT_TTL,
    TRIP_DELAY_THRESHOLD,
)
from backend.app.models.alert import Alert
from backend.app.models.driver import Driver
from backend.app.models.enums import AlertPriority, AlertType, MaintenanceStatus, RelatedKind, TripStatus, UserRole
from backend.app.models.maintenance import Maintenance
from backend.app.models.trip import Trip
from backend.app.models.user import User
from backend.app.models.vehicle import Vehicle
from backend.app.schemas.alert import AlertCreate, DriverRef, MaintenanceRef, TripRef, UserRef, VehicleRef

logger = logging.getLogger(__name__)

WELCOME_TITLE = "Welcome to AivoDrive"
WELCOME_MESSAGE = (
    "Welcome to the AivoDrive Fleet Management System. This is your alert center "
    "where you will receive important notifications about your fleet."
)


def _day(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def _expires_within(expiry: Optional[datetime], now: datetime, window) -> bool:
    return expiry is not None and now < expiry < now + window


def service_due_alerts(vehicles: Iterable[Vehicle], now: datetime) -> List[AlertCreate]:
    """Vehicles never serviced, or last serviced longer ago than the service interval."""
    alerts = []
    for vehicle in vehicles:
        if vehicle.last_service_date is not None and vehicle.last_service_date >= now - SERVICE_INTERVAL:
            continue
        last = _day(vehicle.last_service_date) if vehicle.last_service_date else "never"
        alerts.append(AlertCreate(
            type=AlertType.MAINTENANCE_DUE,
            title=f"Maintenance Due: {vehicle.make} {vehicle.model}",
            message=f"Vehicle {vehicle.license_plate} is due for maintenance. Last service was {last}.",
            priority=AlertPriority.MEDIUM,
            related_to=VehicleRef(id=vehicle.id),
            expires_at=now + MAINTENANCE_DUE_ALERT_TTL,
        ))
    return alerts


def registration_expiry_alerts(vehicles: Iterable[Vehicle], now: datetime) -> List[AlertCreate]:
    return [
        AlertCreate(
            type=AlertType.VEHICLE_REGISTRATION_EXPIRY,
            title=f"Registration Expiring: {vehicle.make} {vehicle.model}",
            message=f"Vehicle {vehicle.license_plate} registration expires on {_day(vehicle.registration_expiry)}.",
            priority=AlertPriority.HIGH,
            related_to=VehicleRef(id=vehicle.id),
            expires_at=vehicle.registration_expiry,
        )
        for vehicle in vehicles
        if _expires_within(vehicle.registration_expiry, now, REGISTRATION_ALERT_WINDOW)
    ]


def insurance_expiry_alerts(vehicles: Iterable[Vehicle], now: datetime) -> List[AlertCreate]:
    return [
        AlertCreate(
            type=AlertType.VEHICLE_INSURANCE_EXPIRY,
            title=f"Insurance Expiring: {vehicle.make} {vehicle.model}",
            message=f"Vehicle {vehicle.license_plate} insurance expires on {_day(vehicle.insurance_expiry)}.",
            priority=AlertPriority.HIGH,
            related_to=VehicleRef(id=vehicle.id),
            expires_at=vehicle.insurance_expiry,
        )
        for vehicle in vehicles
        if _expires_within(vehicle.insurance_expiry, now, INSURANCE_ALERT_WINDOW)
    ]


def license_expiry_alerts(drivers: Iterable[Driver], now: datetime) -> List[AlertCreate]:
    return [
        AlertCreate(
            type=AlertType.DRIVER_LICENSE_EXPIRY,
            title=f"License Expiring: Driver {driver.license_number}",
            message=f"Driver license {driver.license_number} expires on {_day(driver.license_expiry)}.",
            priority=AlertPriority.MEDIUM,
            related_to=DriverRef(id=driver.id),
            expires_at=driver.license_expiry,
        )
        for driver in drivers
        if _expires_within(driver.license_expiry, now, LICENSE_ALERT_WINDOW)
    ]


def trip_delay_alerts(trips: Iterable[Trip], now: datetime) -> List[AlertCreate]:
    """Trips still in progress more than the delay threshold after their start time."""
    return [
        AlertCreate(
            type=AlertType.TRIP_DELAY,
            title="Trip Delay Alert",
            message=(
                f"Trip from {trip.origin_address} to {trip.destination_address} "
                f"has been in progress for over 3 hours."
            ),
            priority=AlertPriority.MEDIUM,
            related_to=TripRef(id=trip.id),
            expires_at=now + TRIP_DELAY_ALERT_TTL,
        )
        for trip in trips
        if trip.status == TripStatus.IN_PROGRESS and trip.start_time + TRIP_DELAY_THRESHOLD < now
    ]


def overdue_maintenance_alerts(records: Iterable[Maintenance], now: datetime) -> List[AlertCreate]:
    return [
        AlertCreate(
            type=AlertType.MAINTENANCE_DUE,
            title="Overdue Maintenance",
            message=(
                f"Scheduled maintenance ({record.description}) was due on "
                f"{_day(record.date_scheduled)} and is now overdue."
            ),
            priority=AlertPriority.HIGH,
            related_to=MaintenanceRef(id=record.id),
            expires_at=now + OVERDUE_MAINTENANCE_ALERT_TTL,
        )
        for record in records
        if record.status == MaintenanceStatus.SCHEDULED and record.date_scheduled < now
    ]


def welcome_alert(admin: Optional[User]) -> List[AlertCreate]:
    """The standing system alert; it needs an admin to point at."""
    if admin is None:
        return []
    return [AlertCreate(
        type=AlertType.SYSTEM,
        title=WELCOME_TITLE,
        message=WELCOME_MESSAGE,
        priority=AlertPriority.LOW,
        related_to=UserRef(id=admin.id),
    )]


def build_alerts(
    vehicles: List[Vehicle],
    drivers: List[Driver],
    trips: List[Trip],
    maintenance: List[Maintenance],
    admin: Optional[User],
    now: datetime
) -> List[AlertCreate]:
    """Run every rule over one snapshot, in a fixed order."""
    return [
        *service_due_alerts(vehicles, now),
        *registration_expiry_alerts(vehicles, now),
        *insurance_expiry_alerts(vehicles, now),
        *license_expiry_alerts(drivers, now),
        *trip_delay_alerts(trips, now),
        *overdue_maintenance_alerts(maintenance, now),
        *welcome_alert(admin),
    ]


async def regenerate_alerts(db: AsyncSession, now: Optional[datetime] = None) -> List[Alert]:
    """
    Clear the alert table and rebuild it from the current fleet state.

    Returns:
        The stored alerts
    """
    now = now or datetime.utcnow()

    vehicles = list((await db.execute(select(Vehicle).order_by(Vehicle.id))).scalars().all())
    drivers = list((await db.execute(select(Driver).order_by(Driver.id))).scalars().all())
    trips = list((await db.execute(
        select(Trip).where(Trip.status == TripStatus.IN_PROGRESS).order_by(Trip.id)
    )).scalars().all())
    maintenance = list((await db.execute(
        select(Maintenance).where(Maintenance.status == MaintenanceStatus.SCHEDULED).order_by(Maintenance.id)
    )).scalars().all())
    admin = (await db.execute(
        select(User).where(User.role == UserRole.ADMIN).order_by(User.id).limit(1)
    )).scalar_one_or_none()

    drafts = build_alerts(vehicles, drivers, trips, maintenance, admin, now)

    await db.execute(delete(Alert))
    alerts = [
        Alert(
            type=draft.type,
            title=draft.title,
            message=draft.message,
            priority=draft.priority,
            is_read=False,
            related_kind=RelatedKind(draft.related_to.kind),
            related_id=draft.related_to.id,
            expires_at=draft.expires_at,
        )
        for draft in drafts
    ]
    db.add_all(alerts)
    await db.commit()

    logger.info("Alert generation stored %s alerts", len(alerts))
    return alerts
