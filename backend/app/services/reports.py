"""
Report service: daily summary, maintenance due and fleet performance.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.thresholds import (
    PERFORMANCE_REPORT_PERIOD, SERVICE_INTERVAL, TOP_DRIVERS_LIMIT, UPCOMING_MAINTENANCE_WINDOW
)
from backend.app.models.driver import Driver
from backend.app.models.enums import DriverStatus, MaintenanceStatus, TripStatus, VehicleStatus
from backend.app.models.maintenance import Maintenance
from backend.app.models.trip import Trip
from backend.app.models.user import User
from backend.app.models.vehicle import Vehicle
from backend.app.schemas.maintenance import MaintenanceResponse
from backend.app.schemas.report import (
    DailySummary,
    DateRange,
    DriverDaySummary,
    DriverSummary,
    FleetPerformanceReport,
    MaintenanceDaySummary,
    MaintenanceDueReport,
    MaintenanceDueSummary,
    PerformanceTripStats,
    TopDriver,
    TripDaySummary,
    VehicleDaySummary,
    VehicleUtilization,
)
from backend.app.schemas.vehicle import VehicleResponse, VehicleSummary
from backend.app.services.queries import count_by, count_where


async def daily_summary(db: AsyncSession, now: Optional[datetime] = None) -> DailySummary:
    now = now or datetime.utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)

    trips_today = (Trip.start_time >= today, Trip.start_time < tomorrow)
    maintenance_today = (Maintenance.date_scheduled >= today, Maintenance.date_scheduled < tomorrow)

    vehicles = await count_by(db, Vehicle.status)
    drivers = await count_by(db, Driver.status)
    maintenance = await count_by(db, Maintenance.status, *maintenance_today)

    return DailySummary(
        date=today,
        trips=TripDaySummary(
            total=await count_where(db, Trip, *trips_today),
            by_status=await count_by(db, Trip.status, *trips_today),
        ),
        vehicles=VehicleDaySummary(
            total=await count_where(db, Vehicle),
            by_status=vehicles,
            active=vehicles.get(VehicleStatus.ACTIVE.value, 0),
            maintenance=vehicles.get(VehicleStatus.MAINTENANCE.value, 0),
            inactive=vehicles.get(VehicleStatus.INACTIVE.value, 0),
        ),
        drivers=DriverDaySummary(
            total=await count_where(db, Driver),
            by_status=drivers,
            available=drivers.get(DriverStatus.AVAILABLE.value, 0),
            on_trip=drivers.get(DriverStatus.ON_TRIP.value, 0),
            off_duty=drivers.get(DriverStatus.OFF_DUTY.value, 0),
            inactive=drivers.get(DriverStatus.INACTIVE.value, 0),
        ),
        maintenance=MaintenanceDaySummary(
            total=await count_where(db, Maintenance, *maintenance_today),
            by_status=maintenance,
            scheduled=maintenance.get(MaintenanceStatus.SCHEDULED.value, 0),
            in_progress=maintenance.get(MaintenanceStatus.IN_PROGRESS.value, 0),
            completed=maintenance.get(MaintenanceStatus.COMPLETED.value, 0),
        ),
    )


async def maintenance_due(db: AsyncSession, now: Optional[datetime] = None) -> MaintenanceDueReport:
    """
    Vehicles overdue for service plus scheduled maintenance that is coming up
    within the next 30 days or already late.
    """
    now = now or datetime.utcnow()

    vehicles = (await db.execute(
        select(Vehicle)
        .where(or_(Vehicle.last_service_date.is_(None), Vehicle.last_service_date < now - SERVICE_INTERVAL))
        .order_by(Vehicle.last_service_date.is_not(None), asc(Vehicle.last_service_date), Vehicle.id)
    )).scalars().all()

    scheduled = Maintenance.status == MaintenanceStatus.SCHEDULED
    upcoming = (await db.execute(
        select(Maintenance)
        .where(scheduled, Maintenance.date_scheduled >= now,
               Maintenance.date_scheduled <= now + UPCOMING_MAINTENANCE_WINDOW)
        .order_by(asc(Maintenance.date_scheduled))
    )).scalars().all()
    overdue = (await db.execute(
        select(Maintenance)
        .where(scheduled, Maintenance.date_scheduled < now)
        .order_by(asc(Maintenance.date_scheduled))
    )).scalars().all()

    return MaintenanceDueReport(
        vehicles_due_for_service=[VehicleResponse.model_validate(v) for v in vehicles],
        upcoming_maintenance=[MaintenanceResponse.model_validate(m) for m in upcoming],
        overdue_maintenance=[MaintenanceResponse.model_validate(m) for m in overdue],
        summary=MaintenanceDueSummary(
            vehicles_due_count=len(vehicles),
            upcoming_maintenance_count=len(upcoming),
            overdue_maintenance_count=len(overdue),
        ),
    )


async def fleet_performance(db: AsyncSession, now: Optional[datetime] = None) -> FleetPerformanceReport:
    """
    Completed-trip totals, the busiest drivers and per-vehicle utilisation
    over the last 30 days.
    """
    end = now or datetime.utcnow()
    start = end - PERFORMANCE_REPORT_PERIOD
    in_range = (Trip.start_time >= start, Trip.start_time <= end)
    completed = (Trip.status == TripStatus.COMPLETED, *in_range)

    total_trips, total_distance = (await db.execute(
        select(func.count(Trip.id), func.coalesce(func.sum(Trip.actual_distance), 0)).where(*completed)
    )).one()
    total_distance = float(total_distance or 0)

    trip_count = func.count(Trip.id).label("trip_count")
    driver_rows = (await db.execute(
        select(Driver, User.name, trip_count, func.coalesce(func.sum(Trip.actual_distance), 0))
        .select_from(Trip)
        .join(Driver, Trip.driver_id == Driver.id)
        .outerjoin(User, Driver.user_id == User.id)
        .where(*completed)
        .group_by(Driver.id, User.name)
        .order_by(desc(trip_count), Driver.id)
        .limit(TOP_DRIVERS_LIMIT)
    )).all()

    vehicle_trips = func.count(Trip.id).label("vehicle_trips")
    vehicle_rows = (await db.execute(
        select(Vehicle, vehicle_trips, func.coalesce(func.sum(Trip.actual_distance), 0))
        .select_from(Trip)
        .join(Vehicle, Trip.vehicle_id == Vehicle.id)
        .where(*in_range)
        .group_by(Vehicle.id)
        .order_by(desc(vehicle_trips), Vehicle.id)
    )).all()

    return FleetPerformanceReport(
        date_range=DateRange(start=start, end=end),
        trip_stats=PerformanceTripStats(
            total_trips=total_trips,
            total_distance=total_distance,
            avg_distance=total_distance / total_trips if total_trips else 0,
        ),
        top_drivers=[
            TopDriver(
                driver=DriverSummary(id=driver.id, name=name, license_number=driver.license_number),
                trip_count=count,
                total_distance=float(distance),
                avg_distance=float(distance) / count,
            )
            for driver, name, count, distance in driver_rows
        ],
        vehicle_utilization=[
            VehicleUtilization(
                vehicle=VehicleSummary.model_validate(vehicle),
                trip_count=count,
                total_distance=float(distance),
            )
            for vehicle, count, distance in vehicle_rows
        ],
    )
