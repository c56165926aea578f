"""
Demo data seeding.

Clears every table and loads a small, self-consistent fleet: drivers on a
trip are ON_TRIP, vehicles with running maintenance are in MAINTENANCE,
and both sides of every driver/vehicle assignment agree. Dates are relative
to ``now`` so the generated alerts stay meaningful whenever the seed runs.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.security import get_password_hash
from backend.app.models.alert import Alert
from backend.app.models.driver import Driver
from backend.app.models.enums import (
    DriverStatus, FuelType, MaintenanceStatus, TripStatus, UserRole, VehicleStatus
)
from backend.app.models.fuel import FuelRecord
from backend.app.models.maintenance import Maintenance
from backend.app.models.trip import Trip
from backend.app.models.user import User
from backend.app.models.vehicle import Vehicle
from backend.app.services.alert_generation import regenerate_alerts

logger = logging.getLogger(__name__)

SEED_PASSWORD = "password123"
DRIVER_ACCOUNTS = 5

# (make, model, year, plate, status, fuel type, capacity, mileage, vin, days since service, notes)
VEHICLES = [
    ("Toyota", "Camry", 2022, "ABC-1234", VehicleStatus.ACTIVE, FuelType.GASOLINE, 60, 15000,
     "JT2BF22K1W0123456", 40, "Company sedan for executive transport"),
    ("Ford", "Transit", 2021, "XYZ-5678", VehicleStatus.ACTIVE, FuelType.DIESEL, 80, 35000,
     "1FTBF2B62BEA12345", 20, "Cargo van for deliveries"),
    ("Honda", "Civic", 2023, "DEF-9012", VehicleStatus.ACTIVE, FuelType.GASOLINE, 50, 8000,
     "2HGFG4A52FH123456", 60, "Compact car for city transport"),
    ("Tesla", "Model 3", 2023, "GHI-3456", VehicleStatus.ACTIVE, FuelType.ELECTRIC, 0, 12000,
     "5YJ3E1EA1JF123456", 10, "Electric vehicle for eco-friendly transport"),
    ("Chevrolet", "Silverado", 2022, "JKL-7890", VehicleStatus.MAINTENANCE, FuelType.GASOLINE, 98, 28000,
     "1GCPYBEK5MZ123456", 150, "Pickup truck for heavy loads, in the workshop for brakes"),
    ("Nissan", "Rogue", 2021, "MNO-1234", VehicleStatus.INACTIVE, FuelType.GASOLINE, 55, 45000,
     "JN8AS5MV1FW123456", 200, "SUV inactive due to transmission issues"),
    ("Hyundai", "Tucson", 2022, "PQR-5678", VehicleStatus.ACTIVE, FuelType.GASOLINE, 62, 18000,
     "KM8J3CAL6NU123456", 120, "Compact SUV for general transport"),
    ("Mercedes-Benz", "Sprinter", 2021, "STU-9012", VehicleStatus.ACTIVE, FuelType.DIESEL, 100, 40000,
     "WDAPF4CC5KN123456", 75, "Large cargo van for equipment transport"),
]

LOCATIONS = [
    ("Headquarters", (-74.0060, 40.7128)),
    ("Warehouse A", (-73.9857, 40.7484)),
    ("Distribution Center", (-74.0776, 40.7282)),
    ("Client Office", (-73.9172, 40.7680)),
    ("Retail Store", (-73.9442, 40.6782)),
    ("Airport", (-73.7781, 40.6413)),
    ("Manufacturing Plant", (-74.1745, 40.7357)),
    ("Regional Office", (-73.9654, 40.8116)),
]

PURPOSES = ["Delivery", "Pickup", "Client Meeting", "Maintenance Run", "Supply Transport"]

MAINTENANCE_TYPES = ["routine", "repair", "inspection", "other"]
MAINTENANCE_DESCRIPTIONS = [
    "Oil change and filter replacement",
    "Brake system inspection and pad replacement",
    "Tire rotation and pressure check",
    "Engine diagnostics and tune-up",
    "Transmission fluid change",
    "Air conditioning system service",
]
SERVICE_PROVIDERS = ["QuickLube Express", "AutoCare Center", "Fleet Service Pros", "Dealer Service Dept"]
FUEL_STATIONS = ["Shell", "BP", "Exxon", "Chevron", "Mobil", "Circle K"]


@dataclass
class SeedSummary:
    users: int
    vehicles: int
    drivers: int
    trips: int
    maintenance: int
    fuel_records: int
    alerts: int


async def clear_database(db: AsyncSession) -> None:
    """Delete every row, children before parents."""
    for model in (Alert, FuelRecord, Maintenance, Trip, Driver, Vehicle, User):
        await db.execute(delete(model))
    await db.flush()
    logger.info("Database cleared")


def _users(password_hash: str) -> List[User]:
    users = [
        User(name="Admin User", email="admin@aivodrive.com", hashed_password=password_hash,
             role=UserRole.ADMIN, phone="555-100-1000", is_active=True),
        User(name="Dispatcher User", email="dispatcher@aivodrive.com", hashed_password=password_hash,
             role=UserRole.DISPATCHER, phone="555-200-2000", is_active=True),
    ]
    for i in range(1, DRIVER_ACCOUNTS + 1):
        users.append(User(
            name=f"Driver {i}", email=f"driver{i}@aivodrive.com", hashed_password=password_hash,
            role=UserRole.DRIVER, phone=f"555-300-{3000 + i}", is_active=True,
        ))
    return users


def _vehicles(now: datetime) -> List[Vehicle]:
    return [
        Vehicle(
            make=make, model=model, year=year, license_plate=plate, status=status,
            fuel_type=fuel_type, fuel_capacity=capacity, mileage=mileage, vin_number=vin,
            last_service_date=now - timedelta(days=service_age),
            registration_expiry=now + timedelta(days=20 + 60 * index),
            insurance_expiry=now + timedelta(days=45 + 60 * index),
            notes=notes,
        )
        for index, (make, model, year, plate, status, fuel_type, capacity, mileage, vin, service_age, notes)
        in enumerate(VEHICLES)
    ]


def _drivers(driver_users: List[User], vehicles: List[Vehicle], now: datetime) -> List[Driver]:
    """
    The first three drivers get the first three active vehicles. Driver 1
    is on a trip and the last driver is off duty.
    """
    active = [vehicle for vehicle in vehicles if vehicle.status == VehicleStatus.ACTIVE]
    drivers = []
    for i, user in enumerate(driver_users):
        status = DriverStatus.AVAILABLE
        if i == 0:
            status = DriverStatus.ON_TRIP
        elif i == len(driver_users) - 1:
            status = DriverStatus.OFF_DUTY

        driver = Driver(
            user_id=user.id,
            license_number=f"DL-{100000 + i}",
            license_expiry=now + timedelta(days=40 + 90 * i),
            status=status,
            total_trips=0,
            total_distance=0,
            performance_rating=round(4.0 + 0.2 * (i % 5), 1),
            address=f"{1000 + i} Main Street, City, State, 10000",
            emergency_contact={
                "name": f"Emergency Contact {i + 1}",
                "phone": f"+1987654321{i}",
                "relationship": "Spouse" if i % 2 == 0 else "Parent",
            },
            hire_date=now - timedelta(days=365 * (i + 1)),
            driving_experience=3 + i,
            notes=f"Driver {i + 1} notes",
        )
        if i < 3 and i < len(active):
            driver.assigned_vehicle_id = active[i].id
            active[i].current_driver_id = user.id
        drivers.append(driver)
    return drivers


def _trip(
    vehicle: Vehicle, driver: Driver, index: int, status: TripStatus,
    start: datetime, created_by: int, distance: Optional[float] = None
) -> Trip:
    origin, origin_point = LOCATIONS[index % len(LOCATIONS)]
    destination, destination_point = LOCATIONS[(index + 3) % len(LOCATIONS)]
    estimated = 20 + 7 * (index % 6)
    trip = Trip(
        vehicle_id=vehicle.id,
        driver_id=driver.id,
        origin_address=origin, origin_lng=origin_point[0], origin_lat=origin_point[1],
        destination_address=destination, destination_lng=destination_point[0], destination_lat=destination_point[1],
        start_time=start,
        estimated_distance=estimated,
        status=status,
        purpose=PURPOSES[index % len(PURPOSES)],
        created_by=created_by,
    )
    if status == TripStatus.COMPLETED:
        trip.actual_distance = distance if distance is not None else estimated + index % 4
        trip.end_time = start + timedelta(hours=1 + index % 5)
    return trip


def _trips(vehicles: List[Vehicle], drivers: List[Driver], dispatcher: User, now: datetime) -> List[Trip]:
    """
    Completed trips over the last month credit their drivers; driver 1 has
    one trip running for longer than the delay threshold.
    """
    active = [vehicle for vehicle in vehicles if vehicle.status == VehicleStatus.ACTIVE]
    working = [driver for driver in drivers if driver.status != DriverStatus.OFF_DUTY]
    trips = []

    for i in range(12):
        driver = working[i % len(working)]
        trip = _trip(active[i % len(active)], driver, i, TripStatus.COMPLETED,
                     now - timedelta(days=1 + 2 * i, hours=i % 7), dispatcher.id)
        driver.total_trips += 1
        driver.total_distance += trip.actual_distance
        trips.append(trip)

    trips.append(_trip(active[0], drivers[0], 12, TripStatus.IN_PROGRESS, now - timedelta(hours=4), dispatcher.id))

    for i in range(4):
        driver = working[1 + i % (len(working) - 1)]
        trips.append(_trip(active[(i + 1) % len(active)], driver, 13 + i, TripStatus.SCHEDULED,
                           now + timedelta(days=1 + i, hours=2), dispatcher.id))

    trips.append(_trip(active[2], working[-1], 17, TripStatus.CANCELLED, now - timedelta(days=5), dispatcher.id))
    return trips


def _maintenance(vehicles: List[Vehicle], admin: User, now: datetime) -> List[Maintenance]:
    records = []
    for i, vehicle in enumerate(vehicles):
        records.append(Maintenance(
            vehicle_id=vehicle.id,
            maintenance_type=MAINTENANCE_TYPES[i % len(MAINTENANCE_TYPES)],
            description=MAINTENANCE_DESCRIPTIONS[i % len(MAINTENANCE_DESCRIPTIONS)],
            date_scheduled=vehicle.last_service_date - timedelta(days=1),
            date_completed=vehicle.last_service_date,
            status=MaintenanceStatus.COMPLETED,
            cost=120 + 35 * i,
            service_provider=SERVICE_PROVIDERS[i % len(SERVICE_PROVIDERS)],
            odometer=vehicle.mileage - 500,
            created_by=admin.id,
        ))

        if vehicle.status == VehicleStatus.MAINTENANCE:
            records.append(Maintenance(
                vehicle_id=vehicle.id,
                maintenance_type="repair",
                description=MAINTENANCE_DESCRIPTIONS[1],
                date_scheduled=now - timedelta(days=2),
                status=MaintenanceStatus.IN_PROGRESS,
                cost=850,
                service_provider=SERVICE_PROVIDERS[1],
                odometer=vehicle.mileage,
                created_by=admin.id,
            ))

    active = [vehicle for vehicle in vehicles if vehicle.status == VehicleStatus.ACTIVE]
    for i, vehicle in enumerate(active[:3]):
        records.append(Maintenance(
            vehicle_id=vehicle.id,
            maintenance_type="routine",
            description=MAINTENANCE_DESCRIPTIONS[(i + 2) % len(MAINTENANCE_DESCRIPTIONS)],
            date_scheduled=now + timedelta(days=5 + 7 * i),
            status=MaintenanceStatus.SCHEDULED,
            cost=150,
            service_provider=SERVICE_PROVIDERS[i % len(SERVICE_PROVIDERS)],
            created_by=admin.id,
        ))

    records.append(Maintenance(
        vehicle_id=active[-1].id,
        maintenance_type="inspection",
        description="Annual safety inspection",
        date_scheduled=now - timedelta(days=3),
        status=MaintenanceStatus.SCHEDULED,
        cost=90,
        service_provider=SERVICE_PROVIDERS[0],
        created_by=admin.id,
    ))
    return records


def _fuel_records(vehicles: List[Vehicle], drivers_by_user: Dict[int, Driver], dispatcher: User,
                  now: datetime) -> List[FuelRecord]:
    """Three fills per fuelled vehicle, ending at its current mileage."""
    records = []
    for v, vehicle in enumerate(vehicles):
        if vehicle.fuel_type == FuelType.ELECTRIC or vehicle.status == VehicleStatus.INACTIVE:
            continue
        driver = drivers_by_user.get(vehicle.current_driver_id)
        odometer = vehicle.mileage - 3 * 450
        for i in range(3):
            previous = odometer
            odometer += 450
            amount = round(30 + 4 * ((v + i) % 5), 1)
            price = round(1.45 + 0.05 * ((v + 2 * i) % 4), 2)
            records.append(FuelRecord(
                vehicle_id=vehicle.id,
                driver_id=driver.id if driver else None,
                date=now - timedelta(days=21 - 7 * i, hours=v),
                fuel_amount=amount,
                fuel_price=price,
                total_cost=round(amount * price, 2),
                odometer=odometer,
                previous_odometer=previous,
                fuel_station=FUEL_STATIONS[(v + i) % len(FUEL_STATIONS)],
                created_by=dispatcher.id,
            ))
    return records


async def seed_database(db: AsyncSession, now: Optional[datetime] = None) -> SeedSummary:
    """
    Replace the database contents with the demo fleet and regenerate alerts.
    """
    now = now or datetime.utcnow()
    await clear_database(db)

    users = _users(get_password_hash(SEED_PASSWORD))
    db.add_all(users)
    await db.flush()
    admin, dispatcher, driver_users = users[0], users[1], users[2:]

    vehicles = _vehicles(now)
    db.add_all(vehicles)
    await db.flush()

    drivers = _drivers(driver_users, vehicles, now)
    db.add_all(drivers)
    await db.flush()

    trips = _trips(vehicles, drivers, dispatcher, now)
    maintenance = _maintenance(vehicles, admin, now)
    fuel_records = _fuel_records(vehicles, {d.user_id: d for d in drivers}, dispatcher, now)
    db.add_all([*trips, *maintenance, *fuel_records])
    await db.commit()

    alerts = await regenerate_alerts(db, now)

    summary = SeedSummary(
        users=len(users),
        vehicles=len(vehicles),
        drivers=len(drivers),
        trips=len(trips),
        maintenance=len(maintenance),
        fuel_records=len(fuel_records),
        alerts=len(alerts),
    )
    logger.info("Database seeded: %s", summary)
    return summary
