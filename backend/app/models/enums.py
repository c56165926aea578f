"""
Enumerations shared by models, schemas and services.

Every enum is a ``str`` subclass so values serialize directly to JSON.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Full access, including reports, drivers and maintenance
        DISPATCHER: Plans trips and records fuel
        DRIVER: Executes their own trips
    """
    ADMIN = "admin"
    DISPATCHER = "dispatcher"
    DRIVER = "driver"


class VehicleStatus(str, enum.Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"
    ASSIGNED = "assigned"
    AVAILABLE = "available"


class FuelType(str, enum.Enum):
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"
    OTHER = "other"


class DriverStatus(str, enum.Enum):
    """
    Driver availability.

    ON_TRIP is owned by the trip status rules: a driver holds it exactly
    while one of their trips is IN_PROGRESS.
    """
    AVAILABLE = "available"
    ON_TRIP = "on_trip"
    ON_LEAVE = "on_leave"
    OFF_DUTY = "off_duty"
    INACTIVE = "inactive"


class TripStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MaintenanceStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AlertType(str, enum.Enum):
    MAINTENANCE_DUE = "maintenance_due"
    VEHICLE_ISSUE = "vehicle_issue"
    DRIVER_LICENSE_EXPIRY = "driver_license_expiry"
    VEHICLE_REGISTRATION_EXPIRY = "vehicle_registration_expiry"
    VEHICLE_INSURANCE_EXPIRY = "vehicle_insurance_expiry"
    TRIP_DELAY = "trip_delay"
    SYSTEM = "system"


class AlertPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RelatedKind(str, enum.Enum):
    """Kind tag of the entity an alert points at."""
    VEHICLE = "vehicle"
    DRIVER = "driver"
    TRIP = "trip"
    MAINTENANCE = "maintenance"
    USER = "user"
