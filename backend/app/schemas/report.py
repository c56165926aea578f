"""
Report Pydantic schemas.
"""

from datetime import datetime
from typing import Dict, List, Optional

from backend.app.schemas.common import CamelModel
from backend.app.schemas.maintenance import MaintenanceResponse
from backend.app.schemas.vehicle import VehicleResponse, VehicleSummary


class TripDaySummary(CamelModel):
    total: int
    by_status: Dict[str, int]


class VehicleDaySummary(CamelModel):
    total: int
    by_status: Dict[str, int]
    active: int
    maintenance: int
    inactive: int


class DriverDaySummary(CamelModel):
    total: int
    by_status: Dict[str, int]
    available: int
    on_trip: int
    off_duty: int
    inactive: int


class MaintenanceDaySummary(CamelModel):
    total: int
    by_status: Dict[str, int]
    scheduled: int
    in_progress: int
    completed: int


class DailySummary(CamelModel):
    """Fleet snapshot for the current day."""
    date: datetime
    trips: TripDaySummary
    vehicles: VehicleDaySummary
    drivers: DriverDaySummary
    maintenance: MaintenanceDaySummary


class MaintenanceDueSummary(CamelModel):
    vehicles_due_count: int
    upcoming_maintenance_count: int
    overdue_maintenance_count: int


class MaintenanceDueReport(CamelModel):
    vehicles_due_for_service: List[VehicleResponse]
    upcoming_maintenance: List[MaintenanceResponse]
    overdue_maintenance: List[MaintenanceResponse]
    summary: MaintenanceDueSummary


class DateRange(CamelModel):
    start: datetime
    end: datetime


class PerformanceTripStats(CamelModel):
    total_trips: int
    total_distance: float
    avg_distance: float


class DriverSummary(CamelModel):
    id: int
    name: Optional[str] = None
    license_number: str


class TopDriver(CamelModel):
    driver: DriverSummary
    trip_count: int
    total_distance: float
    avg_distance: float


class VehicleUtilization(CamelModel):
    vehicle: VehicleSummary
    trip_count: int
    total_distance: float


class FleetPerformanceReport(CamelModel):
    date_range: DateRange
    trip_stats: PerformanceTripStats
    top_drivers: List[TopDriver]
    vehicle_utilization: List[VehicleUtilization]
