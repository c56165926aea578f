"""
Maintenance Pydantic schemas.
"""

from datetime import datetime
from typing import Optional, Dict

from pydantic import Field

from backend.app.models.enums import MaintenanceStatus
from backend.app.schemas.common import CamelModel, StrictCamelModel, UTCDatetime


class MaintenanceCreate(StrictCamelModel):
    """Schema for scheduling or recording maintenance on a vehicle."""
    vehicle_id: Optional[int] = None
    date_scheduled: Optional[UTCDatetime] = None
    description: Optional[str] = Field(None, max_length=2000)
    maintenance_type: str = Field("routine", min_length=1, max_length=50)
    date_completed: Optional[UTCDatetime] = None
    status: MaintenanceStatus = MaintenanceStatus.SCHEDULED
    cost: float = Field(0, ge=0)
    service_provider: Optional[str] = Field(None, max_length=255)
    odometer: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    def missing_required(self) -> bool:
        return self.vehicle_id is None or self.date_scheduled is None or not self.description


class MaintenanceUpdate(StrictCamelModel):
    vehicle_id: Optional[int] = None
    date_scheduled: Optional[UTCDatetime] = None
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    maintenance_type: Optional[str] = Field(None, min_length=1, max_length=50)
    date_completed: Optional[UTCDatetime] = None
    status: Optional[MaintenanceStatus] = None
    cost: Optional[float] = Field(None, ge=0)
    service_provider: Optional[str] = Field(None, max_length=255)
    odometer: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class MaintenanceResponse(CamelModel):
    id: int
    vehicle_id: int
    maintenance_type: str
    description: str
    date_scheduled: datetime
    date_completed: Optional[datetime] = None
    status: MaintenanceStatus
    cost: float
    service_provider: Optional[str] = None
    odometer: Optional[float] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MaintenanceCostStats(CamelModel):
    total: float
    average: float
    completed_maintenance: int


class MaintenanceStats(CamelModel):
    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    this_week: int
    overdue: int
    cost: MaintenanceCostStats
