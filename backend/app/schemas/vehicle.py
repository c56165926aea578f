"""
Vehicle Pydantic schemas.

Defines request and response models for vehicle management.
"""

from datetime import datetime
from typing import Optional, Dict

from pydantic import Field, field_validator

from backend.app.models.enums import VehicleStatus, FuelType
from backend.app.schemas.common import CamelModel, StrictCamelModel, UTCDatetime

_MAX_YEAR = datetime.utcnow().year + 1


def _normalise_plate(value: Optional[str]) -> Optional[str]:
    return value.strip().upper() if value is not None else value


class VehicleCreate(StrictCamelModel):
    """
    Schema for registering a new vehicle.

    ``currentDriver`` is not accepted here: it is maintained by the driver
    assignment endpoints so both sides of the link stay in step.
    """
    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1900, le=_MAX_YEAR)
    license_plate: str = Field(..., min_length=1, max_length=20, description="Unique plate, stored upper-case")
    status: VehicleStatus = VehicleStatus.ACTIVE
    last_service_date: Optional[UTCDatetime] = None
    fuel_type: FuelType = FuelType.GASOLINE
    fuel_capacity: float = Field(0, ge=0)
    mileage: float = Field(0, ge=0)
    vin_number: Optional[str] = Field(None, max_length=50)
    registration_expiry: Optional[UTCDatetime] = None
    insurance_expiry: Optional[UTCDatetime] = None
    notes: Optional[str] = None

    @field_validator("license_plate")
    @classmethod
    def normalise_plate(cls, value: Optional[str]) -> Optional[str]:
        return _normalise_plate(value)


class VehicleUpdate(StrictCamelModel):
    """Schema for updating an existing vehicle; only sent fields change."""
    make: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=_MAX_YEAR)
    license_plate: Optional[str] = Field(None, min_length=1, max_length=20)
    status: Optional[VehicleStatus] = None
    last_service_date: Optional[UTCDatetime] = None
    fuel_type: Optional[FuelType] = None
    fuel_capacity: Optional[float] = Field(None, ge=0)
    mileage: Optional[float] = Field(None, ge=0)
    vin_number: Optional[str] = Field(None, max_length=50)
    registration_expiry: Optional[UTCDatetime] = None
    insurance_expiry: Optional[UTCDatetime] = None
    notes: Optional[str] = None

    @field_validator("license_plate")
    @classmethod
    def normalise_plate(cls, value: Optional[str]) -> Optional[str]:
        return _normalise_plate(value)


class VehicleResponse(CamelModel):
    """Schema for vehicle response."""
    id: int
    make: str
    model: str
    year: int
    license_plate: str
    status: VehicleStatus
    last_service_date: Optional[datetime] = None
    current_driver_id: Optional[int] = None
    fuel_type: FuelType
    fuel_capacity: float
    mileage: float
    vin_number: Optional[str] = None
    registration_expiry: Optional[datetime] = None
    insurance_expiry: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VehicleStats(CamelModel):
    total: int
    by_status: Dict[str, int]
    maintenance_due: int
    expiring_registration: int
    expiring_insurance: int


class VehicleSummary(CamelModel):
    """Short vehicle reference embedded in reports."""
    id: int
    make: str
    model: str
    license_plate: str
