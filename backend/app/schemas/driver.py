"""
Driver Pydantic schemas.

A driver is created together with its user account, so the create schema
carries both the login fields (name, email, password, phone) and the
profile fields.
"""

from datetime import datetime
from typing import Optional, Dict

from pydantic import EmailStr, Field

from backend.app.models.enums import DriverStatus
from backend.app.schemas.common import CamelModel, StrictCamelModel, UTCDatetime


class EmergencyContact(CamelModel):
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    relationship: Optional[str] = Field(None, max_length=50)


class DriverCreate(StrictCamelModel):
    """Schema for creating a driver and its user account."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr = Field(..., description="Login email, unique across users")
    password: str = Field("password123", min_length=6, description="Initial password for the driver account")
    phone: Optional[str] = Field(None, max_length=30)

    license_number: str = Field(..., min_length=1, max_length=50)
    license_expiry: UTCDatetime
    assigned_vehicle_id: Optional[int] = Field(None, description="Vehicle to assign to the driver")
    status: DriverStatus = DriverStatus.AVAILABLE
    address: Optional[str] = Field(None, max_length=255)
    emergency_contact: Optional[EmergencyContact] = None
    hire_date: Optional[UTCDatetime] = None
    driving_experience: int = Field(0, ge=0)
    performance_rating: float = Field(0, ge=0, le=5)
    notes: Optional[str] = None


class DriverUpdate(StrictCamelModel):
    """
    Schema for updating a driver.

    Sending ``assignedVehicleId: null`` explicitly unassigns the vehicle;
    omitting the field leaves the assignment untouched.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)

    license_number: Optional[str] = Field(None, min_length=1, max_length=50)
    license_expiry: Optional[UTCDatetime] = None
    assigned_vehicle_id: Optional[int] = None
    status: Optional[DriverStatus] = None
    address: Optional[str] = Field(None, max_length=255)
    emergency_contact: Optional[EmergencyContact] = None
    hire_date: Optional[UTCDatetime] = None
    driving_experience: Optional[int] = Field(None, ge=0)
    performance_rating: Optional[float] = Field(None, ge=0, le=5)
    notes: Optional[str] = None


class DriverResponse(CamelModel):
    """Driver profile merged with the contact fields of its user account."""
    id: int
    user_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    license_number: str
    license_expiry: datetime
    assigned_vehicle_id: Optional[int] = None
    status: DriverStatus
    total_trips: int
    total_distance: float
    performance_rating: float
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    hire_date: Optional[datetime] = None
    driving_experience: int = 0
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entities(cls, driver, user=None) -> "DriverResponse":
        response = cls.model_validate(driver)
        if user is not None:
            response.name = user.name
            response.email = user.email
            response.phone = user.phone
        return response


class DriverStats(CamelModel):
    total: int
    by_status: Dict[str, int]
    expiring_licenses: int
    assigned: int
    unassigned: int
