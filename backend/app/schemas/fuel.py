"""
Fuel record Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from backend.app.schemas.common import CamelModel, StrictCamelModel, UTCDatetime
from backend.app.schemas.vehicle import VehicleSummary


class FuelRecordCreate(StrictCamelModel):
    """
    Schema for recording a refuel.

    ``totalCost`` may be omitted, in which case it is ``fuelAmount * fuelPrice``.
    """
    vehicle_id: int
    driver_id: Optional[int] = None
    date: Optional[UTCDatetime] = None
    fuel_amount: float = Field(..., ge=0.1, description="Amount of fuel added")
    fuel_price: float = Field(..., ge=0.1, description="Price per unit of fuel")
    total_cost: Optional[float] = Field(None, ge=0)
    odometer: float = Field(..., ge=0, description="Odometer reading at the fill")
    previous_odometer: Optional[float] = Field(None, ge=0)
    fuel_station: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class FuelRecordUpdate(StrictCamelModel):
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    date: Optional[UTCDatetime] = None
    fuel_amount: Optional[float] = Field(None, ge=0.1)
    fuel_price: Optional[float] = Field(None, ge=0.1)
    total_cost: Optional[float] = Field(None, ge=0)
    odometer: Optional[float] = Field(None, ge=0)
    previous_odometer: Optional[float] = Field(None, ge=0)
    fuel_station: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class FuelRecordResponse(CamelModel):
    id: int
    vehicle_id: int
    driver_id: Optional[int] = None
    date: datetime
    fuel_amount: float
    fuel_price: float
    total_cost: float
    odometer: float
    previous_odometer: Optional[float] = None
    fuel_station: Optional[str] = None
    notes: Optional[str] = None
    fuel_efficiency: Optional[float] = None
    cost_per_km: Optional[float] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FuelStats(CamelModel):
    total_records: int
    total_fuel_cost: float
    total_fuel_amount: float
    average_fuel_price: float
    average_fuel_efficiency: Optional[float] = None


class VehicleEfficiency(CamelModel):
    """One row of the fuel efficiency report."""
    vehicle: VehicleSummary
    total_distance: float
    total_fuel: float
    total_cost: float
    records: int
    avg_distance: float
    efficiency: float
    cost_per_km: float
