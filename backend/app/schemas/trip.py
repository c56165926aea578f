"""
Trip Pydantic schemas.

Defines request and response models for trip planning and execution.
"""

from datetime import datetime
from typing import Optional, Dict, Tuple

from pydantic import Field, field_validator

from backend.app.models.enums import TripStatus
from backend.app.schemas.common import CamelModel, StrictCamelModel, UTCDatetime

# Fields a driver may send when updating one of their own trips.
DRIVER_UPDATABLE_FIELDS = frozenset({"status", "actual_distance", "notes"})


class Location(CamelModel):
    """An address with an optional ``[latitude, longitude]`` pair."""
    address: str = Field(..., min_length=1, max_length=255)
    coordinates: Optional[Tuple[float, float]] = Field(None, description="[latitude, longitude]")

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, value):
        if value is None:
            return value
        lat, lng = value
        if not -90 <= lat <= 90 or not -180 <= lng <= 180:
            raise ValueError("coordinates must be [latitude, longitude] within valid ranges")
        return value


class TripCreate(StrictCamelModel):
    """
    Schema for creating a trip.

    Required fields are typed as optional so that a missing one yields the
    single "Please provide all required fields" message.
    """
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    origin: Optional[Location] = None
    destination: Optional[Location] = None
    start_time: Optional[UTCDatetime] = None
    end_time: Optional[UTCDatetime] = None
    estimated_distance: float = Field(0, ge=0)
    actual_distance: float = Field(0, ge=0)
    status: TripStatus = TripStatus.SCHEDULED
    purpose: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    start_odometer: Optional[float] = Field(None, ge=0)
    end_odometer: Optional[float] = Field(None, ge=0)
    fuel_consumed: Optional[float] = Field(None, ge=0)

    def missing_required(self) -> bool:
        return any(
            value is None
            for value in (self.vehicle_id, self.driver_id, self.origin, self.destination, self.start_time)
        )


class TripUpdate(StrictCamelModel):
    """Schema for updating a trip; only sent fields change."""
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    origin: Optional[Location] = None
    destination: Optional[Location] = None
    start_time: Optional[UTCDatetime] = None
    end_time: Optional[UTCDatetime] = None
    estimated_distance: Optional[float] = Field(None, ge=0)
    actual_distance: Optional[float] = Field(None, ge=0)
    status: Optional[TripStatus] = None
    purpose: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    start_odometer: Optional[float] = Field(None, ge=0)
    end_odometer: Optional[float] = Field(None, ge=0)
    fuel_consumed: Optional[float] = Field(None, ge=0)


class TripResponse(CamelModel):
    """Schema for trip response."""
    id: int
    vehicle_id: int
    driver_id: int
    origin: Location
    destination: Location
    start_time: datetime
    end_time: Optional[datetime] = None
    estimated_distance: float
    actual_distance: float
    status: TripStatus
    purpose: Optional[str] = None
    notes: Optional[str] = None
    start_odometer: Optional[float] = None
    end_odometer: Optional[float] = None
    fuel_consumed: Optional[float] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, trip) -> "TripResponse":
        def location(address, lat, lng):
            coordinates = (lat, lng) if lat is not None and lng is not None else None
            return Location(address=address, coordinates=coordinates)

        return cls(
            id=trip.id,
            vehicle_id=trip.vehicle_id,
            driver_id=trip.driver_id,
            origin=location(trip.origin_address, trip.origin_lat, trip.origin_lng),
            destination=location(trip.destination_address, trip.destination_lat, trip.destination_lng),
            start_time=trip.start_time,
            end_time=trip.end_time,
            estimated_distance=trip.estimated_distance,
            actual_distance=trip.actual_distance,
            status=trip.status,
            purpose=trip.purpose,
            notes=trip.notes,
            start_odometer=trip.start_odometer,
            end_odometer=trip.end_odometer,
            fuel_consumed=trip.fuel_consumed,
            created_by=trip.created_by,
            created_at=trip.created_at,
            updated_at=trip.updated_at,
        )


class TripDistanceStats(CamelModel):
    total: float
    average: float
    completed_trips: int


class TripStats(CamelModel):
    total: int
    by_status: Dict[str, int]
    today: int
    this_week: int
    distance: TripDistanceStats
