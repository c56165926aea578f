"""
Trip database model.

A trip moves one vehicle, driven by one driver, from an origin to a
destination. Its status drives the driver's availability.
"""

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import TripStatus


class Trip(Base):
    """
    Trip model.

    Origin and destination are stored flattened (address + lat/lng) and
    exposed as nested location objects by the API schemas.
    """
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True)

    origin_address = Column(String(255), nullable=False)
    origin_lat = Column(Float, nullable=True)
    origin_lng = Column(Float, nullable=True)
    destination_address = Column(String(255), nullable=False)
    destination_lat = Column(Float, nullable=True)
    destination_lng = Column(Float, nullable=True)

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=True)
    estimated_distance = Column(Float, default=0, nullable=False)
    actual_distance = Column(Float, default=0, nullable=False)

    status = Column(Enum(TripStatus), default=TripStatus.SCHEDULED, nullable=False, index=True)
    purpose = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    start_odometer = Column(Float, nullable=True)
    end_odometer = Column(Float, nullable=True)
    fuel_consumed = Column(Float, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Trip(id={self.id}, driver_id={self.driver_id}, status='{self.status.value}')>"
