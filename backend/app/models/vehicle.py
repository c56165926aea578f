"""
Vehicle database model.
"""

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import VehicleStatus, FuelType


class Vehicle(Base):
    """
    Fleet vehicle.

    ``current_driver_id`` points at the *user* account of the driver whose
    profile has this vehicle as ``assigned_vehicle_id``; the two columns are
    only ever changed together by the assignment service.
    """
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    license_plate = Column(String(20), unique=True, index=True, nullable=False)

    status = Column(Enum(VehicleStatus), default=VehicleStatus.ACTIVE, nullable=False, index=True)
    last_service_date = Column(DateTime, nullable=True)
    current_driver_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    fuel_type = Column(Enum(FuelType), default=FuelType.GASOLINE, nullable=False)
    fuel_capacity = Column(Float, default=0, nullable=False)
    mileage = Column(Float, default=0, nullable=False)
    vin_number = Column(String(50), nullable=True)
    registration_expiry = Column(DateTime, nullable=True)
    insurance_expiry = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, plate='{self.license_plate}', status='{self.status.value}')>"
