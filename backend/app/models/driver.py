"""
Driver profile database model.
"""

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, Text, JSON
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import DriverStatus


class Driver(Base):
    """
    Driver profile.

    Name, email and phone live on the linked ``User``; this table carries the
    licence, assignment and performance counters.
    """
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True, index=True)

    license_number = Column(String(50), unique=True, index=True, nullable=False)
    license_expiry = Column(DateTime, nullable=False)
    assigned_vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(Enum(DriverStatus), default=DriverStatus.AVAILABLE, nullable=False, index=True)

    # Accumulated on trip completion, never decremented.
    total_trips = Column(Integer, default=0, nullable=False)
    total_distance = Column(Float, default=0, nullable=False)
    performance_rating = Column(Float, default=0, nullable=False)

    address = Column(String(255), nullable=True)
    emergency_contact = Column(JSON, nullable=True)
    hire_date = Column(DateTime, server_default=func.now(), nullable=True)
    driving_experience = Column(Integer, default=0, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, license='{self.license_number}', status='{self.status.value}')>"
