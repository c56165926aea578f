"""
Maintenance record database model.
"""

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import MaintenanceStatus


class Maintenance(Base):
    """
    Scheduled or performed service on a vehicle.

    While a record is IN_PROGRESS its vehicle is held in the MAINTENANCE
    status; completing it stamps the vehicle's last service date.
    """
    __tablename__ = "maintenance"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)

    maintenance_type = Column(String(50), default="routine", nullable=False, index=True)
    description = Column(Text, nullable=False)
    date_scheduled = Column(DateTime, nullable=False, index=True)
    date_completed = Column(DateTime, nullable=True)
    status = Column(Enum(MaintenanceStatus), default=MaintenanceStatus.SCHEDULED, nullable=False, index=True)

    cost = Column(Float, default=0, nullable=False)
    service_provider = Column(String(255), nullable=True)
    odometer = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Maintenance(id={self.id}, vehicle_id={self.vehicle_id}, status='{self.status.value}')>"
