"""
Fuel record database model.
"""

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base


class FuelRecord(Base):
    """
    A single refuelling of a vehicle.

    ``total_cost`` is always stored; when the client omits it the service
    derives it as ``fuel_amount * fuel_price``.
    """
    __tablename__ = "fuel_records"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id", ondelete="SET NULL"), nullable=True, index=True)

    date = Column(DateTime, server_default=func.now(), nullable=False, index=True)
    fuel_amount = Column(Float, nullable=False)
    fuel_price = Column(Float, nullable=False)
    total_cost = Column(Float, nullable=False)
    odometer = Column(Float, nullable=False)
    previous_odometer = Column(Float, nullable=True)
    fuel_station = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def distance(self):
        if self.previous_odometer is None or self.odometer is None:
            return None
        travelled = self.odometer - self.previous_odometer
        return travelled if travelled > 0 else None

    @property
    def fuel_efficiency(self):
        """Distance per unit of fuel since the previous fill, or None."""
        if self.distance is None or not self.fuel_amount:
            return None
        return round(self.distance / self.fuel_amount, 2)

    @property
    def cost_per_km(self):
        if self.distance is None:
            return None
        return round(self.total_cost / self.distance, 2)

    def __repr__(self):
        return f"<FuelRecord(id={self.id}, vehicle_id={self.vehicle_id}, total_cost={self.total_cost})>"
