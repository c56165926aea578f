"""
Fuel record service.

Keeps the vehicle odometer in step with recorded fills and produces the
fuel statistics and per-vehicle efficiency report.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.models.driver import Driver
from backend.app.models.fuel import FuelRecord
from backend.app.models.vehicle import Vehicle
from backend.app.schemas.fuel import (
    FuelRecordCreate, FuelRecordUpdate, FuelStats, VehicleEfficiency
)
from backend.app.schemas.vehicle import VehicleSummary
from backend.app.services.queries import count_where, get_or_404, like, paginate

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "date": FuelRecord.date,
    "fuelAmount": FuelRecord.fuel_amount,
    "fuelPrice": FuelRecord.fuel_price,
    "totalCost": FuelRecord.total_cost,
    "odometer": FuelRecord.odometer,
}


def _date_criteria(start_date: Optional[datetime], end_date: Optional[datetime]) -> list:
    criteria = []
    if start_date:
        criteria.append(FuelRecord.date >= start_date)
    if end_date:
        criteria.append(FuelRecord.date <= end_date)
    return criteria


def _advance_mileage(vehicle: Vehicle, odometer: Optional[float]) -> None:
    """A fill reading past the current mileage moves the vehicle's mileage forward."""
    if odometer is not None and odometer > (vehicle.mileage or 0):
        logger.info("Vehicle %s mileage advanced from %s to %s", vehicle.id, vehicle.mileage, odometer)
        vehicle.mileage = odometer


async def list_fuel_records(
    db: AsyncSession,
    page: int,
    limit: int,
    vehicle_id: Optional[int] = None,
    driver_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
    sort_by: str = "date",
    sort_order: str = "desc"
) -> Tuple[List[FuelRecord], int]:
    stmt = select(FuelRecord)
    if vehicle_id:
        stmt = stmt.where(FuelRecord.vehicle_id == vehicle_id)
    if driver_id:
        stmt = stmt.where(FuelRecord.driver_id == driver_id)
    criteria = _date_criteria(start_date, end_date)
    if criteria:
        stmt = stmt.where(*criteria)
    if search:
        pattern = like(search)
        stmt = stmt.where(or_(FuelRecord.fuel_station.ilike(pattern), FuelRecord.notes.ilike(pattern)))

    column = SORTABLE_COLUMNS.get(sort_by, FuelRecord.date)
    direction = asc if sort_order == "asc" else desc
    stmt = stmt.order_by(direction(column), direction(FuelRecord.id))
    return await paginate(db, stmt, page, limit)


async def create_fuel_record(db: AsyncSession, payload: FuelRecordCreate, current_user: CurrentUser) -> FuelRecord:
    """
    Record a fill.

    ``total_cost`` defaults to amount × price and ``previous_odometer`` to the
    vehicle's mileage before this fill.
    """
    vehicle = await get_or_404(db, Vehicle, payload.vehicle_id, "Vehicle")
    if payload.driver_id is not None:
        await get_or_404(db, Driver, payload.driver_id, "Driver")

    data = payload.model_dump(exclude_none=True)
    if payload.total_cost is None:
        data["total_cost"] = payload.fuel_amount * payload.fuel_price
    if payload.previous_odometer is None and vehicle.mileage:
        data["previous_odometer"] = vehicle.mileage

    record = FuelRecord(**data, created_by=current_user.id)
    db.add(record)
    _advance_mileage(vehicle, payload.odometer)

    await db.commit()
    await db.refresh(record)

    logger.info("Fuel record %s created for vehicle %s", record.id, vehicle.id)
    return record


async def update_fuel_record(db: AsyncSession, record_id: int, payload: FuelRecordUpdate) -> FuelRecord:
    record = await get_or_404(db, FuelRecord, record_id, "Fuel record")
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("vehicle_id") and changes["vehicle_id"] != record.vehicle_id:
        await get_or_404(db, Vehicle, changes["vehicle_id"], "Vehicle")
    if changes.get("driver_id") is not None:
        await get_or_404(db, Driver, changes["driver_id"], "Driver")

    for field, value in changes.items():
        if value is None and not FuelRecord.__table__.c[field].nullable:
            continue
        setattr(record, field, value)

    if changes.get("total_cost") is None and ("fuel_amount" in changes or "fuel_price" in changes):
        record.total_cost = record.fuel_amount * record.fuel_price

    if changes.get("odometer") is not None:
        vehicle = await get_or_404(db, Vehicle, record.vehicle_id, "Vehicle")
        _advance_mileage(vehicle, changes["odometer"])

    await db.commit()
    await db.refresh(record)
    return record


async def delete_fuel_record(db: AsyncSession, record_id: int) -> None:
    record = await get_or_404(db, FuelRecord, record_id, "Fuel record")
    await db.delete(record)
    await db.commit()
    logger.info("Fuel record %s deleted", record_id)


async def fuel_stats(
    db: AsyncSession,
    vehicle_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None
) -> FuelStats:
    criteria = _date_criteria(start_date, end_date)
    if vehicle_id:
        criteria.append(FuelRecord.vehicle_id == vehicle_id)

    totals = select(
        func.coalesce(func.sum(FuelRecord.total_cost), 0),
        func.coalesce(func.sum(FuelRecord.fuel_amount), 0),
    )
    if criteria:
        totals = totals.where(*criteria)
    total_cost, total_amount = (await db.execute(totals)).one()

    distance = select(
        func.sum(FuelRecord.odometer - FuelRecord.previous_odometer),
        func.sum(FuelRecord.fuel_amount),
    ).where(FuelRecord.previous_odometer.is_not(None), FuelRecord.odometer > FuelRecord.previous_odometer, *criteria)
    total_distance, measured_fuel = (await db.execute(distance)).one()

    total_cost, total_amount = float(total_cost or 0), float(total_amount or 0)
    return FuelStats(
        total_records=await count_where(db, FuelRecord, *criteria),
        total_fuel_cost=round(total_cost, 2),
        total_fuel_amount=round(total_amount, 2),
        average_fuel_price=round(total_cost / total_amount, 2) if total_amount else 0,
        average_fuel_efficiency=round(total_distance / measured_fuel, 2) if measured_fuel else None,
    )


async def efficiency_report(
    db: AsyncSession,
    vehicle_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None
) -> List[VehicleEfficiency]:
    """
    Per-vehicle efficiency over the fills that have a previous odometer reading,
    most efficient vehicle first.
    """
    distance = FuelRecord.odometer - FuelRecord.previous_odometer
    stmt = (
        select(
            Vehicle,
            func.sum(distance),
            func.sum(FuelRecord.fuel_amount),
            func.sum(FuelRecord.total_cost),
            func.count(FuelRecord.id),
            func.avg(distance),
        )
        .select_from(FuelRecord)
        .join(Vehicle, FuelRecord.vehicle_id == Vehicle.id)
        .where(FuelRecord.previous_odometer.is_not(None), *_date_criteria(start_date, end_date))
        .group_by(Vehicle.id)
    )
    if vehicle_id:
        stmt = stmt.where(FuelRecord.vehicle_id == vehicle_id)

    report = []
    for vehicle, total_distance, total_fuel, total_cost, records, avg_distance in (await db.execute(stmt)).all():
        total_distance = float(total_distance or 0)
        total_fuel = float(total_fuel or 0)
        total_cost = float(total_cost or 0)
        report.append(VehicleEfficiency(
            vehicle=VehicleSummary.model_validate(vehicle),
            total_distance=round(total_distance, 2),
            total_fuel=round(total_fuel, 2),
            total_cost=round(total_cost, 2),
            records=records,
            avg_distance=round(float(avg_distance or 0), 2),
            efficiency=round(total_distance / total_fuel, 2) if total_fuel else 0,
            cost_per_km=round(total_cost / total_distance, 2) if total_distance > 0 else 0,
        ))

    report.sort(key=lambda row: row.efficiency, reverse=True)
    return report
