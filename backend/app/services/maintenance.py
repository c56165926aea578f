"""
Maintenance service.

Applies the maintenance status-sync rule to the vehicle table. A vehicle
only leaves MAINTENANCE when no other record for it is still in progress.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.core.exceptions import BusinessRuleError
from backend.app.models.enums import MaintenanceStatus, VehicleStatus
from backend.app.models.maintenance import Maintenance
from backend.app.models.vehicle import Vehicle
from backend.app.schemas.maintenance import MaintenanceCreate, MaintenanceStats, MaintenanceUpdate
from backend.app.services.queries import count_by, count_where, get_or_404, like, paginate
from backend.app.services.status_sync import (
    VehicleEffect, maintenance_delete_effect, maintenance_transition_effect
)

logger = logging.getLogger(__name__)


async def apply_vehicle_effect(
    db: AsyncSession,
    vehicle_id: int,
    effect: Optional[VehicleEffect],
    record_id: Optional[int] = None
) -> None:
    """
    Write a maintenance effect onto its vehicle.

    Moving the vehicle back to ACTIVE is skipped while another record
    (other than ``record_id``) still has it in the workshop.
    """
    if effect is None:
        return

    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")

    if effect.last_service_date is not None:
        vehicle.last_service_date = effect.last_service_date

    if effect.status == VehicleStatus.ACTIVE and vehicle.status == VehicleStatus.MAINTENANCE:
        criteria = [Maintenance.vehicle_id == vehicle_id, Maintenance.status == MaintenanceStatus.IN_PROGRESS]
        if record_id is not None:
            criteria.append(Maintenance.id != record_id)
        if await count_where(db, Maintenance, *criteria):
            logger.info("Vehicle %s stays in maintenance: other work is in progress", vehicle_id)
            return

    vehicle.status = effect.status
    logger.info("Vehicle %s status set to %s", vehicle_id, effect.status.value)


async def list_maintenance(
    db: AsyncSession,
    page: int,
    limit: int,
    status: Optional[MaintenanceStatus] = None,
    vehicle_id: Optional[int] = None,
    maintenance_type: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None
) -> Tuple[List[Maintenance], int]:
    stmt = select(Maintenance)
    if status:
        stmt = stmt.where(Maintenance.status == status)
    if vehicle_id:
        stmt = stmt.where(Maintenance.vehicle_id == vehicle_id)
    if maintenance_type:
        stmt = stmt.where(Maintenance.maintenance_type == maintenance_type)
    if start_date:
        stmt = stmt.where(Maintenance.date_scheduled >= start_date)
    if end_date:
        stmt = stmt.where(Maintenance.date_scheduled <= end_date)
    if search:
        pattern = like(search)
        stmt = stmt.where(or_(
            Maintenance.description.ilike(pattern),
            Maintenance.service_provider.ilike(pattern),
        ))
    stmt = stmt.order_by(desc(Maintenance.date_scheduled), desc(Maintenance.id))
    return await paginate(db, stmt, page, limit)


async def create_maintenance(db: AsyncSession, payload: MaintenanceCreate, current_user: CurrentUser) -> Maintenance:
    if payload.missing_required():
        raise BusinessRuleError("Please provide all required fields")

    vehicle = await get_or_404(db, Vehicle, payload.vehicle_id, "Vehicle")

    record = Maintenance(**payload.model_dump(), created_by=current_user.id)
    db.add(record)
    await db.flush()

    effect = maintenance_transition_effect(None, payload.status, payload.date_completed, datetime.utcnow())
    await apply_vehicle_effect(db, vehicle.id, effect, record_id=record.id)
    if payload.status == MaintenanceStatus.COMPLETED and record.date_completed is None:
        record.date_completed = effect.last_service_date

    await db.commit()
    await db.refresh(record)

    logger.info("Maintenance %s created for vehicle %s (%s)", record.id, vehicle.id, record.status.value)
    return record


async def update_maintenance(db: AsyncSession, record_id: int, payload: MaintenanceUpdate) -> Maintenance:
    record = await get_or_404(db, Maintenance, record_id, "Maintenance record")
    changes = payload.model_dump(exclude_unset=True)

    original_status = previous_status = record.status
    previous_vehicle_id = record.vehicle_id
    new_status = changes.get("status") or previous_status
    new_vehicle_id = changes.get("vehicle_id") or previous_vehicle_id
    now = datetime.utcnow()

    if new_vehicle_id != previous_vehicle_id:
        await get_or_404(db, Vehicle, new_vehicle_id, "Vehicle")
        # The old vehicle no longer hosts this job.
        await apply_vehicle_effect(
            db, previous_vehicle_id, maintenance_delete_effect(previous_status), record_id=record.id
        )
        previous_status = None if previous_status == MaintenanceStatus.IN_PROGRESS else previous_status

    date_completed = changes.get("date_completed") or record.date_completed
    effect = maintenance_transition_effect(previous_status, new_status, date_completed, now)
    await apply_vehicle_effect(db, new_vehicle_id, effect, record_id=record.id)

    for field, value in changes.items():
        if value is None and not Maintenance.__table__.c[field].nullable:
            continue
        setattr(record, field, value)

    if new_status == MaintenanceStatus.COMPLETED and record.date_completed is None:
        record.date_completed = effect.last_service_date if effect else now

    await db.commit()
    await db.refresh(record)

    if record.status != original_status:
        logger.info("Maintenance %s moved from %s to %s", record.id, original_status.value, record.status.value)
    return record


async def delete_maintenance(db: AsyncSession, record_id: int) -> None:
    record = await get_or_404(db, Maintenance, record_id, "Maintenance record")
    await apply_vehicle_effect(db, record.vehicle_id, maintenance_delete_effect(record.status), record_id=record.id)
    await db.delete(record)
    await db.commit()
    logger.info("Maintenance %s deleted", record_id)


async def maintenance_stats(db: AsyncSession, now: Optional[datetime] = None) -> MaintenanceStats:
    now = now or datetime.utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = today - timedelta(days=today.weekday())

    cost_row = (await db.execute(
        select(func.coalesce(func.sum(Maintenance.cost), 0), func.count(Maintenance.id))
        .where(Maintenance.status == MaintenanceStatus.COMPLETED)
    )).one()
    total_cost, completed = float(cost_row[0] or 0), cost_row[1] or 0

    return MaintenanceStats(
        total=await count_where(db, Maintenance),
        by_status=await count_by(db, Maintenance.status),
        by_type=await count_by(db, Maintenance.maintenance_type),
        this_week=await count_where(
            db, Maintenance,
            Maintenance.date_scheduled >= week_start,
            Maintenance.date_scheduled < week_start + timedelta(days=7),
        ),
        overdue=await count_where(
            db, Maintenance,
            Maintenance.status == MaintenanceStatus.SCHEDULED,
            Maintenance.date_scheduled < now,
        ),
        cost={
            "total": total_cost,
            "average": total_cost / completed if completed else 0,
            "completed_maintenance": completed,
        },
    )
