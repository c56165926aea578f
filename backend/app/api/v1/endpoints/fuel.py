"""
Fuel record API endpoints.

Any authenticated user can read fuel records; admins and dispatchers record
fills and see the statistics, and only admins delete.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.core.guards import require_admin, require_any_role, require_staff
from backend.app.core.responses import paginated_response, success_response
from backend.app.db.session import get_db
from backend.app.models.fuel import FuelRecord
from backend.app.schemas.common import UTCDatetime
from backend.app.schemas.fuel import FuelRecordCreate, FuelRecordResponse, FuelRecordUpdate
from backend.app.services import fuel as fuel_service
from backend.app.services.queries import get_or_404

router = APIRouter(prefix="/fuel", tags=["Fuel"])

SortField = Literal["date", "fuelAmount", "fuelPrice", "totalCost", "odometer"]


@router.get("")
async def list_fuel_records(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    vehicle_id: Optional[int] = Query(None, alias="vehicleId"),
    driver_id: Optional[int] = Query(None, alias="driverId"),
    start_date: Optional[UTCDatetime] = Query(None, alias="startDate"),
    end_date: Optional[UTCDatetime] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None, description="Fuel station or notes"),
    sort_by: SortField = Query("date", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    current_user: CurrentUser = Depends(require_any_role),
    db: AsyncSession = Depends(get_db)
):
    records, total = await fuel_service.list_fuel_records(
        db, page, limit,
        vehicle_id=vehicle_id,
        driver_id=driver_id,
        start_date=start_date,
        end_date=end_date,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated_response(
        [FuelRecordResponse.model_validate(r) for r in records], page, limit, total,
        "Fuel records retrieved successfully"
    )


@router.get("/stats")
async def get_fuel_stats(
    vehicle_id: Optional[int] = Query(None, alias="vehicleId"),
    start_date: Optional[UTCDatetime] = Query(None, alias="startDate"),
    end_date: Optional[UTCDatetime] = Query(None, alias="endDate"),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    stats = await fuel_service.fuel_stats(db, vehicle_id, start_date, end_date)
    return success_response("Fuel statistics retrieved successfully", {"stats": stats})


@router.get("/efficiency-report")
async def get_efficiency_report(
    vehicle_id: Optional[int] = Query(None, alias="vehicleId"),
    start_date: Optional[UTCDatetime] = Query(None, alias="startDate"),
    end_date: Optional[UTCDatetime] = Query(None, alias="endDate"),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Per-vehicle distance per unit of fuel, most efficient first."""
    report = await fuel_service.efficiency_report(db, vehicle_id, start_date, end_date)
    return success_response("Fuel efficiency report generated successfully", {"report": report})


@router.get("/{record_id}")
async def get_fuel_record(
    record_id: int = Path(..., description="Fuel record ID"),
    current_user: CurrentUser = Depends(require_any_role),
    db: AsyncSession = Depends(get_db)
):
    record = await get_or_404(db, FuelRecord, record_id, "Fuel record")
    return success_response(
        "Fuel record retrieved successfully",
        {"fuelRecord": FuelRecordResponse.model_validate(record)}
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_fuel_record(
    payload: FuelRecordCreate,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a fill.

    ``totalCost`` defaults to ``fuelAmount * fuelPrice``; an odometer reading
    above the vehicle's mileage advances the mileage.
    """
    record = await fuel_service.create_fuel_record(db, payload, current_user)
    return success_response(
        "Fuel record created successfully",
        {"fuelRecord": FuelRecordResponse.model_validate(record)},
        status.HTTP_201_CREATED
    )


@router.put("/{record_id}")
async def update_fuel_record(
    payload: FuelRecordUpdate,
    record_id: int = Path(..., description="Fuel record ID"),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    record = await fuel_service.update_fuel_record(db, record_id, payload)
    return success_response(
        "Fuel record updated successfully",
        {"fuelRecord": FuelRecordResponse.model_validate(record)}
    )


@router.delete("/{record_id}")
async def delete_fuel_record(
    record_id: int = Path(..., description="Fuel record ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await fuel_service.delete_fuel_record(db, record_id)
    return success_response("Fuel record deleted successfully")
