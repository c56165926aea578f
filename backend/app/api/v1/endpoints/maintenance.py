"""
Maintenance API endpoints (admin only).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.core.guards import require_admin
from backend.app.core.responses import paginated_response, success_response
from backend.app.db.session import get_db
from backend.app.models.enums import MaintenanceStatus
from backend.app.models.maintenance import Maintenance
from backend.app.schemas.common import UTCDatetime
from backend.app.schemas.maintenance import MaintenanceCreate, MaintenanceResponse, MaintenanceUpdate
from backend.app.services import maintenance as maintenance_service
from backend.app.services.queries import get_or_404

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.get("")
async def list_maintenance(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    status_filter: Optional[MaintenanceStatus] = Query(None, alias="status"),
    vehicle_id: Optional[int] = Query(None, alias="vehicleId"),
    maintenance_type: Optional[str] = Query(None, alias="maintenanceType"),
    start_date: Optional[UTCDatetime] = Query(None, alias="startDate"),
    end_date: Optional[UTCDatetime] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None, description="Description or service provider"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    records, total = await maintenance_service.list_maintenance(
        db, page, limit,
        status=status_filter,
        vehicle_id=vehicle_id,
        maintenance_type=maintenance_type,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    return paginated_response(
        [MaintenanceResponse.model_validate(r) for r in records], page, limit, total,
        "Maintenance records retrieved successfully"
    )


@router.get("/stats")
async def get_maintenance_stats(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    stats = await maintenance_service.maintenance_stats(db)
    return success_response("Maintenance statistics retrieved successfully", {"stats": stats})


@router.get("/{record_id}")
async def get_maintenance(
    record_id: int = Path(..., description="Maintenance record ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    record = await get_or_404(db, Maintenance, record_id, "Maintenance record")
    return success_response(
        "Maintenance record retrieved successfully",
        {"maintenance": MaintenanceResponse.model_validate(record)}
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_maintenance(
    payload: MaintenanceCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Schedule or record maintenance.

    A record created as ``in_progress`` puts its vehicle into maintenance;
    one created as ``completed`` stamps the vehicle's last service date.
    """
    record = await maintenance_service.create_maintenance(db, payload, current_user)
    return success_response(
        "Maintenance record created successfully",
        {"maintenance": MaintenanceResponse.model_validate(record)},
        status.HTTP_201_CREATED
    )


@router.put("/{record_id}")
async def update_maintenance(
    payload: MaintenanceUpdate,
    record_id: int = Path(..., description="Maintenance record ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    record = await maintenance_service.update_maintenance(db, record_id, payload)
    return success_response(
        "Maintenance record updated successfully",
        {"maintenance": MaintenanceResponse.model_validate(record)}
    )


@router.delete("/{record_id}")
async def delete_maintenance(
    record_id: int = Path(..., description="Maintenance record ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await maintenance_service.delete_maintenance(db, record_id)
    return success_response("Maintenance record deleted successfully")
