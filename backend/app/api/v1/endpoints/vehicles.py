"""
Vehicle API endpoints.

Any authenticated user can read vehicles; changes and statistics are admin-only.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.core.guards import require_admin, require_any_role
from backend.app.core.responses import paginated_response, success_response
from backend.app.db.session import get_db
from backend.app.models.enums import VehicleStatus
from backend.app.models.vehicle import Vehicle
from backend.app.schemas.vehicle import VehicleCreate, VehicleResponse, VehicleUpdate
from backend.app.services import vehicles as vehicle_service
from backend.app.services.queries import get_or_404

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.get("")
async def list_vehicles(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    status_filter: Optional[VehicleStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Make, model or licence plate"),
    current_user: CurrentUser = Depends(require_any_role),
    db: AsyncSession = Depends(get_db)
):
    vehicles, total = await vehicle_service.list_vehicles(db, page, limit, status_filter, search)
    return paginated_response(
        [VehicleResponse.model_validate(v) for v in vehicles], page, limit, total,
        "Vehicles retrieved successfully"
    )


@router.get("/stats")
async def get_vehicle_stats(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    stats = await vehicle_service.vehicle_stats(db)
    return success_response("Vehicle statistics retrieved successfully", {"stats": stats})


@router.get("/{vehicle_id}")
async def get_vehicle(
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: CurrentUser = Depends(require_any_role),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")
    return success_response("Vehicle retrieved successfully", {"vehicle": VehicleResponse.model_validate(vehicle)})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    payload: VehicleCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await vehicle_service.create_vehicle(db, payload)
    return success_response(
        "Vehicle created successfully",
        {"vehicle": VehicleResponse.model_validate(vehicle)},
        status.HTTP_201_CREATED
    )


@router.put("/{vehicle_id}")
async def update_vehicle(
    payload: VehicleUpdate,
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")
    vehicle = await vehicle_service.update_vehicle(db, vehicle, payload)
    return success_response("Vehicle updated successfully", {"vehicle": VehicleResponse.model_validate(vehicle)})


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a vehicle and its history.

    Refused while a driver is assigned or a trip is in progress.
    """
    await vehicle_service.delete_vehicle(db, vehicle_id)
    return success_response("Vehicle deleted successfully")
