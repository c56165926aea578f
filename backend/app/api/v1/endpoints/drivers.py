"""
Driver API endpoints (admin only).

Each driver is returned merged with the name, email and phone of its user
account.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.core.guards import require_admin
from backend.app.core.responses import paginated_response, success_response
from backend.app.db.session import get_db
from backend.app.models.enums import DriverStatus
from backend.app.schemas.driver import DriverCreate, DriverResponse, DriverUpdate
from backend.app.services import drivers as driver_service

router = APIRouter(prefix="/drivers", tags=["Drivers"])


@router.get("")
async def list_drivers(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    status_filter: Optional[DriverStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Name, email or licence number"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    rows, total = await driver_service.list_drivers(db, page, limit, status_filter, search)
    return paginated_response(
        [DriverResponse.from_entities(driver, user) for driver, user in rows], page, limit, total,
        "Drivers retrieved successfully"
    )


@router.get("/stats")
async def get_driver_stats(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    stats = await driver_service.driver_stats(db)
    return success_response("Driver statistics retrieved successfully", {"stats": stats})


@router.get("/{driver_id}")
async def get_driver(
    driver_id: int = Path(..., description="Driver ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    driver, user = await driver_service.get_driver_with_user(db, driver_id)
    return success_response("Driver retrieved successfully", {"driver": DriverResponse.from_entities(driver, user)})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_driver(
    payload: DriverCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a driver together with its user account.

    When ``assignedVehicleId`` is given the vehicle's current driver is set
    in the same transaction.
    """
    driver, user = await driver_service.create_driver(db, payload)
    return success_response(
        "Driver created successfully",
        {"driver": DriverResponse.from_entities(driver, user)},
        status.HTTP_201_CREATED
    )


@router.put("/{driver_id}")
async def update_driver(
    payload: DriverUpdate,
    driver_id: int = Path(..., description="Driver ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    driver, user = await driver_service.update_driver(db, driver_id, payload)
    return success_response("Driver updated successfully", {"driver": DriverResponse.from_entities(driver, user)})


@router.delete("/{driver_id}")
async def delete_driver(
    driver_id: int = Path(..., description="Driver ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await driver_service.delete_driver(db, driver_id)
    return success_response("Driver deleted successfully")
