"""
Trip API endpoints.

Drivers only ever see and update their own trips; admins and dispatchers
plan and manage all of them.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.core.guards import require_admin, require_any_role, require_staff
from backend.app.core.responses import paginated_response, success_response
from backend.app.db.session import get_db
from backend.app.models.enums import TripStatus
from backend.app.models.trip import Trip
from backend.app.schemas.common import UTCDatetime
from backend.app.schemas.trip import TripCreate, TripResponse, TripUpdate
from backend.app.services import trips as trip_service
from backend.app.services.queries import get_or_404

router = APIRouter(prefix="/trips", tags=["Trips"])


@router.get("")
async def list_trips(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    status_filter: Optional[TripStatus] = Query(None, alias="status"),
    vehicle_id: Optional[int] = Query(None, alias="vehicleId"),
    driver_id: Optional[int] = Query(None, alias="driverId"),
    start_date: Optional[UTCDatetime] = Query(None, alias="startDate"),
    end_date: Optional[UTCDatetime] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None, description="Origin, destination or purpose"),
    current_user: CurrentUser = Depends(require_any_role),
    db: AsyncSession = Depends(get_db)
):
    trips, total = await trip_service.list_trips(
        db, current_user, page, limit,
        status=status_filter,
        vehicle_id=vehicle_id,
        driver_id=driver_id,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    return paginated_response(
        [TripResponse.from_model(t) for t in trips], page, limit, total,
        "Trips retrieved successfully"
    )


@router.get("/stats")
async def get_trip_stats(
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    stats = await trip_service.trip_stats(db)
    return success_response("Trip statistics retrieved successfully", {"stats": stats})


@router.get("/{trip_id}")
async def get_trip(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: CurrentUser = Depends(require_any_role),
    db: AsyncSession = Depends(get_db)
):
    trip = await trip_service.get_trip_for_user(db, trip_id, current_user)
    return success_response("Trip retrieved successfully", {"trip": TripResponse.from_model(trip)})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_trip(
    payload: TripCreate,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """
    Plan a trip (admin, dispatcher).

    The vehicle must be active and the driver available; a trip created as
    ``in_progress`` puts the driver on the trip immediately.
    """
    trip = await trip_service.create_trip(db, payload, current_user)
    return success_response(
        "Trip created successfully",
        {"trip": TripResponse.from_model(trip)},
        status.HTTP_201_CREATED
    )


@router.put("/{trip_id}")
async def update_trip(
    payload: TripUpdate,
    trip_id: int = Path(..., description="Trip ID"),
    current_user: CurrentUser = Depends(require_any_role),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a trip.

    Status changes update the driver in the same transaction: starting a
    trip puts the driver on it, completing or cancelling releases them and
    completion credits the trip and its distance.
    """
    trip = await get_or_404(db, Trip, trip_id, "Trip")
    trip = await trip_service.update_trip(db, trip, payload, current_user)
    return success_response("Trip updated successfully", {"trip": TripResponse.from_model(trip)})


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await trip_service.delete_trip(db, trip_id)
    return success_response("Trip deleted successfully")
