"""
Report API endpoints (admin only).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.core.guards import require_admin
from backend.app.core.responses import success_response
from backend.app.db.session import get_db
from backend.app.services import reports as report_service

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/daily-summary")
async def get_daily_summary(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Trips and maintenance scheduled today, plus vehicle and driver status counts."""
    summary = await report_service.daily_summary(db)
    return success_response("Daily summary report retrieved successfully", {"dailySummary": summary})


@router.get("/maintenance-due")
async def get_maintenance_due(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    report = await report_service.maintenance_due(db)
    return success_response("Maintenance due report retrieved successfully", {"maintenanceDueReport": report})


@router.get("/fleet-performance")
async def get_fleet_performance(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Completed trips, top drivers and vehicle utilisation over the last 30 days."""
    report = await report_service.fleet_performance(db)
    return success_response(
        "Fleet performance report retrieved successfully",
        {"fleetPerformanceReport": report}
    )
