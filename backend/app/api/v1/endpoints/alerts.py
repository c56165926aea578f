"""
Alert API endpoints (admin only).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import CurrentUser
from backend.app.core.guards import require_admin
from backend.app.core.responses import paginated_response, success_response
from backend.app.db.session import get_db
from backend.app.models.alert import Alert
from backend.app.models.enums import AlertPriority, AlertType
from backend.app.schemas.alert import AlertCreate, AlertResponse, AlertUpdate
from backend.app.services import alerts as alert_service
from backend.app.services.alert_generation import regenerate_alerts
from backend.app.services.queries import get_or_404

router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("")
async def list_alerts(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    alert_type: Optional[AlertType] = Query(None, alias="type"),
    priority: Optional[AlertPriority] = Query(None),
    is_read: Optional[bool] = Query(None, alias="isRead"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    alerts, total = await alert_service.list_alerts(db, page, limit, alert_type, priority, is_read)
    return paginated_response(
        [AlertResponse.from_model(a) for a in alerts], page, limit, total,
        "Alerts retrieved successfully"
    )


@router.get("/unread/count")
async def get_unread_count(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    counts = await alert_service.unread_count(db)
    return success_response("Unread alerts count retrieved successfully", {"count": counts})


@router.post("/generate")
async def generate_alerts(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Clear all alerts and rebuild them from the current fleet state."""
    alerts = await regenerate_alerts(db)
    return success_response(
        "Alerts generated successfully",
        {"generated": len(alerts)}
    )


@router.get("/{alert_id}")
async def get_alert(
    alert_id: int = Path(..., description="Alert ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    alert = await get_or_404(db, Alert, alert_id, "Alert")
    return success_response("Alert retrieved successfully", {"alert": AlertResponse.from_model(alert)})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_alert(
    payload: AlertCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create an alert.

    ``relatedTo`` is ``{"kind": ..., "id": ...}``; the referenced entity must exist.
    """
    alert = await alert_service.create_alert(db, payload)
    return success_response(
        "Alert created successfully",
        {"alert": AlertResponse.from_model(alert)},
        status.HTTP_201_CREATED
    )


@router.put("/{alert_id}/read")
async def mark_alert_read(
    alert_id: int = Path(..., description="Alert ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    alert = await alert_service.mark_alert_read(db, alert_id)
    return success_response("Alert marked as read", {"alert": AlertResponse.from_model(alert)})


@router.put("/{alert_id}")
async def update_alert(
    payload: AlertUpdate,
    alert_id: int = Path(..., description="Alert ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    alert = await alert_service.update_alert(db, alert_id, payload)
    return success_response("Alert updated successfully", {"alert": AlertResponse.from_model(alert)})


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: int = Path(..., description="Alert ID"),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await alert_service.delete_alert(db, alert_id)
    return success_response("Alert deleted successfully")
