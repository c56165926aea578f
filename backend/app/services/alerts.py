"""
Alert service.

``RELATED_MODELS`` is the single table that maps an alert's ``relatedTo.kind``
to the model it points at; adding a kind without an entry here fails fast
at import.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.alert import Alert
from backend.app.models.driver import Driver
from backend.app.models.enums import AlertPriority, AlertType, RelatedKind
from backend.app.models.maintenance import Maintenance
from backend.app.models.trip import Trip
from backend.app.models.user import User
from backend.app.models.vehicle import Vehicle
from backend.app.schemas.alert import AlertCreate, AlertUpdate, UnreadAlertCount
from backend.app.services.queries import count_where, get_or_404, paginate

logger = logging.getLogger(__name__)

RELATED_MODELS = {
    RelatedKind.VEHICLE: (Vehicle, "Vehicle"),
    RelatedKind.DRIVER: (Driver, "Driver"),
    RelatedKind.TRIP: (Trip, "Trip"),
    RelatedKind.MAINTENANCE: (Maintenance, "Maintenance record"),
    RelatedKind.USER: (User, "User"),
}

_unmapped = set(RelatedKind) - set(RELATED_MODELS)
if _unmapped:
    raise RuntimeError(f"Related kinds without a model: {sorted(kind.value for kind in _unmapped)}")


async def resolve_related(db: AsyncSession, kind: RelatedKind, related_id: int):
    """Load the entity an alert refers to, or raise a 404 naming it."""
    model, resource = RELATED_MODELS[RelatedKind(kind)]
    return await get_or_404(db, model, related_id, resource)


async def list_alerts(
    db: AsyncSession,
    page: int,
    limit: int,
    type: Optional[AlertType] = None,
    priority: Optional[AlertPriority] = None,
    is_read: Optional[bool] = None
) -> Tuple[List[Alert], int]:
    stmt = select(Alert)
    if type:
        stmt = stmt.where(Alert.type == type)
    if priority:
        stmt = stmt.where(Alert.priority == priority)
    if is_read is not None:
        stmt = stmt.where(Alert.is_read == is_read)
    stmt = stmt.order_by(desc(Alert.created_at), desc(Alert.id))
    return await paginate(db, stmt, page, limit)


async def create_alert(db: AsyncSession, payload: AlertCreate, commit: bool = True) -> Alert:
    """
    Persist an alert after checking its related entity exists.

    Pass ``commit=False`` to leave the transaction open for batch inserts.
    """
    kind = RelatedKind(payload.related_to.kind)
    await resolve_related(db, kind, payload.related_to.id)

    alert = Alert(
        type=payload.type,
        title=payload.title,
        message=payload.message,
        priority=payload.priority,
        is_read=payload.is_read,
        related_kind=kind,
        related_id=payload.related_to.id,
        expires_at=payload.expires_at,
    )
    db.add(alert)

    if commit:
        await db.commit()
        await db.refresh(alert)
        logger.info("Alert %s created (%s)", alert.id, alert.type.value)
    return alert


async def update_alert(db: AsyncSession, alert_id: int, payload: AlertUpdate) -> Alert:
    alert = await get_or_404(db, Alert, alert_id, "Alert")
    changes = payload.model_dump(exclude_unset=True, exclude={"related_to"})

    if payload.related_to is not None:
        kind = RelatedKind(payload.related_to.kind)
        await resolve_related(db, kind, payload.related_to.id)
        alert.related_kind = kind
        alert.related_id = payload.related_to.id

    for field, value in changes.items():
        if value is None and not Alert.__table__.c[field].nullable:
            continue
        setattr(alert, field, value)

    await db.commit()
    await db.refresh(alert)
    return alert


async def mark_alert_read(db: AsyncSession, alert_id: int) -> Alert:
    alert = await get_or_404(db, Alert, alert_id, "Alert")
    alert.is_read = True
    await db.commit()
    await db.refresh(alert)
    return alert


async def delete_alert(db: AsyncSession, alert_id: int) -> None:
    alert = await get_or_404(db, Alert, alert_id, "Alert")
    await db.delete(alert)
    await db.commit()
    logger.info("Alert %s deleted", alert_id)


async def unread_count(db: AsyncSession) -> UnreadAlertCount:
    unread = Alert.is_read.is_(False)
    return UnreadAlertCount(
        total=await count_where(db, Alert, unread),
        critical=await count_where(db, Alert, unread, Alert.priority == AlertPriority.CRITICAL),
        high=await count_where(db, Alert, unread, Alert.priority == AlertPriority.HIGH),
    )
