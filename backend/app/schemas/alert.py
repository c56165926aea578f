"""
Alert Pydantic schemas.

``relatedTo`` is a tagged union: the ``kind`` field selects which entity the
``id`` refers to.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from backend.app.models.enums import AlertType, AlertPriority, RelatedKind
from backend.app.schemas.common import CamelModel, StrictCamelModel, UTCDatetime


class VehicleRef(CamelModel):
    kind: Literal["vehicle"] = "vehicle"
    id: int


class DriverRef(CamelModel):
    kind: Literal["driver"] = "driver"
    id: int


class TripRef(CamelModel):
    kind: Literal["trip"] = "trip"
    id: int


class MaintenanceRef(CamelModel):
    kind: Literal["maintenance"] = "maintenance"
    id: int


class UserRef(CamelModel):
    kind: Literal["user"] = "user"
    id: int


RelatedRef = Annotated[
    Union[VehicleRef, DriverRef, TripRef, MaintenanceRef, UserRef],
    Field(discriminator="kind"),
]

_REF_BY_KIND = {
    RelatedKind.VEHICLE: VehicleRef,
    RelatedKind.DRIVER: DriverRef,
    RelatedKind.TRIP: TripRef,
    RelatedKind.MAINTENANCE: MaintenanceRef,
    RelatedKind.USER: UserRef,
}


def related_ref(kind: RelatedKind, related_id: int):
    """Build the typed reference for a stored ``(kind, id)`` pair."""
    return _REF_BY_KIND[kind](id=related_id)


class AlertCreate(StrictCamelModel):
    type: AlertType
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    priority: AlertPriority = AlertPriority.MEDIUM
    related_to: RelatedRef
    is_read: bool = False
    expires_at: Optional[UTCDatetime] = None


class AlertUpdate(StrictCamelModel):
    type: Optional[AlertType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    message: Optional[str] = Field(None, min_length=1)
    priority: Optional[AlertPriority] = None
    related_to: Optional[RelatedRef] = None
    is_read: Optional[bool] = None
    expires_at: Optional[UTCDatetime] = None


class AlertResponse(CamelModel):
    id: int
    type: AlertType
    title: str
    message: str
    priority: AlertPriority
    is_read: bool
    related_to: RelatedRef
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, alert) -> "AlertResponse":
        return cls(
            id=alert.id,
            type=alert.type,
            title=alert.title,
            message=alert.message,
            priority=alert.priority,
            is_read=alert.is_read,
            related_to=related_ref(alert.related_kind, alert.related_id),
            expires_at=alert.expires_at,
            created_at=alert.created_at,
            updated_at=alert.updated_at,
        )


class UnreadAlertCount(CamelModel):
    total: int
    critical: int
    high: int
