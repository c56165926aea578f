"""
Status-sync rules.

Pure functions that map a status transition on one entity to the updates
required on related entities. They never touch the database; the trip and
maintenance services apply the returned effects inside one transaction.

Trip → Driver:
    → IN_PROGRESS   claim the driver (AVAILABLE → ON_TRIP)
    → COMPLETED     release the driver, total_trips += 1,
                    total_distance += actual distance
    → CANCELLED     release the driver
    IN_PROGRESS → SCHEDULED also releases the driver.

Maintenance → Vehicle:
    → IN_PROGRESS                   vehicle goes to MAINTENANCE
    → COMPLETED                     vehicle back to ACTIVE, last service stamped
    IN_PROGRESS → anything else     vehicle back to ACTIVE

A release only ever happens when the trip was IN_PROGRESS, because that is
the only state in which this trip put the driver ON_TRIP.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from backend.app.core.exceptions import BusinessRuleError
from backend.app.models.enums import MaintenanceStatus, TripStatus, VehicleStatus

# The only path a driver may move their own trip along.
DRIVER_TRIP_TRANSITIONS = {
    TripStatus.SCHEDULED: {TripStatus.IN_PROGRESS},
    TripStatus.IN_PROGRESS: {TripStatus.COMPLETED},
}


@dataclass(frozen=True)
class DriverEffect:
    """Updates a trip transition requires on the trip's driver."""
    claim: bool = False
    release: bool = False
    trips_increment: int = 0
    distance_increment: float = 0.0

    @property
    def is_noop(self) -> bool:
        return not (self.claim or self.release or self.trips_increment or self.distance_increment)


@dataclass(frozen=True)
class VehicleEffect:
    """Updates a maintenance transition requires on the serviced vehicle."""
    status: VehicleStatus
    last_service_date: Optional[datetime] = None


def check_driver_transition(current: TripStatus, new: TripStatus) -> None:
    """
    Validate a status change requested by a user with the driver role.

    Raises:
        BusinessRuleError: for anything outside scheduled → in_progress → completed
    """
    if current == new:
        return
    if new not in DRIVER_TRIP_TRANSITIONS.get(current, set()):
        raise BusinessRuleError(
            f"Cannot change trip status from {current.value} to {new.value}",
            details={"from": current.value, "to": new.value}
        )


def trip_transition_effect(
    previous: TripStatus,
    new: TripStatus,
    actual_distance: Optional[float] = None
) -> DriverEffect:
    """
    Compute the driver side effects of moving a trip from ``previous`` to ``new``.

    ``actual_distance`` is the distance to credit on completion; callers pass
    the value from the request or, failing that, the one stored on the trip.
    """
    if previous == new:
        return DriverEffect()

    was_running = previous == TripStatus.IN_PROGRESS

    if new == TripStatus.IN_PROGRESS:
        return DriverEffect(claim=True)

    if new == TripStatus.COMPLETED:
        return DriverEffect(
            release=was_running,
            trips_increment=1,
            distance_increment=float(actual_distance or 0),
        )

    # CANCELLED, or an admin moving a trip back to SCHEDULED
    return DriverEffect(release=was_running)


def maintenance_transition_effect(
    previous: Optional[MaintenanceStatus],
    new: MaintenanceStatus,
    date_completed: Optional[datetime],
    now: datetime
) -> Optional[VehicleEffect]:
    """
    Compute the vehicle side effect of a maintenance status change.

    ``previous`` is None when the record is being created.
    Returns None when the vehicle is unaffected.
    """
    if previous == new:
        return None

    if new == MaintenanceStatus.IN_PROGRESS:
        return VehicleEffect(status=VehicleStatus.MAINTENANCE)

    if new == MaintenanceStatus.COMPLETED:
        return VehicleEffect(status=VehicleStatus.ACTIVE, last_service_date=date_completed or now)

    if previous == MaintenanceStatus.IN_PROGRESS:
        return VehicleEffect(status=VehicleStatus.ACTIVE)

    return None


def maintenance_delete_effect(status: MaintenanceStatus) -> Optional[VehicleEffect]:
    """Deleting a record that holds its vehicle in maintenance frees the vehicle."""
    if status == MaintenanceStatus.IN_PROGRESS:
        return VehicleEffect(status=VehicleStatus.ACTIVE)
    return None
