"""
API Router.

Aggregates all endpoint routers; mounted under ``settings.api_prefix``.
"""

from fastapi import APIRouter

from backend.app.api.v1.endpoints import (
    alerts, auth, drivers, fuel, maintenance, reports, trips, vehicles
)

router = APIRouter()

router.include_router(auth.router)
router.include_router(vehicles.router)
router.include_router(drivers.router)
router.include_router(trips.router)
router.include_router(maintenance.router)
router.include_router(fuel.router)
router.include_router(alerts.router)
router.include_router(reports.router)
