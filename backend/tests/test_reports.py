"""
Integration tests for the admin reports.
"""

from datetime import datetime, timedelta

import pytest

from backend.app.models.enums import DriverStatus, MaintenanceStatus, TripStatus, VehicleStatus
from backend.app.models.maintenance import Maintenance
from backend.app.models.trip import Trip


@pytest.fixture
def make_trip(db_session):
    async def _make_trip(vehicle, driver, status=TripStatus.COMPLETED, start=None, distance=0):
        trip = Trip(
            vehicle_id=vehicle.id,
            driver_id=driver.id,
            origin_address="Depot",
            destination_address="Harbour",
            start_time=start or datetime.utcnow(),
            status=status,
            estimated_distance=distance,
            actual_distance=distance,
        )
        db_session.add(trip)
        await db_session.commit()
        return trip
    return _make_trip


@pytest.fixture
def make_maintenance(db_session):
    async def _make_maintenance(vehicle, scheduled, status=MaintenanceStatus.SCHEDULED):
        record = Maintenance(
            vehicle_id=vehicle.id,
            description="Inspection",
            date_scheduled=scheduled,
            status=status,
            cost=100,
        )
        db_session.add(record)
        await db_session.commit()
        return record
    return _make_maintenance


@pytest.mark.asyncio
async def test_reports_are_admin_only(client, dispatcher_headers):
    for path in ("daily-summary", "maintenance-due", "fleet-performance"):
        response = await client.get(f"/api/reports/{path}", headers=dispatcher_headers)
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_daily_summary(client, admin_headers, make_vehicle, make_driver, make_trip, make_maintenance):
    today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    vehicle = await make_vehicle()
    await make_vehicle(status=VehicleStatus.INACTIVE)
    driver, _ = await make_driver()
    await make_driver(status=DriverStatus.OFF_DUTY)

    await make_trip(vehicle, driver, start=today + timedelta(minutes=5))
    await make_trip(vehicle, driver, status=TripStatus.SCHEDULED, start=today + timedelta(minutes=10))
    await make_trip(vehicle, driver, start=today - timedelta(days=2))
    await make_maintenance(vehicle, today + timedelta(minutes=30))

    response = await client.get("/api/reports/daily-summary", headers=admin_headers)
    assert response.status_code == 200
    summary = response.json()["data"]["dailySummary"]

    assert summary["trips"]["total"] == 2
    assert summary["trips"]["byStatus"] == {"completed": 1, "scheduled": 1}
    assert summary["vehicles"]["total"] == 2
    assert summary["vehicles"]["active"] == 1
    assert summary["vehicles"]["inactive"] == 1
    assert summary["drivers"]["available"] == 1
    assert summary["drivers"]["offDuty"] == 1
    assert summary["maintenance"]["scheduled"] == 1


@pytest.mark.asyncio
async def test_maintenance_due(client, admin_headers, make_vehicle, make_maintenance):
    now = datetime.utcnow()
    fresh = await make_vehicle()
    stale = await make_vehicle(last_service_date=now - timedelta(days=200))
    await make_vehicle(last_service_date=None)

    await make_maintenance(fresh, now + timedelta(days=7))
    await make_maintenance(fresh, now + timedelta(days=60))
    await make_maintenance(stale, now - timedelta(days=1))
    await make_maintenance(stale, now - timedelta(days=10), status=MaintenanceStatus.COMPLETED)

    response = await client.get("/api/reports/maintenance-due", headers=admin_headers)
    assert response.status_code == 200
    report = response.json()["data"]["maintenanceDueReport"]

    assert report["summary"] == {
        "vehiclesDueCount": 2,
        "upcomingMaintenanceCount": 1,
        "overdueMaintenanceCount": 1,
    }
    assert stale.id in [v["id"] for v in report["vehiclesDueForService"]]
    assert report["overdueMaintenance"][0]["vehicleId"] == stale.id


@pytest.mark.asyncio
async def test_fleet_performance(client, admin_headers, make_vehicle, make_driver, make_trip):
    now = datetime.utcnow()
    van, car = await make_vehicle(model="Transit"), await make_vehicle(model="Civic")
    busy, _ = await make_driver()
    quiet, _ = await make_driver()

    await make_trip(van, busy, start=now - timedelta(days=1), distance=30)
    await make_trip(van, busy, start=now - timedelta(days=2), distance=50)
    await make_trip(car, quiet, start=now - timedelta(days=3), distance=20)
    await make_trip(car, quiet, status=TripStatus.CANCELLED, start=now - timedelta(days=3))
    await make_trip(car, quiet, start=now - timedelta(days=45), distance=500)

    response = await client.get("/api/reports/fleet-performance", headers=admin_headers)
    assert response.status_code == 200
    report = response.json()["data"]["fleetPerformanceReport"]

    assert report["tripStats"]["totalTrips"] == 3
    assert report["tripStats"]["totalDistance"] == 100
    assert report["tripStats"]["avgDistance"] == pytest.approx(33.33, abs=0.01)

    top = report["topDrivers"]
    assert [row["driver"]["id"] for row in top] == [busy.id, quiet.id]
    assert top[0]["tripCount"] == 2
    assert top[0]["totalDistance"] == 80
    assert top[0]["avgDistance"] == 40
    assert top[0]["driver"]["licenseNumber"] == busy.license_number

    # Utilisation counts every trip in the period, whatever its status.
    utilization = {row["vehicle"]["id"]: row["tripCount"] for row in report["vehicleUtilization"]}
    assert utilization == {van.id: 2, car.id: 2}
