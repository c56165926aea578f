"""
Integration tests for maintenance records and the vehicle status they drive.
"""

from datetime import datetime, timedelta

import pytest

from backend.app.models.enums import VehicleStatus


def maintenance_payload(vehicle, **overrides):
    payload = {
        "vehicleId": vehicle.id,
        "dateScheduled": (datetime.utcnow() + timedelta(days=2)).isoformat(),
        "description": "Oil change and filter replacement",
        "maintenanceType": "routine",
        "cost": 120,
        "serviceProvider": "QuickLube Express",
    }
    payload.update(overrides)
    return payload


async def vehicle_state(client, headers, vehicle_id):
    response = await client.get(f"/api/vehicles/{vehicle_id}", headers=headers)
    assert response.status_code == 200
    return response.json()["data"]["vehicle"]


@pytest.mark.asyncio
async def test_start_and_complete_maintenance(client, admin_headers, make_vehicle):
    vehicle = await make_vehicle(last_service_date=None)

    response = await client.post("/api/maintenance", json=maintenance_payload(vehicle), headers=admin_headers)
    assert response.status_code == 201
    record = response.json()["data"]["maintenance"]
    assert record["status"] == "scheduled"
    assert (await vehicle_state(client, admin_headers, vehicle.id))["status"] == "active"

    response = await client.put(
        f"/api/maintenance/{record['id']}", json={"status": "in_progress"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert (await vehicle_state(client, admin_headers, vehicle.id))["status"] == "maintenance"

    response = await client.put(
        f"/api/maintenance/{record['id']}", json={"status": "completed"}, headers=admin_headers
    )
    assert response.status_code == 200
    completed = response.json()["data"]["maintenance"]
    assert completed["dateCompleted"] is not None

    state = await vehicle_state(client, admin_headers, vehicle.id)
    assert state["status"] == "active"
    assert state["lastServiceDate"] is not None


@pytest.mark.asyncio
async def test_completion_date_becomes_last_service_date(client, admin_headers, make_vehicle):
    vehicle = await make_vehicle()
    record = (await client.post(
        "/api/maintenance", json=maintenance_payload(vehicle, status="in_progress"), headers=admin_headers
    )).json()["data"]["maintenance"]
    assert (await vehicle_state(client, admin_headers, vehicle.id))["status"] == "maintenance"

    response = await client.put(
        f"/api/maintenance/{record['id']}",
        json={"status": "completed", "dateCompleted": "2026-01-02T03:04:05"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["maintenance"]["dateCompleted"] == "2026-01-02T03:04:05"

    state = await vehicle_state(client, admin_headers, vehicle.id)
    assert state["status"] == "active"
    assert state["lastServiceDate"] == "2026-01-02T03:04:05"


@pytest.mark.asyncio
async def test_vehicle_stays_in_maintenance_while_other_work_runs(client, admin_headers, make_vehicle):
    vehicle = await make_vehicle()
    first = await client.post(
        "/api/maintenance", json=maintenance_payload(vehicle, status="in_progress"), headers=admin_headers
    )
    second = await client.post(
        "/api/maintenance",
        json=maintenance_payload(vehicle, status="in_progress", description="Brake pads"),
        headers=admin_headers
    )
    first_id = first.json()["data"]["maintenance"]["id"]
    second_id = second.json()["data"]["maintenance"]["id"]

    await client.put(f"/api/maintenance/{first_id}", json={"status": "completed"}, headers=admin_headers)
    assert (await vehicle_state(client, admin_headers, vehicle.id))["status"] == "maintenance"

    await client.put(f"/api/maintenance/{second_id}", json={"status": "cancelled"}, headers=admin_headers)
    assert (await vehicle_state(client, admin_headers, vehicle.id))["status"] == "active"


@pytest.mark.asyncio
async def test_deleting_in_progress_record_frees_vehicle(client, admin_headers, make_vehicle):
    vehicle = await make_vehicle()
    record = await client.post(
        "/api/maintenance", json=maintenance_payload(vehicle, status="in_progress"), headers=admin_headers
    )
    record_id = record.json()["data"]["maintenance"]["id"]
    assert (await vehicle_state(client, admin_headers, vehicle.id))["status"] == "maintenance"

    response = await client.delete(f"/api/maintenance/{record_id}", headers=admin_headers)
    assert response.status_code == 200
    assert (await vehicle_state(client, admin_headers, vehicle.id))["status"] == "active"


@pytest.mark.asyncio
async def test_vehicle_in_maintenance_cannot_take_trips(client, admin_headers, make_vehicle, make_driver):
    vehicle = await make_vehicle()
    driver, _ = await make_driver()
    await client.post(
        "/api/maintenance", json=maintenance_payload(vehicle, status="in_progress"), headers=admin_headers
    )

    response = await client.post(
        "/api/trips",
        json={
            "vehicleId": vehicle.id,
            "driverId": driver.id,
            "origin": {"address": "Depot"},
            "destination": {"address": "Airport"},
            "startTime": datetime.utcnow().isoformat(),
        },
        headers=admin_headers
    )
    assert response.status_code == 400
    assert "maintenance" in response.json()["message"]


@pytest.mark.asyncio
async def test_manual_maintenance_status_is_refused(client, admin_headers, make_vehicle):
    vehicle = await make_vehicle()
    response = await client.put(f"/api/vehicles/{vehicle.id}", json={"status": "maintenance"}, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_missing_fields_and_unknown_vehicle(client, admin_headers, make_vehicle):
    vehicle = await make_vehicle()
    response = await client.post("/api/maintenance", json={"vehicleId": vehicle.id}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Please provide all required fields"

    response = await client.post(
        "/api/maintenance", json=maintenance_payload(vehicle, vehicleId=4242), headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_maintenance_is_admin_only(client, dispatcher_headers, make_vehicle):
    vehicle = await make_vehicle()
    response = await client.get("/api/maintenance", headers=dispatcher_headers)
    assert response.status_code == 403
    response = await client.post("/api/maintenance", json=maintenance_payload(vehicle), headers=dispatcher_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_maintenance_stats(client, admin_headers, make_vehicle):
    vehicle = await make_vehicle()
    await client.post("/api/maintenance", json=maintenance_payload(vehicle), headers=admin_headers)
    await client.post(
        "/api/maintenance",
        json=maintenance_payload(
            vehicle,
            status="completed",
            cost=300,
            maintenanceType="repair",
            dateScheduled=(datetime.utcnow() - timedelta(days=3)).isoformat(),
        ),
        headers=admin_headers
    )
    await client.post(
        "/api/maintenance",
        json=maintenance_payload(vehicle, dateScheduled=(datetime.utcnow() - timedelta(days=5)).isoformat()),
        headers=admin_headers
    )

    response = await client.get("/api/maintenance/stats", headers=admin_headers)
    assert response.status_code == 200
    stats = response.json()["data"]["stats"]
    assert stats["total"] == 3
    assert stats["byStatus"] == {"scheduled": 2, "completed": 1}
    assert stats["byType"] == {"routine": 2, "repair": 1}
    assert stats["overdue"] == 1
    assert stats["cost"]["completedMaintenance"] == 1
    assert stats["cost"]["total"] == 300


@pytest.mark.asyncio
async def test_list_filters(client, admin_headers, make_vehicle):
    first, second = await make_vehicle(), await make_vehicle()
    await client.post("/api/maintenance", json=maintenance_payload(first), headers=admin_headers)
    await client.post(
        "/api/maintenance",
        json=maintenance_payload(second, description="Tyre rotation", maintenanceType="inspection"),
        headers=admin_headers
    )

    response = await client.get(f"/api/maintenance?vehicleId={second.id}", headers=admin_headers)
    assert [r["vehicleId"] for r in response.json()["data"]] == [second.id]

    response = await client.get("/api/maintenance?search=tyre", headers=admin_headers)
    assert response.json()["pagination"]["total"] == 1

    response = await client.get("/api/maintenance?maintenanceType=routine", headers=admin_headers)
    assert response.json()["data"][0]["vehicleId"] == first.id
