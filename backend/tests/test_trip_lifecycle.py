"""
Integration tests for the trip lifecycle.

Trip status changes must keep the driver's status and counters in step,
and drivers may only move their own trips forward.
"""

from datetime import datetime, timedelta

import pytest

from backend.app.models.driver import Driver
from backend.app.models.enums import DriverStatus, VehicleStatus
from backend.app.models.trip import Trip


def trip_payload(vehicle, driver, **overrides):
    payload = {
        "vehicleId": vehicle.id,
        "driverId": driver.id,
        "origin": {"address": "Central Warehouse", "coordinates": [40.7128, -74.006]},
        "destination": {"address": "Downtown Office"},
        "startTime": (datetime.utcnow() + timedelta(hours=1)).isoformat(),
        "estimatedDistance": 40,
        "purpose": "Delivery",
    }
    payload.update(overrides)
    return payload


async def driver_state(client, headers, driver_id):
    response = await client.get(f"/api/drivers/{driver_id}", headers=headers)
    assert response.status_code == 200
    return response.json()["data"]["driver"]


@pytest.mark.asyncio
async def test_full_lifecycle_credits_driver(client, admin_headers, make_vehicle, make_driver):
    vehicle = await make_vehicle()
    driver, _ = await make_driver()

    response = await client.post("/api/trips", json=trip_payload(vehicle, driver), headers=admin_headers)
    assert response.status_code == 201
    trip = response.json()["data"]["trip"]
    assert trip["status"] == "scheduled"
    assert trip["origin"] == {"address": "Central Warehouse", "coordinates": [40.7128, -74.006]}
    assert trip["destination"]["coordinates"] is None

    response = await client.put(f"/api/trips/{trip['id']}", json={"status": "in_progress"}, headers=admin_headers)
    assert response.status_code == 200
    assert (await driver_state(client, admin_headers, driver.id))["status"] == "on_trip"

    response = await client.put(
        f"/api/trips/{trip['id']}", json={"status": "completed", "actualDistance": 42}, headers=admin_headers
    )
    assert response.status_code == 200
    completed = response.json()["data"]["trip"]
    assert completed["status"] == "completed"
    assert completed["actualDistance"] == 42
    assert completed["endTime"] is not None

    state = await driver_state(client, admin_headers, driver.id)
    assert state["status"] == "available"
    assert state["totalTrips"] == 1
    assert state["totalDistance"] == 42


@pytest.mark.asyncio
async def test_create_in_progress_claims_driver(client, dispatcher_headers, admin_headers, make_vehicle, make_driver):
    vehicle = await make_vehicle()
    driver, _ = await make_driver()

    response = await client.post(
        "/api/trips", json=trip_payload(vehicle, driver, status="in_progress"), headers=dispatcher_headers
    )
    assert response.status_code == 201
    assert (await driver_state(client, admin_headers, driver.id))["status"] == "on_trip"


@pytest.mark.asyncio
async def test_missing_fields_rejected(client, admin_headers, make_vehicle):
    vehicle = await make_vehicle()
    response = await client.post("/api/trips", json={"vehicleId": vehicle.id}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Please provide all required fields"


@pytest.mark.asyncio
async def test_inactive_vehicle_rejected_without_side_effects(
    client, admin_headers, make_vehicle, make_driver, reload
):
    vehicle = await make_vehicle(status=VehicleStatus.MAINTENANCE)
    driver, _ = await make_driver()

    response = await client.post(
        "/api/trips", json=trip_payload(vehicle, driver, status="in_progress"), headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Vehicle is not active, current status: maintenance"

    assert (await reload(Driver, driver.id)).status == DriverStatus.AVAILABLE
    listing = await client.get("/api/trips", headers=admin_headers)
    assert listing.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_unavailable_driver_rejected(client, admin_headers, make_vehicle, make_driver):
    vehicle = await make_vehicle()
    driver, _ = await make_driver(status=DriverStatus.OFF_DUTY)

    response = await client.post("/api/trips", json=trip_payload(vehicle, driver), headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Driver is not available, current status: off_duty"


@pytest.mark.asyncio
async def test_unknown_vehicle_is_404(client, admin_headers, make_vehicle, make_driver):
    vehicle = await make_vehicle()
    driver, _ = await make_driver()
    response = await client.post(
        "/api/trips", json=trip_payload(vehicle, driver, vehicleId=9999), headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Vehicle not found"


@pytest.mark.asyncio
async def test_driver_role_cannot_create_trips(client, make_vehicle, make_driver, headers_for):
    vehicle = await make_vehicle()
    driver, user = await make_driver()
    response = await client.post("/api/trips", json=trip_payload(vehicle, driver), headers=headers_for(user))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_driver_moves_own_trip_forward(client, admin_headers, make_vehicle, make_driver, headers_for):
    vehicle = await make_vehicle()
    driver, user = await make_driver()
    trip = (await client.post("/api/trips", json=trip_payload(vehicle, driver), headers=admin_headers)).json()
    trip_id = trip["data"]["trip"]["id"]
    headers = headers_for(user)

    response = await client.put(f"/api/trips/{trip_id}", json={"status": "completed"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot change trip status from scheduled to completed"

    response = await client.put(f"/api/trips/{trip_id}", json={"purpose": "Joyride"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Drivers can only update status, actual distance, and notes"

    response = await client.put(f"/api/trips/{trip_id}", json={"status": "in_progress"}, headers=headers)
    assert response.status_code == 200

    response = await client.put(
        f"/api/trips/{trip_id}",
        json={"status": "completed", "actualDistance": 12.5, "notes": "Traffic on the bridge"},
        headers=headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["trip"]["notes"] == "Traffic on the bridge"

    state = await driver_state(client, admin_headers, driver.id)
    assert state["status"] == "available"
    assert state["totalDistance"] == 12.5


@pytest.mark.asyncio
async def test_drivers_only_see_their_own_trips(client, admin_headers, make_vehicle, make_driver, headers_for):
    first_vehicle, second_vehicle = await make_vehicle(), await make_vehicle()
    mine, me = await make_driver()
    theirs, _ = await make_driver()

    await client.post("/api/trips", json=trip_payload(first_vehicle, mine), headers=admin_headers)
    other = await client.post("/api/trips", json=trip_payload(second_vehicle, theirs), headers=admin_headers)
    other_id = other.json()["data"]["trip"]["id"]
    headers = headers_for(me)

    listing = await client.get("/api/trips", headers=headers)
    assert listing.status_code == 200
    trips = listing.json()["data"]
    assert [t["driverId"] for t in trips] == [mine.id]

    response = await client.get(f"/api/trips/{other_id}", headers=headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to access this trip"

    response = await client.put(f"/api/trips/{other_id}", json={"notes": "mine now"}, headers=headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to update this trip"


@pytest.mark.asyncio
async def test_second_trip_cannot_start_for_busy_driver(
    client, admin_headers, make_vehicle, make_driver, reload
):
    first_vehicle, second_vehicle = await make_vehicle(), await make_vehicle()
    driver, _ = await make_driver()

    first = await client.post("/api/trips", json=trip_payload(first_vehicle, driver), headers=admin_headers)
    second = await client.post("/api/trips", json=trip_payload(second_vehicle, driver), headers=admin_headers)
    first_id = first.json()["data"]["trip"]["id"]
    second_id = second.json()["data"]["trip"]["id"]

    assert (await client.put(
        f"/api/trips/{first_id}", json={"status": "in_progress"}, headers=admin_headers
    )).status_code == 200

    response = await client.put(f"/api/trips/{second_id}", json={"status": "in_progress"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Driver is not available, current status: on_trip"
    assert (await reload(Trip, second_id)).status.value == "scheduled"


@pytest.mark.asyncio
async def test_cancel_releases_driver_without_credit(client, admin_headers, make_vehicle, make_driver):
    vehicle = await make_vehicle()
    driver, _ = await make_driver()
    trip = await client.post(
        "/api/trips", json=trip_payload(vehicle, driver, status="in_progress"), headers=admin_headers
    )
    trip_id = trip.json()["data"]["trip"]["id"]

    response = await client.put(f"/api/trips/{trip_id}", json={"status": "cancelled"}, headers=admin_headers)
    assert response.status_code == 200

    state = await driver_state(client, admin_headers, driver.id)
    assert state["status"] == "available"
    assert state["totalTrips"] == 0


@pytest.mark.asyncio
async def test_delete_running_trip_releases_driver(client, admin_headers, make_vehicle, make_driver):
    vehicle = await make_vehicle()
    driver, _ = await make_driver()
    trip = await client.post(
        "/api/trips", json=trip_payload(vehicle, driver, status="in_progress"), headers=admin_headers
    )
    trip_id = trip.json()["data"]["trip"]["id"]

    response = await client.delete(f"/api/trips/{trip_id}", headers=admin_headers)
    assert response.status_code == 200
    assert (await driver_state(client, admin_headers, driver.id))["status"] == "available"

    response = await client.get(f"/api/trips/{trip_id}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reassigning_running_trip_hands_over_driver(client, dispatcher_headers, admin_headers, make_vehicle, make_driver):
    vehicle = await make_vehicle()
    first, _ = await make_driver()
    second, _ = await make_driver()
    trip = await client.post(
        "/api/trips", json=trip_payload(vehicle, first, status="in_progress"), headers=dispatcher_headers
    )
    trip_id = trip.json()["data"]["trip"]["id"]

    response = await client.put(f"/api/trips/{trip_id}", json={"driverId": second.id}, headers=dispatcher_headers)
    assert response.status_code == 200
    assert response.json()["data"]["trip"]["driverId"] == second.id

    assert (await driver_state(client, admin_headers, first.id))["status"] == "available"
    assert (await driver_state(client, admin_headers, second.id))["status"] == "on_trip"


@pytest.mark.asyncio
async def test_reassigning_to_unavailable_driver_changes_nothing(
    client, admin_headers, make_vehicle, make_driver, reload
):
    vehicle = await make_vehicle()
    first, _ = await make_driver()
    on_leave, _ = await make_driver(status=DriverStatus.ON_LEAVE)
    trip = await client.post(
        "/api/trips", json=trip_payload(vehicle, first, status="in_progress"), headers=admin_headers
    )
    trip_id = trip.json()["data"]["trip"]["id"]

    response = await client.put(f"/api/trips/{trip_id}", json={"driverId": on_leave.id}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Driver is not available, current status: on_leave"

    assert (await reload(Driver, first.id)).status == DriverStatus.ON_TRIP
    assert (await reload(Driver, on_leave.id)).status == DriverStatus.ON_LEAVE
    assert (await reload(Trip, trip_id)).driver_id == first.id


@pytest.mark.asyncio
async def test_swapping_to_inactive_vehicle_rejected(client, admin_headers, make_vehicle, make_driver, reload):
    vehicle = await make_vehicle()
    retired = await make_vehicle(status=VehicleStatus.INACTIVE)
    driver, _ = await make_driver()
    trip = await client.post("/api/trips", json=trip_payload(vehicle, driver), headers=admin_headers)
    trip_id = trip.json()["data"]["trip"]["id"]

    response = await client.put(f"/api/trips/{trip_id}", json={"vehicleId": retired.id}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Vehicle is not active, current status: inactive"
    assert (await reload(Trip, trip_id)).vehicle_id == vehicle.id


@pytest.mark.asyncio
async def test_trip_stats(client, admin_headers, dispatcher_headers, make_vehicle, make_driver, headers_for):
    vehicle = await make_vehicle()
    driver, user = await make_driver()
    trip = await client.post(
        "/api/trips",
        json=trip_payload(vehicle, driver, startTime=datetime.utcnow().isoformat(), status="in_progress"),
        headers=admin_headers
    )
    trip_id = trip.json()["data"]["trip"]["id"]
    await client.put(
        f"/api/trips/{trip_id}", json={"status": "completed", "actualDistance": 30}, headers=admin_headers
    )

    response = await client.get("/api/trips/stats", headers=dispatcher_headers)
    assert response.status_code == 200
    stats = response.json()["data"]["stats"]
    assert stats["total"] == 1
    assert stats["byStatus"] == {"completed": 1}
    assert stats["distance"]["total"] == 30
    assert stats["distance"]["completedTrips"] == 1

    assert (await client.get("/api/trips/stats", headers=headers_for(user))).status_code == 403
