"""
Tests for alert generation rules and the alert endpoints.
"""

from datetime import datetime, timedelta

import pytest

from backend.app.models.driver import Driver
from backend.app.models.enums import AlertPriority, AlertType, MaintenanceStatus, RelatedKind, TripStatus, UserRole
from backend.app.models.maintenance import Maintenance
from backend.app.models.trip import Trip
from backend.app.models.user import User
from backend.app.models.vehicle import Vehicle
from backend.app.services.alert_generation import (
    WELCOME_TITLE,
    build_alerts,
    insurance_expiry_alerts,
    license_expiry_alerts,
    overdue_maintenance_alerts,
    registration_expiry_alerts,
    service_due_alerts,
    trip_delay_alerts,
    welcome_alert,
)
from backend.app.services.alerts import RELATED_MODELS

NOW = datetime(2026, 10, 18, 9, 0, 0)


def vehicle(id, **overrides):
    values = dict(id=id, make="Honda", model="Civic", license_plate=f"DEF-{id:04d}",
                  last_service_date=NOW - timedelta(days=10))
    values.update(overrides)
    return Vehicle(**values)


def test_service_due_for_old_and_missing_service_dates():
    vehicles = [
        vehicle(1),
        vehicle(2, last_service_date=NOW - timedelta(days=120)),
        vehicle(3, last_service_date=None),
    ]
    alerts = service_due_alerts(vehicles, NOW)
    assert [a.related_to.id for a in alerts] == [2, 3]
    assert all(a.type == AlertType.MAINTENANCE_DUE and a.priority == AlertPriority.MEDIUM for a in alerts)
    assert "never" in alerts[1].message
    assert alerts[0].expires_at == NOW + timedelta(days=30)


def test_document_expiry_windows():
    soon = NOW + timedelta(days=20)
    vehicles = [
        vehicle(1, registration_expiry=soon, insurance_expiry=NOW + timedelta(days=45)),
        vehicle(2, registration_expiry=NOW - timedelta(days=1), insurance_expiry=soon),
    ]
    registration = registration_expiry_alerts(vehicles, NOW)
    insurance = insurance_expiry_alerts(vehicles, NOW)

    assert [a.related_to.id for a in registration] == [1]
    assert registration[0].priority == AlertPriority.HIGH
    assert registration[0].expires_at == soon
    assert [a.related_to.id for a in insurance] == [2]


def test_license_window_is_sixty_days():
    drivers = [
        Driver(id=1, license_number="DL-1", license_expiry=NOW + timedelta(days=50)),
        Driver(id=2, license_number="DL-2", license_expiry=NOW + timedelta(days=70)),
    ]
    alerts = license_expiry_alerts(drivers, NOW)
    assert [a.related_to.id for a in alerts] == [1]
    assert alerts[0].related_to.kind == "driver"


def test_trip_delay_after_three_hours():
    trips = [
        Trip(id=1, status=TripStatus.IN_PROGRESS, start_time=NOW - timedelta(hours=4),
             origin_address="Depot", destination_address="Port"),
        Trip(id=2, status=TripStatus.IN_PROGRESS, start_time=NOW - timedelta(hours=2),
             origin_address="Depot", destination_address="Mall"),
        Trip(id=3, status=TripStatus.SCHEDULED, start_time=NOW - timedelta(hours=5),
             origin_address="Depot", destination_address="Airport"),
    ]
    alerts = trip_delay_alerts(trips, NOW)
    assert [a.related_to.id for a in alerts] == [1]
    assert "Depot" in alerts[0].message and "Port" in alerts[0].message
    assert alerts[0].expires_at == NOW + timedelta(hours=24)


def test_overdue_maintenance():
    records = [
        Maintenance(id=1, status=MaintenanceStatus.SCHEDULED, description="Brakes",
                    date_scheduled=NOW - timedelta(days=2)),
        Maintenance(id=2, status=MaintenanceStatus.SCHEDULED, description="Tyres",
                    date_scheduled=NOW + timedelta(days=2)),
    ]
    alerts = overdue_maintenance_alerts(records, NOW)
    assert [a.related_to.id for a in alerts] == [1]
    assert alerts[0].priority == AlertPriority.HIGH
    assert alerts[0].related_to.kind == "maintenance"


def test_welcome_alert_needs_an_admin():
    assert welcome_alert(None) == []
    admin = User(id=7, name="Admin", email="admin@aivodrive.com", role=UserRole.ADMIN)
    (alert,) = welcome_alert(admin)
    assert alert.title == WELCOME_TITLE
    assert alert.type == AlertType.SYSTEM
    assert alert.priority == AlertPriority.LOW
    assert alert.related_to.kind == "user" and alert.related_to.id == 7
    assert alert.expires_at is None


def test_build_alerts_on_a_healthy_fleet_only_welcomes():
    admin = User(id=1, name="Admin", email="admin@aivodrive.com", role=UserRole.ADMIN)
    alerts = build_alerts([vehicle(1)], [], [], [], admin, NOW)
    assert [a.type for a in alerts] == [AlertType.SYSTEM]


def test_every_related_kind_resolves_to_a_table():
    assert set(RELATED_MODELS) == set(RelatedKind)
    for model, resource in RELATED_MODELS.values():
        assert model.__tablename__
        assert resource


@pytest.mark.asyncio
async def test_generate_endpoint_replaces_alerts(client, admin_headers, make_vehicle):
    await make_vehicle(last_service_date=None)

    response = await client.post("/api/alerts/generate", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["generated"] == 2

    # Regenerating does not duplicate.
    await client.post("/api/alerts/generate", headers=admin_headers)
    listing = (await client.get("/api/alerts", headers=admin_headers)).json()
    assert listing["pagination"]["total"] == 2
    kinds = sorted(alert["relatedTo"]["kind"] for alert in listing["data"])
    assert kinds == ["user", "vehicle"]


@pytest.mark.asyncio
async def test_create_read_and_count(client, admin_headers, make_vehicle):
    vehicle = await make_vehicle()
    response = await client.post(
        "/api/alerts",
        json={
            "type": "vehicle_issue",
            "title": "Check engine light",
            "message": "Driver reported a warning light",
            "priority": "critical",
            "relatedTo": {"kind": "vehicle", "id": vehicle.id},
        },
        headers=admin_headers
    )
    assert response.status_code == 201
    alert = response.json()["data"]["alert"]
    assert alert["relatedTo"] == {"kind": "vehicle", "id": vehicle.id}
    assert alert["isRead"] is False

    count = (await client.get("/api/alerts/unread/count", headers=admin_headers)).json()["data"]["count"]
    assert count == {"total": 1, "critical": 1, "high": 0}

    response = await client.put(f"/api/alerts/{alert['id']}/read", headers=admin_headers)
    assert response.json()["data"]["alert"]["isRead"] is True

    count = (await client.get("/api/alerts/unread/count", headers=admin_headers)).json()["data"]["count"]
    assert count["total"] == 0

    unread = (await client.get("/api/alerts?isRead=false", headers=admin_headers)).json()
    assert unread["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_related_entity_must_exist(client, admin_headers):
    response = await client.post(
        "/api/alerts",
        json={"type": "trip_delay", "title": "Late", "message": "Late trip", "relatedTo": {"kind": "trip", "id": 55}},
        headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Trip not found"

    response = await client.post(
        "/api/alerts",
        json={"type": "system", "title": "x", "message": "y", "relatedTo": {"kind": "hub", "id": 1}},
        headers=admin_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_and_delete_alert(client, admin_headers, admin):
    created = await client.post(
        "/api/alerts",
        json={"type": "system", "title": "Note", "message": "Hello", "relatedTo": {"kind": "user", "id": admin.id}},
        headers=admin_headers
    )
    alert_id = created.json()["data"]["alert"]["id"]

    response = await client.put(f"/api/alerts/{alert_id}", json={"priority": "high"}, headers=admin_headers)
    assert response.json()["data"]["alert"]["priority"] == "high"

    assert (await client.delete(f"/api/alerts/{alert_id}", headers=admin_headers)).status_code == 200
    assert (await client.get(f"/api/alerts/{alert_id}", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_alerts_are_admin_only(client, dispatcher_headers):
    assert (await client.get("/api/alerts", headers=dispatcher_headers)).status_code == 403
