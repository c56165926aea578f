"""
Integration tests for the authentication flow.

Verifies Login -> Profile -> Logout and the 401 messages for missing,
invalid, expired and revoked tokens.
"""

from datetime import timedelta

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from backend.app.models.enums import UserRole


@pytest.mark.asyncio
async def test_login_returns_user_and_token(client, admin):
    response = await client.post(
        "/api/auth/login", json={"email": "admin@aivodrive.com", "password": "password123"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert body["data"]["token"]
    user = body["data"]["user"]
    assert user["email"] == "admin@aivodrive.com"
    assert user["role"] == "admin"
    assert user["lastLogin"] is not None
    assert "hashedPassword" not in user


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(client, admin):
    response = await client.post(
        "/api/auth/login", json={"email": "  Admin@AivoDrive.com ", "password": "password123"}
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_requires_email_and_password(client):
    response = await client.post("/api/auth/login", json={"email": "admin@aivodrive.com"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Please provide email and password"


@pytest.mark.asyncio
async def test_wrong_password_and_unknown_email_look_the_same(client, admin):
    wrong_password = await client.post(
        "/api/auth/login", json={"email": "admin@aivodrive.com", "password": "nope"}
    )
    unknown_email = await client.post(
        "/api/auth/login", json={"email": "ghost@aivodrive.com", "password": "password123"}
    )
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json()["message"] == unknown_email.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_inactive_user_cannot_log_in(client, make_user):
    await make_user(UserRole.DISPATCHER, email="sleepy@aivodrive.com", is_active=False)
    response = await client.post(
        "/api/auth/login", json={"email": "sleepy@aivodrive.com", "password": "password123"}
    )
    assert response.status_code == 401
    assert "inactive" in response.json()["message"]


@pytest.mark.asyncio
async def test_profile_requires_token(client):
    response = await client.get("/api/auth/profile")
    assert response.status_code == 401
    assert response.json()["message"] == "No token, authorization denied"


@pytest.mark.asyncio
async def test_profile_rejects_garbage_token(client):
    response = await client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["message"] == "Token is not valid"


@pytest.mark.asyncio
async def test_profile_rejects_expired_token(client, admin, headers_for):
    headers = headers_for(admin, expires_delta=timedelta(seconds=-5))
    response = await client.get("/api/auth/profile", headers=headers)
    assert response.status_code == 401
    assert "expired" in response.json()["message"].lower()


@pytest.mark.asyncio
async def test_get_and_update_profile(client, admin_headers):
    response = await client.get("/api/auth/profile", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["user"]["name"] == "Admin User"

    response = await client.put(
        "/api/auth/profile", json={"name": "Fleet Boss", "phone": "555-0100"}, headers=admin_headers
    )
    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["name"] == "Fleet Boss"
    assert user["phone"] == "555-0100"
    assert user["email"] == "admin@aivodrive.com"


@pytest.mark.asyncio
async def test_logout_revokes_token(client, admin_headers, mock_redis):
    response = await client.post("/api/auth/logout", headers=admin_headers)
    assert response.status_code == 200
    assert len(mock_redis.store) == 1

    response = await client.get("/api/auth/profile", headers=admin_headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Token has been revoked"


@pytest.mark.asyncio
async def test_redis_outage_fails_open(client, admin_headers, mock_redis, mocker):
    mocker.patch.object(mock_redis, "setex", side_effect=RedisConnectionError("redis down"))
    mocker.patch.object(mock_redis, "exists", side_effect=RedisConnectionError("redis down"))

    response = await client.post("/api/auth/logout", headers=admin_headers)
    assert response.status_code == 200

    # Nothing could be revoked, and the check does not block the request.
    response = await client.get("/api/auth/profile", headers=admin_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_deactivated_user_token_stops_working(client, make_user, headers_for, db_session):
    user = await make_user(UserRole.DISPATCHER)
    headers = headers_for(user)
    assert (await client.get("/api/auth/profile", headers=headers)).status_code == 200

    user.is_active = False
    await db_session.commit()

    response = await client.get("/api/auth/profile", headers=headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Your account has been deactivated"


@pytest.mark.asyncio
async def test_health_and_root(client):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    root = await client.get("/")
    assert root.json()["docs"] == "/docs"
