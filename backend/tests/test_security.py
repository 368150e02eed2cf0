"""
Tests for token issuing and the bearer-token guards.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from jose import jwt

from tourmerch.core.config import get_settings
from tourmerch.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_hashing():
    hashed = hash_password("testpassword123")
    assert hashed != "testpassword123"
    assert verify_password("testpassword123", hashed)
    assert not verify_password("wrongpassword", hashed)


def test_token_carries_identity():
    token = create_access_token({"sub": "7", "email": "crew@example.com", "role": "manager"})
    user = decode_access_token(token)
    assert user.id == 7
    assert user.email == "crew@example.com"
    assert user.role == "manager"


def test_token_expires_after_configured_lifetime():
    settings = get_settings()
    token = create_access_token({"sub": "1"})
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    lifetime = payload["exp"] - datetime.now(timezone.utc).timestamp()
    expected = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    assert expected - 30 < lifetime <= expected


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient):
    response = await client.get("/api/tours")
    assert response.status_code == 401
    assert response.json()["detail"] == "Access denied. No token provided."


@pytest.mark.asyncio
async def test_expired_token(client: AsyncClient, test_user):
    token = create_access_token(
        {"sub": str(test_user["user"]["id"]), "email": "test@example.com", "role": "user"},
        expires_delta=timedelta(seconds=-5),
    )
    response = await client.get("/api/tours", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Session expired. Please log in again."


@pytest.mark.asyncio
async def test_malformed_token(client: AsyncClient):
    response = await client.get("/api/tours", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Invalid token."


@pytest.mark.asyncio
async def test_token_signed_with_other_key(client: AsyncClient):
    token = jwt.encode({"sub": "1"}, "some-other-secret", algorithm="HS256")
    response = await client.get("/api/tours", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_token_without_subject(client: AsyncClient):
    token = create_access_token({"email": "nobody@example.com"})
    response = await client.get("/api/tours", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_health_and_metrics(client: AsyncClient):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["cache"] == {"status": "disabled"}

    metrics = await client.get("/metrics")
    assert metrics.status_code == 200
    assert "sales_recorded_total" in metrics.text


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "abc123"
