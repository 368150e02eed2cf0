"""
Tests for account endpoints: signup, login, profile updates and deletion.
"""

import os
from pathlib import Path

import pytest
from httpx import AsyncClient

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.mark.asyncio
async def test_create_user(client: AsyncClient):
    """Signup returns the user and a token, never the password hash."""
    response = await client.post("/api/users", json={
        "name": "New Seller",
        "email": "new@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User created!"
    assert data["token"]
    assert data["user"]["email"] == "new@example.com"
    assert data["user"]["role"] == "user"
    assert "hashed_password" not in data["user"]
    assert "password" not in data["user"]


@pytest.mark.asyncio
async def test_create_user_unknown_role_falls_back(client: AsyncClient):
    response = await client.post("/api/users", json={
        "name": "Sneaky",
        "email": "sneaky@example.com",
        "password": "securepassword123",
        "role": "superuser",
    })
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "user"


@pytest.mark.asyncio
async def test_create_user_duplicate_email(client: AsyncClient, test_user):
    """Duplicate email returns 409."""
    response = await client.post("/api/users", json={
        "name": "Copycat",
        "email": "test@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_user_short_password(client: AsyncClient):
    response = await client.post("/api/users", json={
        "name": "Shorty",
        "email": "short@example.com",
        "password": "123",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, test_user):
    response = await client.post("/api/users/login", json={
        "email": "test@example.com",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == test_user["user"]["id"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    response = await client.post("/api/users/login", json={
        "email": "test@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient):
    """Unknown accounts are indistinguishable from a wrong password."""
    response = await client.post("/api/users/login", json={
        "email": "ghost@example.com",
        "password": "whatever123",
    })
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_get_user(client: AsyncClient, test_user, auth_headers):
    user_id = test_user["user"]["id"]
    response = await client.get(f"/api/users/{user_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Test Seller"


@pytest.mark.asyncio
async def test_get_user_not_found(client: AsyncClient, auth_headers):
    response = await client.get("/api/users/9999", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_profile_partial(client: AsyncClient, auth_headers):
    """Fields that are not sent keep their value."""
    response = await client.put(
        "/api/users",
        data={"bio": "Selling shirts since 2019"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["bio"] == "Selling shirts since 2019"
    assert user["name"] == "Test Seller"
    assert user["email"] == "test@example.com"


@pytest.mark.asyncio
async def test_update_password_allows_new_login(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/users",
        data={"password": "brandnewpassword"},
        headers=auth_headers,
    )
    assert response.status_code == 200

    old_login = await client.post("/api/users/login", json={
        "email": "test@example.com",
        "password": "testpassword123",
    })
    assert old_login.status_code == 401

    new_login = await client.post("/api/users/login", json={
        "email": "test@example.com",
        "password": "brandnewpassword",
    })
    assert new_login.status_code == 200


@pytest.mark.asyncio
async def test_update_email_taken(client: AsyncClient, auth_headers, other_headers):
    response = await client.put(
        "/api/users",
        data={"email": "other@example.com"},
        headers=auth_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_invalid_email(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/users",
        data={"email": "not-an-email"},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_upload_profile_picture(client: AsyncClient, auth_headers):
    """A new picture is stored under the upload dir and served from /uploads."""
    response = await client.put(
        "/api/users",
        files={"profile_pic": ("avatar.png", PNG_BYTES, "image/png")},
        headers=auth_headers,
    )
    assert response.status_code == 200
    profile_pic = response.json()["user"]["profile_pic"]
    assert profile_pic.startswith("/uploads/")

    stored = Path(os.environ["UPLOAD_DIR"]) / Path(profile_pic).name
    assert stored.read_bytes() == PNG_BYTES

    served = await client.get(profile_pic)
    assert served.status_code == 200
    assert served.content == PNG_BYTES


@pytest.mark.asyncio
async def test_replacing_profile_picture_removes_old_file(client: AsyncClient, auth_headers):
    first = await client.put(
        "/api/users",
        files={"profile_pic": ("one.png", PNG_BYTES, "image/png")},
        headers=auth_headers,
    )
    old_file = Path(os.environ["UPLOAD_DIR"]) / Path(first.json()["user"]["profile_pic"]).name
    assert old_file.exists()

    second = await client.put(
        "/api/users",
        files={"profile_pic": ("two.png", PNG_BYTES, "image/png")},
        headers=auth_headers,
    )
    assert second.status_code == 200
    assert not old_file.exists()


@pytest.mark.asyncio
async def test_upload_rejects_non_image(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/users",
        files={"profile_pic": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_other_user_forbidden(client: AsyncClient, make_user, auth_headers):
    other = await make_user("victim@example.com")
    response = await client.delete(f"/api/users/{other['user']['id']}", headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_self_removes_everything(
    client: AsyncClient, test_user, auth_headers, test_show, poster
):
    sale = await client.post("/api/sales", json={
        "inventory_id": poster["id"],
        "show_id": test_show["id"],
        "quantity_sold": 1,
        "total_amount": "20.00",
        "payment_method": "cash",
    }, headers=auth_headers)
    assert sale.status_code == 201

    response = await client.delete(f"/api/users/{test_user['user']['id']}", headers=auth_headers)
    assert response.status_code == 200

    login = await client.post("/api/users/login", json={
        "email": "test@example.com",
        "password": "testpassword123",
    })
    assert login.status_code == 401

    tours = await client.get("/api/tours", headers=auth_headers)
    assert tours.json() == []


@pytest.mark.asyncio
async def test_admin_delete_requires_admin_role(client: AsyncClient, auth_headers):
    response = await client.delete("/api/users", headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied. Insufficient permissions."


@pytest.mark.asyncio
async def test_admin_delete(client: AsyncClient, make_user):
    admin = await make_user("admin@example.com", role="admin")
    assert admin["user"]["role"] == "admin"

    response = await client.delete("/api/users", headers=admin["headers"])
    assert response.status_code == 200

    lookup = await client.get(f"/api/users/{admin['user']['id']}", headers=admin["headers"])
    assert lookup.status_code == 404
