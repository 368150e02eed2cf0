"""
Tests for show endpoints: creation, open/closed listings and deletion.
"""

import pytest
from httpx import AsyncClient


async def _create_show(client: AsyncClient, headers: dict, tour_id: int, date: str, venue: str):
    response = await client.post("/api/shows", json={
        "tour_id": tour_id,
        "date": date,
        "venue": venue,
        "city": "Chicago",
        "state": "IL",
    }, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["show"]


@pytest.mark.asyncio
async def test_create_show(client: AsyncClient, auth_headers, test_tour):
    response = await client.post("/api/shows", json={
        "tour_id": test_tour["id"],
        "date": "2026-11-12",
        "venue": "Metro",
        "city": "Chicago",
        "state": "IL",
    }, headers=auth_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Show created!"
    assert data["show"]["tour_id"] == test_tour["id"]
    assert data["show"]["venue"] == "Metro"


@pytest.mark.asyncio
async def test_create_show_foreign_tour(client: AsyncClient, other_headers, test_tour):
    response = await client.post("/api/shows", json={
        "tour_id": test_tour["id"],
        "date": "2026-11-12",
        "venue": "Metro",
        "city": "Chicago",
        "state": "IL",
    }, headers=other_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_show_missing_field(client: AsyncClient, auth_headers, test_tour):
    response = await client.post("/api/shows", json={
        "tour_id": test_tour["id"],
        "date": "2026-11-12",
        "venue": "Metro",
    }, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_open_shows_sorted_by_date(client: AsyncClient, auth_headers, test_tour):
    late = await _create_show(client, auth_headers, test_tour["id"], "2026-12-01", "Late Venue")
    early = await _create_show(client, auth_headers, test_tour["id"], "2026-11-02", "Early Venue")

    response = await client.get("/api/shows", params={"tour_id": test_tour["id"]}, headers=auth_headers)
    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [early["id"], late["id"]]


@pytest.mark.asyncio
async def test_list_open_shows_empty(client: AsyncClient, auth_headers, test_tour):
    response = await client.get("/api/shows", params={"tour_id": test_tour["id"]}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_open_shows_foreign_tour(client: AsyncClient, other_headers, test_tour):
    response = await client.get("/api/shows", params={"tour_id": test_tour["id"]}, headers=other_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_closing_moves_show_to_closed_list(client: AsyncClient, auth_headers, test_tour, test_show):
    response = await client.post(f"/api/shows/{test_show['id']}/close", headers=auth_headers)
    assert response.status_code == 201

    open_shows = await client.get("/api/shows", params={"tour_id": test_tour["id"]}, headers=auth_headers)
    assert open_shows.json() == []

    closed = await client.get("/api/shows/closed", headers=auth_headers)
    assert closed.status_code == 200
    [entry] = closed.json()
    assert entry["show_id"] == test_show["id"]
    assert entry["tour_name"] == "Fall Tour"
    assert entry["band_name"] == "The Testers"
    assert entry["total_transactions"] == 0


@pytest.mark.asyncio
async def test_closed_shows_scoped_to_owner(client: AsyncClient, auth_headers, other_headers, test_show):
    await client.post(f"/api/shows/{test_show['id']}/close", headers=auth_headers)

    response = await client.get("/api/shows/closed", headers=other_headers)
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_close_show_twice(client: AsyncClient, auth_headers, test_show):
    first = await client.post(f"/api/shows/{test_show['id']}/close", headers=auth_headers)
    assert first.status_code == 201

    second = await client.post(f"/api/shows/{test_show['id']}/close", headers=auth_headers)
    assert second.status_code == 409


@pytest.mark.asyncio
async def test_close_foreign_show(client: AsyncClient, other_headers, test_show):
    response = await client.post(f"/api/shows/{test_show['id']}/close", headers=other_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_show(client: AsyncClient, auth_headers, other_headers, test_show):
    mine = await client.get(f"/api/shows/{test_show['id']}", headers=auth_headers)
    assert mine.status_code == 200
    assert mine.json()["venue"] == "The Roxy"

    theirs = await client.get(f"/api/shows/{test_show['id']}", headers=other_headers)
    assert theirs.status_code == 404


@pytest.mark.asyncio
async def test_delete_show_removes_sales(client: AsyncClient, auth_headers, test_tour, test_show, poster):
    sale = await client.post("/api/sales", json={
        "inventory_id": poster["id"],
        "show_id": test_show["id"],
        "quantity_sold": 1,
        "total_amount": "20.00",
        "payment_method": "card",
    }, headers=auth_headers)
    assert sale.status_code == 201

    response = await client.delete(f"/api/shows/{test_show['id']}", headers=auth_headers)
    assert response.status_code == 200

    lookup = await client.get(f"/api/shows/{test_show['id']}", headers=auth_headers)
    assert lookup.status_code == 404

    total = await client.get("/api/sales/tour", params={"tour_id": test_tour["id"]}, headers=auth_headers)
    assert total.status_code == 200
    assert float(total.json()["total_sales"]) == 0
