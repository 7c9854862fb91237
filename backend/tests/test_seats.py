"""
Tests for seat endpoints: listing, selection under contention, release.
"""

import asyncio

import pytest
from httpx import AsyncClient


async def setup_event_with_bookings(client: AsyncClient, bookings: int = 2):
    response = await client.post("/api/events", json={"title": "Test Concert", "external": False})
    event_id = response.json()["id"]
    booking_ids = []
    for _ in range(bookings):
        response = await client.post("/api/bookings", json={"event_id": event_id})
        booking_ids.append(response.json()["id"])
    return event_id, booking_ids


@pytest.mark.asyncio
async def test_list_seats(client: AsyncClient):
    event_id, _ = await setup_event_with_bookings(client, bookings=0)

    response = await client.get(f"/api/seats?event_id={event_id}&page=2&pageSize=3")

    assert response.status_code == 200
    assert response.json() == [
        {"id": 4, "row": 1, "number": 4, "status": "FREE", "price": "10.00"},
        {"id": 5, "row": 1, "number": 5, "status": "FREE", "price": "10.00"},
        {"id": 6, "row": 1, "number": 6, "status": "FREE", "price": "10.00"},
    ]


@pytest.mark.asyncio
async def test_list_seats_defaults_and_past_the_end(client: AsyncClient):
    event_id, _ = await setup_event_with_bookings(client, bookings=0)

    response = await client.get(f"/api/seats?event_id={event_id}")
    assert len(response.json()) == 10

    # 10 seats in pages of 3: page 4 holds the last seat, page 5 is empty
    response = await client.get(f"/api/seats?event_id={event_id}&page=4&pageSize=3")
    assert response.status_code == 200
    assert response.json() == [{"id": 10, "row": 1, "number": 10, "status": "FREE", "price": "10.00"}]

    response = await client.get(f"/api/seats?event_id={event_id}&page=5&pageSize=3")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["page=0", "pageSize=0", "pageSize=21", "page=-3"])
async def test_list_seats_bad_pagination(client: AsyncClient, query):
    event_id, _ = await setup_event_with_bookings(client, bookings=0)

    response = await client.get(f"/api/seats?event_id={event_id}&{query}")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid pagination parameters"}


@pytest.mark.asyncio
async def test_list_seats_unknown_event(client: AsyncClient):
    response = await client.get("/api/seats?event_id=77")
    assert response.status_code == 404

    response = await client.get("/api/seats")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_seat_contention_scenario(client: AsyncClient):
    """A holds seat 5, B is refused, A lets go, B gets it."""
    _, (a, b) = await setup_event_with_bookings(client)

    response = await client.patch("/api/seats/select", json={"booking_id": a, "seat_id": 5})
    assert response.status_code == 200
    assert response.json() == "Seat successfully added to booking"

    response = await client.patch("/api/seats/select", json={"booking_id": b, "seat_id": 5})
    assert response.status_code == 409
    assert response.json() == {"error": "Failed to add seat to booking"}

    response = await client.patch("/api/seats/release", json={"seat_id": 5})
    assert response.status_code == 200
    assert response.json() == "Seat successfully released"

    response = await client.patch("/api/seats/select", json={"booking_id": b, "seat_id": 5})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_concurrent_selection_has_one_winner(client: AsyncClient):
    """Parallel requests for the same seat: one 200, the rest 409."""
    _, booking_ids = await setup_event_with_bookings(client, bookings=10)

    responses = await asyncio.gather(*[
        client.patch("/api/seats/select", json={"booking_id": b, "seat_id": 8})
        for b in booking_ids
    ])

    codes = sorted(r.status_code for r in responses)
    assert codes == [200] + [409] * 9


@pytest.mark.asyncio
async def test_select_seat_not_found(client: AsyncClient):
    _, (a,) = await setup_event_with_bookings(client, bookings=1)

    response = await client.patch("/api/seats/select", json={"booking_id": 999, "seat_id": 1})
    assert response.status_code == 404
    assert response.json() == {"error": "Booking not found"}

    response = await client.patch("/api/seats/select", json={"booking_id": a, "seat_id": 999})
    assert response.status_code == 404
    assert response.json() == {"error": "Seat not found"}


@pytest.mark.asyncio
async def test_select_seat_of_another_event(client: AsyncClient):
    _, (a,) = await setup_event_with_bookings(client, bookings=1)
    await client.post("/api/events", json={"title": "Other Show", "external": False})

    response = await client.patch("/api/seats/select", json={"booking_id": a, "seat_id": 11})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_release_free_seat_conflicts(client: AsyncClient):
    await setup_event_with_bookings(client, bookings=0)

    response = await client.patch("/api/seats/release", json={"seat_id": 1})
    assert response.status_code == 409
    assert response.json() == {"error": "Failed to release seat"}

    response = await client.patch("/api/seats/release", json={"seat_id": 500})
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"booking_id": 1}, {"seat_id": "x", "booking_id": 1}])
async def test_select_seat_invalid_payload(client: AsyncClient, payload):
    response = await client.patch("/api/seats/select", json=payload)
    assert response.status_code == 422
