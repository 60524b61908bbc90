"""
Integration tests for the REST API endpoints.

Uses an in-memory SQLite database and a mocked Redis (see ``conftest.py``).
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from httpx import AsyncClient

from ridealong.infrastructure.repositories import BookingRepository
from tests.conftest import DRIVER_ID, OTHER_PASSENGER_ID, PASSENGER_ID

WUSE = {"landmark": "Berger Junction", "area": "Wuse", "state": "Abuja FCT"}
CBD = {
    "landmark": "CBN Headquarters",
    "area": "Central Business District",
    "state": "Abuja FCT",
}
GWARINPA = {"landmark": "Shoprite Mall", "area": "Gwarinpa", "state": "Abuja FCT"}
VICTORIA_ISLAND = {
    "landmark": "Lagos Island",
    "area": "Victoria Island",
    "state": "Lagos",
}


def _ride(**overrides) -> dict:
    body = {
        "driver_id": DRIVER_ID,
        "origin": WUSE,
        "destination": CBD,
        "departure_date": "2030-01-15",
        "departure_time": "08:00",
        "total_seats": 4,
        "base_price_per_seat": 1000,
        "allows_luggage": True,
        "luggage_price": 300,
    }
    body.update(overrides)
    return body


def _interstate_ride(**overrides) -> dict:
    return _ride(
        origin=VICTORIA_ISLAND,
        destination=WUSE,
        departure_date="2030-01-16",
        departure_time="07:15",
        base_price_per_seat=8500,
        luggage_price=1000,
        **overrides,
    )


async def _post(client: AsyncClient, body: dict) -> dict:
    resp = await client.post("/api/v1/rides", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _book(client: AsyncClient, ride_id: int, **fields):
    body = {"passenger_id": PASSENGER_ID, "seats": 1}
    body.update(fields)
    return await client.post(f"/api/v1/rides/{ride_id}/bookings", json=body)


# ── Admin ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_pricing_policy(client: AsyncClient):
    resp = await client.get("/api/v1/admin/pricing-policy")
    assert resp.status_code == 200
    assert resp.json() == {
        "commission_rate": 0.15,
        "max_discount_rate": 0.05,
        "rounding_unit": 50,
        "default_luggage_price": 200,
        "currency": "NGN",
    }


# ── Posting rides ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_post_ride_returns_live_price(client: AsyncClient):
    data = await _post(client, _ride())
    assert data["status"] == "ACTIVE"
    assert data["booked_seats"] == 0
    assert data["available_seats"] == 4
    assert data["current_price_per_seat"] == 1000
    assert data["discount_percentage"] == 0
    assert data["driver_earnings_per_seat"] == 850
    assert data["is_interstate"] is False
    assert data["luggage_price"] == 300


@pytest.mark.asyncio
async def test_post_ride_derives_interstate(client: AsyncClient):
    data = await _post(client, _interstate_ride())
    assert data["is_interstate"] is True


@pytest.mark.asyncio
async def test_luggage_price_defaults_when_allowed(client: AsyncClient):
    data = await _post(client, _ride(luggage_price=None))
    assert data["luggage_price"] == 200


@pytest.mark.asyncio
async def test_luggage_price_dropped_when_not_allowed(client: AsyncClient):
    data = await _post(client, _ride(allows_luggage=False))
    assert data["luggage_price"] is None


@pytest.mark.asyncio
async def test_post_ride_unknown_driver(client: AsyncClient):
    resp = await client.post("/api/v1/rides", json=_ride(driver_id=999))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_post_ride_without_seats_rejected(client: AsyncClient):
    resp = await client.post("/api/v1/rides", json=_ride(total_seats=0))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_ride_not_found(client: AsyncClient):
    resp = await client.get("/api/v1/rides/9999")
    assert resp.status_code == 404


# ── Search ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_search_filters(client: AsyncClient):
    morning = await _post(client, _ride())
    evening = await _post(
        client,
        _ride(
            origin=GWARINPA,
            departure_time="17:30",
            total_seats=3,
            base_price_per_seat=800,
            allows_luggage=False,
        ),
    )
    interstate = await _post(client, _interstate_ride())

    async def ids(**params):
        resp = await client.get("/api/v1/rides", params=params)
        assert resp.status_code == 200
        return [r["id"] for r in resp.json()]

    assert await ids() == [morning["id"], evening["id"], interstate["id"]]
    assert await ids(from_state="abuja") == [morning["id"], evening["id"]]
    assert await ids(from_area="gwar") == [evening["id"]]
    assert await ids(has_luggage=True) == [morning["id"], interstate["id"]]
    assert await ids(passengers=4) == [morning["id"], interstate["id"]]
    assert await ids(date="2030-01-15", time="09:00") == [evening["id"]]
    assert await ids(interstate=True) == [interstate["id"]]


@pytest.mark.asyncio
async def test_search_estimates_total_with_luggage(client: AsyncClient):
    await _post(client, _ride())
    resp = await client.get(
        "/api/v1/rides", params={"passengers": 2, "has_luggage": True}
    )
    (ride,) = resp.json()
    assert ride["estimated_total"] == 2300


# ── Booking ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_booking_settles_payment_and_discounts_next_passenger(
    client: AsyncClient,
):
    ride = await _post(client, _interstate_ride())

    first = await _book(client, ride["id"], seats=2, has_luggage=True)
    assert first.status_code == 201, first.text
    data = first.json()
    assert data["price_per_seat"] == 8500
    assert data["luggage_fee"] == 1000
    assert data["total_amount"] == 18000
    assert data["platform_fee"] == 2700
    assert data["driver_earnings"] == 15300
    assert data["payment_status"] == "PAID"

    after = (await client.get(f"/api/v1/rides/{ride['id']}")).json()
    assert after["booked_seats"] == 2
    assert after["current_price_per_seat"] == 8300
    assert after["discount_percentage"] == 2

    second = await _book(
        client, ride["id"], passenger_id=OTHER_PASSENGER_ID, seats=2
    )
    data = second.json()
    assert data["price_per_seat"] == 8300
    assert data["total_amount"] == 16600
    assert data["platform_fee"] + data["driver_earnings"] == 16600


@pytest.mark.asyncio
async def test_last_seat_fills_ride_and_hides_it(client: AsyncClient):
    ride = await _post(client, _ride(total_seats=2))
    resp = await _book(client, ride["id"], seats=2)
    assert resp.status_code == 201

    full = (await client.get(f"/api/v1/rides/{ride['id']}")).json()
    assert full["status"] == "FULL"
    assert full["available_seats"] == 0
    assert (await client.get("/api/v1/rides")).json() == []

    again = await _book(client, ride["id"], passenger_id=OTHER_PASSENGER_ID)
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_overbooking_rejected(client: AsyncClient):
    ride = await _post(client, _ride(total_seats=3))
    resp = await _book(client, ride["id"], seats=4)
    assert resp.status_code == 409
    assert "3 seat(s) available" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_luggage_on_ride_without_space_rejected(client: AsyncClient):
    ride = await _post(client, _ride(allows_luggage=False))
    resp = await _book(client, ride["id"], has_luggage=True)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_booking_unknown_ride_or_passenger(client: AsyncClient):
    assert (await _book(client, 9999)).status_code == 404
    ride = await _post(client, _ride())
    assert (await _book(client, ride["id"], passenger_id=999)).status_code == 404


@pytest.mark.asyncio
async def test_idempotency_key(client: AsyncClient):
    ride = await _post(client, _ride())
    resp1 = await _book(client, ride["id"], seats=2, idempotency_key="pay-123")
    resp2 = await _book(client, ride["id"], seats=2, idempotency_key="pay-123")
    assert resp1.json()["id"] == resp2.json()["id"]

    after = (await client.get(f"/api/v1/rides/{ride['id']}")).json()
    assert after["booked_seats"] == 2


@pytest.mark.asyncio
async def test_idempotent_retry_rechecked_under_lock(client: AsyncClient):
    """A retry that read no booking before the lock still gets the original."""
    ride = await _post(client, _ride())
    first = await _book(client, ride["id"], seats=2, idempotency_key="pay-race")

    lookup = BookingRepository.get_by_idempotency_key
    calls = []

    async def stale_then_fresh(self, key):
        calls.append(key)
        if len(calls) == 1:
            return None
        return await lookup(self, key)

    with patch.object(
        BookingRepository, "get_by_idempotency_key", stale_then_fresh
    ):
        retry = await _book(client, ride["id"], seats=2, idempotency_key="pay-race")

    assert retry.status_code == 201
    assert retry.json()["id"] == first.json()["id"]
    assert len(calls) == 2
    after = (await client.get(f"/api/v1/rides/{ride['id']}")).json()
    assert after["booked_seats"] == 2


@pytest.mark.asyncio
async def test_idempotency_key_reused_on_another_ride(client: AsyncClient):
    ride_a = await _post(client, _ride())
    ride_b = await _post(client, _ride(departure_time="09:00"))
    await _book(client, ride_a["id"], idempotency_key="pay-456")

    resp = await _book(client, ride_b["id"], idempotency_key="pay-456")
    assert resp.status_code == 409
    assert "already used" in resp.json()["detail"]

    after = (await client.get(f"/api/v1/rides/{ride_b['id']}")).json()
    assert after["booked_seats"] == 0


@pytest.mark.asyncio
async def test_idempotency_key_reused_by_another_passenger(client: AsyncClient):
    ride = await _post(client, _ride())
    await _book(client, ride["id"], idempotency_key="pay-789")

    resp = await _book(
        client, ride["id"], passenger_id=OTHER_PASSENGER_ID, idempotency_key="pay-789"
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_duplicate_key_insert_conflicts_instead_of_failing(
    client: AsyncClient,
):
    """Both key lookups miss; the unique constraint still yields a 409."""
    ride_a = await _post(client, _ride())
    ride_b = await _post(client, _ride(departure_time="09:00"))
    await _book(client, ride_a["id"], idempotency_key="pay-dup")

    async def never_found(self, key):
        return None

    with patch.object(BookingRepository, "get_by_idempotency_key", never_found):
        resp = await _book(client, ride_b["id"], idempotency_key="pay-dup")

    assert resp.status_code == 409
    after = (await client.get(f"/api/v1/rides/{ride_b['id']}")).json()
    assert after["booked_seats"] == 0


@pytest.mark.asyncio
async def test_booking_while_locked_conflicts(client: AsyncClient, fake_redis):
    ride = await _post(client, _ride())
    fake_redis.set.return_value = False
    resp = await _book(client, ride["id"])
    assert resp.status_code == 409
    assert "retry" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_cancel_booking_restores_seats(client: AsyncClient):
    ride = await _post(client, _ride(total_seats=2))
    booking = (await _book(client, ride["id"], seats=2)).json()

    resp = await client.patch(f"/api/v1/bookings/{booking['id']}/cancel")
    assert resp.status_code == 200
    assert resp.json()["payment_status"] == "REFUNDED"

    after = (await client.get(f"/api/v1/rides/{ride['id']}")).json()
    assert after["status"] == "ACTIVE"
    assert after["booked_seats"] == 0

    twice = await client.patch(f"/api/v1/bookings/{booking['id']}/cancel")
    assert twice.status_code == 409


@pytest.mark.asyncio
async def test_cancel_booking_on_completed_ride_fails(client: AsyncClient):
    ride = await _post(client, _ride())
    booking = (await _book(client, ride["id"])).json()
    await client.patch(f"/api/v1/rides/{ride['id']}/complete")

    resp = await client.patch(f"/api/v1/bookings/{booking['id']}/cancel")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_cancel_booking_not_found(client: AsyncClient):
    resp = await client.patch("/api/v1/bookings/9999/cancel")
    assert resp.status_code == 404


# ── Ride lifecycle ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_cancel_ride_refunds_bookings(client: AsyncClient):
    ride = await _post(client, _ride())
    await _book(client, ride["id"], seats=1)
    await _book(client, ride["id"], passenger_id=OTHER_PASSENGER_ID, seats=2)

    resp = await client.patch(f"/api/v1/rides/{ride['id']}/cancel")
    assert resp.status_code == 200
    assert resp.json()["status"] == "CANCELLED"

    bookings = (await client.get(f"/api/v1/rides/{ride['id']}/bookings")).json()
    assert len(bookings) == 2
    assert {b["payment_status"] for b in bookings} == {"REFUNDED"}

    assert (await _book(client, ride["id"])).status_code == 409


@pytest.mark.asyncio
async def test_cancel_already_cancelled_ride_fails(client: AsyncClient):
    ride = await _post(client, _ride())
    await client.patch(f"/api/v1/rides/{ride['id']}/cancel")
    resp = await client.patch(f"/api/v1/rides/{ride['id']}/cancel")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_complete_ride(client: AsyncClient):
    ride = await _post(client, _ride())
    resp = await client.patch(f"/api/v1/rides/{ride['id']}/complete")
    assert resp.status_code == 200
    assert resp.json()["status"] == "COMPLETED"


# ── Pricing previews ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_quote(client: AsyncClient):
    resp = await client.get(
        "/api/v1/pricing/quote",
        params={"base_price_per_seat": 8500, "total_seats": 4, "booked_seats": 2},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["current_price_per_seat"] == 8300
    assert data["occupancy_rate"] == 0.5
    assert data["discount_percentage"] == 2


@pytest.mark.asyncio
async def test_quote_overbooked_is_unprocessable(client: AsyncClient):
    resp = await client.get(
        "/api/v1/pricing/quote",
        params={"base_price_per_seat": 1000, "total_seats": 4, "booked_seats": 5},
    )
    assert resp.status_code == 422
    assert "exceeds" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_schedule(client: AsyncClient):
    resp = await client.get(
        "/api/v1/pricing/schedule",
        params={"base_price_per_seat": 800, "total_seats": 3},
    )
    assert [q["current_price_per_seat"] for q in resp.json()] == [800, 800, 750, 750]
    assert [q["booked_seats"] for q in resp.json()] == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_allocation(client: AsyncClient):
    resp = await client.post(
        "/api/v1/pricing/allocation",
        json={"price_per_seat": 1000, "seats_booked": 2, "luggage_fee": 300},
    )
    assert resp.json() == {
        "total_amount": 2300,
        "platform_fee": 345,
        "driver_earnings": 1955,
        "currency": "NGN",
    }


@pytest.mark.asyncio
async def test_allocation_requires_a_seat(client: AsyncClient):
    resp = await client.post(
        "/api/v1/pricing/allocation",
        json={"price_per_seat": 1000, "seats_booked": 0},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_earnings_preview(client: AsyncClient):
    resp = await client.get(
        "/api/v1/pricing/earnings-preview", params={"price_per_seat": 1000}
    )
    data = resp.json()
    assert data["driver_earnings"] == 850
    assert data["platform_fee"] == 150
    assert data["commission_rate"] == 0.15


@pytest.mark.asyncio
async def test_pricing_advice(client: AsyncClient):
    resp = await client.post(
        "/api/v1/pricing/advice",
        json={"distance_km": 12, "duration_minutes": 25, "is_interstate": False},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert [s["tier"] for s in data] == ["ECONOMY", "STANDARD", "PREMIUM"]
    assert [s["price_per_seat"] for s in data] == [450, 550, 750]


@pytest.mark.asyncio
async def test_openapi_documents_error_bodies(client: AsyncClient):
    schema = (await client.get("/openapi.json")).json()
    assert "ErrorResponse" in schema["components"]["schemas"]
    booking = schema["paths"]["/api/v1/rides/{ride_id}/bookings"]["post"]
    assert booking["responses"]["409"]["content"]["application/json"]["schema"] == {
        "$ref": "#/components/schemas/ErrorResponse"
    }
