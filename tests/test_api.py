"""
End-to-end tests through the FastAPI app with a SQLite database and a frozen clock.
"""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from appointly.api.deps import get_clock
from appointly.core.db import get_session
from appointly.main import app


@pytest.fixture
async def client(session_maker, clock):
    async def _get_test_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_test_session
    app.dependency_overrides[get_clock] = lambda: clock
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def auth_headers(client) -> dict[str, str]:
    resp = await client.post(
        "/api/v1/auth/signup",
        json={"name": "Grace Hopper", "email": "grace@example.com", "password": "correct-horse"},
    )
    assert resp.status_code == 201, resp.text
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": "grace@example.com", "password": "correct-horse"},
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


MONDAY_RULE = {
    "weekday": 1,
    "start_time": "09:00",
    "end_time": "17:00",
    "interval_minutes": 30,
    "timezone": "America/New_York",
}


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestAuth:

    async def test_duplicate_signup(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/auth/signup",
            json={"name": "Grace", "email": "grace@example.com", "password": "another-pass"},
        )
        assert resp.status_code == 409

    async def test_bad_password(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/auth/login", json={"email": "grace@example.com", "password": "wrong-horse"}
        )
        assert resp.status_code == 401

    async def test_me(self, client, auth_headers):
        resp = await client.get("/api/v1/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["email"] == "grace@example.com"

    async def test_protected_routes_need_token(self, client):
        assert (await client.get("/api/v1/availability")).status_code == 401
        resp = await client.get("/api/v1/slots", params={"from": "2026-06-15", "to": "2026-06-15"})
        assert resp.status_code == 401


class TestAvailability:

    async def test_create_list_delete(self, client, auth_headers):
        resp = await client.post("/api/v1/availability", json=MONDAY_RULE, headers=auth_headers)
        assert resp.status_code == 201, resp.text
        rule = resp.json()
        assert rule["start_time"] == "09:00:00"

        resp = await client.get("/api/v1/availability", headers=auth_headers)
        assert resp.json()["count"] == 1

        resp = await client.delete(f"/api/v1/availability/{rule['id']}", headers=auth_headers)
        assert resp.status_code == 204
        resp = await client.delete(f"/api/v1/availability/{rule['id']}", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["code"] == "rule_not_found"

    async def test_duplicate_weekday(self, client, auth_headers):
        await client.post("/api/v1/availability", json=MONDAY_RULE, headers=auth_headers)
        resp = await client.post("/api/v1/availability", json=MONDAY_RULE, headers=auth_headers)
        assert resp.status_code == 409
        assert resp.json()["code"] == "rule_already_exists"

    async def test_end_before_start(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/availability",
            json={**MONDAY_RULE, "start_time": "17:00", "end_time": "09:00"},
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == "invalid_rule"

    async def test_unknown_timezone(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/availability", json={**MONDAY_RULE, "timezone": "Moon/Base"}, headers=auth_headers
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == "unknown_timezone"

    async def test_shape_validation(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/availability", json={**MONDAY_RULE, "interval_minutes": 5}, headers=auth_headers
        )
        assert resp.status_code == 422


class TestSlotsAndBookings:

    async def _setup_rule(self, client, auth_headers):
        resp = await client.post("/api/v1/availability", json=MONDAY_RULE, headers=auth_headers)
        assert resp.status_code == 201

    async def test_list_slots(self, client, auth_headers):
        await self._setup_rule(client, auth_headers)
        resp = await client.get(
            "/api/v1/slots", params={"from": "2026-06-14", "to": "2026-06-20"}, headers=auth_headers
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 16
        assert body["host_timezone"] == "America/New_York"
        first = body["slots"][0]
        assert first["start_local"] == "2026-06-15 09:00:00"
        assert first["duration_minutes"] == 30
        assert datetime.fromisoformat(first["start"]) == datetime(2026, 6, 15, 13, 0, tzinfo=UTC)

    async def test_range_too_wide(self, client, auth_headers):
        await self._setup_rule(client, auth_headers)
        resp = await client.get(
            "/api/v1/slots", params={"from": "2026-06-01", "to": "2026-06-30"}, headers=auth_headers
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "date_range_too_wide"

    async def test_book_list_cancel_flow(self, client, auth_headers):
        await self._setup_rule(client, auth_headers)
        slots = (await client.get(
            "/api/v1/slots", params={"from": "2026-06-15", "to": "2026-06-15"}, headers=auth_headers
        )).json()["slots"]
        slot = slots[2]

        booking_body = {
            "name": "Alan Turing",
            "email": "alan@example.com",
            "slot_start": slot["start"],
            "slot_end": slot["end"],
        }
        resp = await client.post("/api/v1/bookings", json=booking_body, headers=auth_headers)
        assert resp.status_code == 201, resp.text
        booking = resp.json()["booking"]
        assert booking["status"] == "confirmed"
        assert len(booking["cancel_code"]) == 6

        # the slot is gone from the available list
        slots_after = (await client.get(
            "/api/v1/slots", params={"from": "2026-06-15", "to": "2026-06-15"}, headers=auth_headers
        )).json()
        assert slots_after["count"] == 15

        resp = await client.post("/api/v1/bookings", json=booking_body, headers=auth_headers)
        assert resp.status_code == 409
        assert resp.json()["code"] == "slot_already_booked"

        listed = (await client.get("/api/v1/bookings", headers=auth_headers)).json()
        assert listed["count"] == 1
        assert "cancel_code" not in listed["bookings"][0]

        cancel = {"booking_id": booking["public_id"], "cancel_code": booking["cancel_code"].lower()}
        resp = await client.post("/api/v1/bookings/cancel", json=cancel)
        assert resp.status_code == 401
        assert resp.json()["code"] == "invalid_cancel_code"

        cancel["cancel_code"] = booking["cancel_code"]
        resp = await client.post("/api/v1/bookings/cancel", json=cancel)
        assert resp.status_code == 200, resp.text
        assert resp.json()["booking_id"] == booking["public_id"]

        resp = await client.post("/api/v1/bookings/cancel", json=cancel)
        assert resp.status_code == 400
        assert resp.json()["code"] == "already_cancelled"

    async def test_booking_needs_offset(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/bookings",
            json={
                "name": "Alan Turing",
                "email": "alan@example.com",
                "slot_start": "2026-06-15T13:00:00",
                "slot_end": "2026-06-15T13:30:00",
            },
            headers=auth_headers,
        )
        assert resp.status_code == 422

    async def test_lead_time_violation(self, client, auth_headers, clock):
        start = clock() + timedelta(hours=1)
        resp = await client.post(
            "/api/v1/bookings",
            json={
                "name": "Alan Turing",
                "email": "alan@example.com",
                "slot_start": start.isoformat(),
                "slot_end": (start + timedelta(minutes=30)).isoformat(),
            },
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "lead_time_too_short"

    async def test_cancel_unknown_booking(self, client):
        resp = await client.post(
            "/api/v1/bookings/cancel",
            json={"booking_id": "00000000-0000-4000-8000-000000000000", "cancel_code": "ABC123"},
        )
        assert resp.status_code == 404
        assert resp.json()["code"] == "reservation_not_found"
