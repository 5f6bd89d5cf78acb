"""HTTP surface: routing, auth, status mapping and response payloads."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from getlost.core.security import create_access_token
from getlost.database import get_db
from getlost.main import app
from getlost.utils.ticket_code import is_valid_ticket_code
from tests.conftest import auth_headers, make_window

API = "/api/v1"


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["database"] == "ok"
    assert "X-Request-ID" in response.headers
    assert response.headers["X-Content-Type-Options"] == "nosniff"


class _UnreachableSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, ConnectionRefusedError("db down"))

    async def rollback(self):
        pass


@pytest.mark.asyncio
async def test_health_reports_unreachable_database(client):
    app.dependency_overrides[get_db] = _UnreachableSession

    response = await client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unavailable"


@pytest.mark.asyncio
async def test_requests_need_a_valid_token(client, seed):
    assert (await client.get(f"{API}/bookings/my")).status_code in (401, 403)

    bad = await client.get(f"{API}/bookings/my", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401

    ghost = {"Authorization": f"Bearer {create_access_token({'sub': '9999'})}"}
    assert (await client.get(f"{API}/bookings/my", headers=ghost)).status_code == 401


@pytest.mark.asyncio
async def test_availability_crud(client, seed):
    agency = auth_headers(seed.agency_user)
    start = datetime(2026, 9, 1, 8, 0)

    created = await client.post(
        f"{API}/services/{seed.service.id}/availability",
        json={
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=3)).isoformat(),
            "capacity": 8,
        },
        headers=agency,
    )
    assert created.status_code == 201
    window = created.json()
    assert window["capacity"] == 8
    assert window["remaining_spots"] == 8

    listed = await client.get(f"{API}/services/{seed.service.id}/availability")
    assert listed.status_code == 200
    assert [w["id"] for w in listed.json()["availability"]] == [window["id"]]

    moved = await client.put(
        f"{API}/services/{seed.service.id}/availability/{window['id']}",
        json={
            "start_date": (start + timedelta(days=7)).isoformat(),
            "end_date": (start + timedelta(days=9)).isoformat(),
        },
        headers=agency,
    )
    assert moved.status_code == 200
    assert moved.json()["capacity"] == 8

    deleted = await client.delete(
        f"{API}/services/{seed.service.id}/availability/{window['id']}", headers=agency
    )
    assert deleted.status_code == 204
    listed = await client.get(f"{API}/services/{seed.service.id}/availability")
    assert listed.json()["availability"] == []


@pytest.mark.asyncio
async def test_availability_input_and_ownership_errors(client, seed):
    start = datetime(2026, 9, 1, tzinfo=UTC)
    body = {
        "start_date": start.isoformat(),
        "end_date": (start - timedelta(days=1)).isoformat(),
        "capacity": 2,
    }

    backwards = await client.post(
        f"{API}/services/{seed.service.id}/availability",
        json=body,
        headers=auth_headers(seed.agency_user),
    )
    assert backwards.status_code == 422

    body["end_date"] = (start + timedelta(days=1)).isoformat()
    foreign = await client.post(
        f"{API}/services/{seed.service.id}/availability",
        json=body,
        headers=auth_headers(seed.rival_user),
    )
    assert foreign.status_code == 403

    missing = await client.get(f"{API}/services/9999/availability")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_book_and_fetch_ticket(client, db, seed):
    await make_window(db, seed.service, capacity=1)
    customer = auth_headers(seed.customer)

    booked = await client.post(f"{API}/services/{seed.service.id}/book", headers=customer)
    assert booked.status_code == 201
    booking = booked.json()
    assert booking["status"] == "pending"
    assert booking["service"]["title"] == "Wadi Rum Overnight"
    assert is_valid_ticket_code(booking["eticket"]["ticket_code"], booking_id=booking["id"])

    ticket = await client.get(f"{API}/bookings/{booking['id']}/eticket", headers=customer)
    assert ticket.status_code == 200
    assert ticket.json()["ticket_code"] == booking["eticket"]["ticket_code"]

    sold_out = await client.post(
        f"{API}/services/{seed.service.id}/book", headers=auth_headers(seed.other_customer)
    )
    assert sold_out.status_code == 400
    assert sold_out.json() == {"detail": "No available slots for this service"}


@pytest.mark.asyncio
async def test_window_with_active_booking_cannot_be_deleted(client, db, seed):
    window = await make_window(db, seed.service)
    await client.post(f"{API}/services/{seed.service.id}/book", headers=auth_headers(seed.customer))

    response = await client.delete(
        f"{API}/services/{seed.service.id}/availability/{window.id}",
        headers=auth_headers(seed.agency_user),
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_booking_lifecycle_over_http(client, db, seed):
    await make_window(db, seed.service, capacity=2)
    customer = auth_headers(seed.customer)
    agency = auth_headers(seed.agency_user)

    booking_id = (
        await client.post(f"{API}/services/{seed.service.id}/book", headers=customer)
    ).json()["id"]

    assert (await client.post(f"{API}/bookings/{booking_id}/confirm", headers=customer)).status_code == 403
    assert (
        await client.post(f"{API}/bookings/{booking_id}/confirm", headers=auth_headers(seed.rival_user))
    ).status_code == 403

    confirmed = await client.post(f"{API}/bookings/{booking_id}/confirm", headers=agency)
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"

    completed = await client.post(f"{API}/bookings/{booking_id}/complete", headers=agency)
    assert completed.json()["status"] == "completed"

    cancel = await client.post(f"{API}/bookings/{booking_id}/cancel", headers=customer)
    assert cancel.status_code == 400

    missing = await client.post(f"{API}/bookings/9999/confirm", headers=agency)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_booking_listings(client, db, seed):
    await make_window(db, seed.service, capacity=3)
    await client.post(f"{API}/services/{seed.service.id}/book", headers=auth_headers(seed.customer))

    mine = await client.get(f"{API}/bookings/my", headers=auth_headers(seed.customer))
    assert mine.json()["total"] == 1

    theirs = await client.get(f"{API}/bookings/my", headers=auth_headers(seed.other_customer))
    assert theirs.json()["total"] == 0

    agency = await client.get(f"{API}/bookings/agency", headers=auth_headers(seed.agency_user))
    assert agency.json()["total"] == 1

    admin = await client.get(f"{API}/bookings/all", headers=auth_headers(seed.admin))
    assert admin.json()["total"] == 1

    forbidden = await client.get(f"{API}/bookings/all", headers=auth_headers(seed.customer))
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_refund_dispute_over_http(client, db, seed):
    await make_window(db, seed.service)
    customer = auth_headers(seed.customer)
    agency = auth_headers(seed.agency_user)
    admin = auth_headers(seed.admin)

    booking_id = (
        await client.post(f"{API}/services/{seed.service.id}/book", headers=customer)
    ).json()["id"]

    too_early = await client.post(
        f"{API}/bookings/{booking_id}/refund", json={"reason": "Changed plans"}, headers=customer
    )
    assert too_early.status_code == 400

    await client.post(f"{API}/bookings/{booking_id}/confirm", headers=agency)
    opened = await client.post(
        f"{API}/bookings/{booking_id}/refund",
        json={"reason": "Camp was overbooked", "customer_explanation": "Slept in the jeep"},
        headers=customer,
    )
    assert opened.status_code == 201
    dispute = opened.json()
    assert dispute["status"] == "open"

    responded = await client.post(
        f"{API}/refunds/{dispute['id']}/respond", json={"response": "We apologise"}, headers=agency
    )
    assert responded.json()["status"] == "agency_responded"

    not_admin = await client.post(
        f"{API}/refunds/{dispute['id']}/verdict", json={"verdict": "Refund"}, headers=agency
    )
    assert not_admin.status_code == 403

    resolved = await client.post(
        f"{API}/refunds/{dispute['id']}/verdict", json={"verdict": "Refund 50%"}, headers=admin
    )
    assert resolved.status_code == 200
    assert resolved.json()["status"] == "resolved"
    assert resolved.json()["resolved_by"] == seed.admin.id

    listed = await client.get(f"{API}/refunds/", headers=customer)
    assert listed.json()["total"] == 1
    hidden = await client.get(f"{API}/refunds/{dispute['id']}", headers=auth_headers(seed.rival_user))
    assert hidden.status_code == 403


@pytest.mark.asyncio
async def test_service_catalog_over_http(client, seed):
    agency = auth_headers(seed.agency_user)

    created = await client.post(
        f"{API}/services/",
        json={"title": "Jerash Ruins Day Trip", "price": "45.00", "location": "Jerash", "duration": 1},
        headers=agency,
    )
    assert created.status_code == 201
    service = created.json()
    assert service["agency_id"] == seed.agency.id
    assert service["created_at"].endswith(("Z", "+00:00"))

    browsed = await client.get(f"{API}/services/", params={"location": "jerash"})
    assert browsed.status_code == 200
    assert browsed.json()["total"] == 1
    assert browsed.json()["services"][0]["id"] == service["id"]

    fetched = await client.get(f"{API}/services/{service['id']}")
    assert fetched.json()["title"] == "Jerash Ruins Day Trip"

    mine = await client.get(f"{API}/services/my", headers=agency)
    assert {s["id"] for s in mine.json()} == {service["id"], seed.service.id}

    renamed = await client.put(
        f"{API}/services/{service['id']}", json={"title": "Jerash and Ajloun"}, headers=agency
    )
    assert renamed.status_code == 200
    assert renamed.json()["title"] == "Jerash and Ajloun"
    assert renamed.json()["location"] == "Jerash"

    deleted = await client.delete(f"{API}/services/{service['id']}", headers=agency)
    assert deleted.status_code == 204
    assert (await client.get(f"{API}/services/{service['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_service_catalog_permissions(client, db, seed):
    body = {"title": "Camel Trek", "price": "120.00", "location": "Merzouga"}

    customer = await client.post(f"{API}/services/", json=body, headers=auth_headers(seed.customer))
    assert customer.status_code == 403

    admin_without_agency = await client.post(f"{API}/services/", json=body, headers=auth_headers(seed.admin))
    assert admin_without_agency.status_code == 422

    admin = await client.post(
        f"{API}/services/", json={**body, "agency_id": seed.rival.id}, headers=auth_headers(seed.admin)
    )
    assert admin.status_code == 201
    assert admin.json()["agency_id"] == seed.rival.id

    foreign = await client.put(
        f"{API}/services/{seed.service.id}", json={"price": "1.00"}, headers=auth_headers(seed.rival_user)
    )
    assert foreign.status_code == 403

    await make_window(db, seed.service)
    await client.post(f"{API}/services/{seed.service.id}/book", headers=auth_headers(seed.customer))
    booked = await client.delete(f"{API}/services/{seed.service.id}", headers=auth_headers(seed.agency_user))
    assert booked.status_code == 409

    not_agency = await client.get(f"{API}/services/my", headers=auth_headers(seed.admin))
    assert not_agency.status_code == 403


@pytest.mark.asyncio
async def test_response_timestamps_carry_utc_offset(client, db, seed):
    await make_window(db, seed.service)
    customer = auth_headers(seed.customer)

    booking = (await client.post(f"{API}/services/{seed.service.id}/book", headers=customer)).json()
    await client.post(f"{API}/bookings/{booking['id']}/confirm", headers=auth_headers(seed.agency_user))
    dispute = (
        await client.post(
            f"{API}/bookings/{booking['id']}/refund", json={"reason": "Tent leaked"}, headers=customer
        )
    ).json()
    await client.post(
        f"{API}/refunds/{dispute['id']}/verdict", json={"verdict": "Refund 20%"}, headers=auth_headers(seed.admin)
    )

    stored = (await client.get(f"{API}/refunds/{dispute['id']}", headers=customer)).json()
    assert stored["opened_at"].endswith(("Z", "+00:00"))
    assert stored["resolved_at"].endswith(("Z", "+00:00"))

    fetched = (await client.get(f"{API}/bookings/{booking['id']}", headers=customer)).json()
    for field in ("booking_date", "confirmed_at"):
        assert fetched[field].endswith(("Z", "+00:00"))
    assert fetched["eticket"]["issued_at"].endswith(("Z", "+00:00"))

    window = (await client.get(f"{API}/services/{seed.service.id}/availability")).json()["availability"][0]
    assert window["start_date"].endswith(("Z", "+00:00"))
