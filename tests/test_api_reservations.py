"""Tests for the reservation HTTP endpoints"""

from uuid import uuid4

import pytest

from tests.conftest import _add_accommodation, auth_headers

BASE = "/api/v1/reservations"


async def create(client, user, accommodation, start="2025-06-10", end="2025-06-15", **extra):
    payload = {
        "accommodation_id": str(accommodation.id),
        "start_date": start,
        "end_date": end,
        "guest_count": 2,
        **extra,
    }
    return await client.post(f"{BASE}/", json=payload, headers=auth_headers(user))


class TestCreate:
    async def test_create(self, client, guest, accommodation):
        response = await create(client, guest, accommodation)

        assert response.status_code == 201
        data = response.json()
        assert data["state"] == "pending"
        assert data["guest_id"] == str(guest.id)
        assert data["nights"] == 5
        assert data["confirmed_at"] is None
        assert "X-Request-ID" in response.headers
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    async def test_conflict(self, client, guest, other_guest, accommodation):
        await create(client, guest, accommodation)

        response = await create(client, other_guest, accommodation, "2025-06-12", "2025-06-20")

        assert response.status_code == 409
        assert response.json() == {"detail": "dates unavailable", "kind": "conflict"}

    async def test_back_to_back(self, client, guest, other_guest, accommodation):
        await create(client, guest, accommodation)

        response = await create(client, other_guest, accommodation, "2025-06-15", "2025-06-18")

        assert response.status_code == 201

    async def test_inverted_dates(self, client, guest, accommodation):
        response = await create(client, guest, accommodation, "2025-06-15", "2025-06-10")

        assert response.status_code == 400
        assert response.json() == {
            "detail": "End date must be after start date",
            "kind": "validation_error",
        }

    @pytest.mark.parametrize("guest_count", [0, -2])
    async def test_non_positive_guest_count(self, client, guest, accommodation, guest_count):
        response = await create(client, guest, accommodation, guest_count=guest_count)

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

    async def test_large_party_within_capacity(self, client, session_factory, guest, host):
        lodge = await _add_accommodation(session_factory, host, capacity=100)

        response = await create(client, guest, lodge, guest_count=60)

        assert response.status_code == 201
        assert response.json()["guest_count"] == 60

    async def test_over_capacity(self, client, guest, accommodation):
        response = await create(client, guest, accommodation, guest_count=9)

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

    async def test_on_behalf_of_another_guest(self, client, guest, other_guest, accommodation):
        response = await create(client, guest, accommodation, guest_id=str(other_guest.id))

        assert response.status_code == 403
        assert response.json()["kind"] == "forbidden"

    async def test_admin_on_behalf_of_guest(self, client, admin, guest, accommodation):
        response = await create(client, admin, accommodation, guest_id=str(guest.id))

        assert response.status_code == 201
        assert response.json()["guest_id"] == str(guest.id)

    async def test_unknown_accommodation(self, client, guest):
        payload = {
            "accommodation_id": str(uuid4()),
            "start_date": "2025-06-10",
            "end_date": "2025-06-15",
        }
        response = await client.post(f"{BASE}/", json=payload, headers=auth_headers(guest))

        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"


class TestAuthentication:
    async def test_missing_credentials(self, client, accommodation):
        response = await client.get(f"{BASE}/")

        assert response.status_code in (401, 403)

    async def test_invalid_token(self, client):
        response = await client.get(f"{BASE}/", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["kind"] == "authentication_error"

    async def test_deactivated_account(self, client, inactive_guest):
        response = await client.get(f"{BASE}/", headers=auth_headers(inactive_guest))

        assert response.status_code == 401


class TestRead:
    async def test_get_visibility(self, client, guest, other_guest, host, other_host, admin, accommodation):
        reservation_id = (await create(client, guest, accommodation)).json()["id"]
        url = f"{BASE}/{reservation_id}"

        for user in (guest, host, admin):
            assert (await client.get(url, headers=auth_headers(user))).status_code == 200
        for user in (other_guest, other_host):
            response = await client.get(url, headers=auth_headers(user))
            assert response.status_code == 403

    async def test_get_missing(self, client, guest):
        response = await client.get(f"{BASE}/{uuid4()}", headers=auth_headers(guest))

        assert response.status_code == 404

    async def test_list_by_role(
        self, client, guest, other_guest, host, other_host, admin, accommodation, other_accommodation
    ):
        await create(client, guest, accommodation)
        await create(client, other_guest, other_accommodation)

        async def listed(user, params=None):
            response = await client.get(f"{BASE}/", headers=auth_headers(user), params=params)
            assert response.status_code == 200
            return response.json()

        assert (await listed(admin))["total"] == 2
        assert [r["guest_id"] for r in (await listed(guest))["reservations"]] == [str(guest.id)]
        assert [r["accommodation_id"] for r in (await listed(host))["reservations"]] == [
            str(accommodation.id)
        ]
        assert (await listed(other_host))["total"] == 1
        assert (await listed(admin, {"state": "confirmed"}))["total"] == 0

    async def test_list_guest(self, client, guest, other_guest, admin, accommodation):
        await create(client, guest, accommodation)
        url = f"{BASE}/guest/{guest.id}"

        assert (await client.get(url, headers=auth_headers(guest))).json()["total"] == 1
        assert (await client.get(url, headers=auth_headers(admin))).json()["total"] == 1
        assert (await client.get(url, headers=auth_headers(other_guest))).status_code == 403

    async def test_list_accommodation(self, client, guest, host, other_host, accommodation):
        await create(client, guest, accommodation)
        url = f"{BASE}/accommodation/{accommodation.id}"

        assert (await client.get(url, headers=auth_headers(host))).json()["total"] == 1
        assert (await client.get(url, headers=auth_headers(other_host))).status_code == 403
        assert (await client.get(url, headers=auth_headers(guest))).status_code == 403


class TestLifecycle:
    async def test_confirm_then_cancel(self, client, guest, host, accommodation):
        reservation_id = (await create(client, guest, accommodation)).json()["id"]

        response = await client.patch(
            f"{BASE}/{reservation_id}/state",
            json={"state": "confirmed"},
            headers=auth_headers(host),
        )
        assert response.status_code == 200
        assert response.json()["state"] == "confirmed"
        assert response.json()["confirmed_at"] is not None

        response = await client.post(f"{BASE}/{reservation_id}/cancel", headers=auth_headers(guest))
        assert response.status_code == 200
        assert response.json()["state"] == "cancelled"
        assert response.json()["cancelled_by"] == "guest"

    async def test_guest_cannot_confirm(self, client, guest, accommodation):
        reservation_id = (await create(client, guest, accommodation)).json()["id"]

        response = await client.patch(
            f"{BASE}/{reservation_id}/state",
            json={"state": "confirmed"},
            headers=auth_headers(guest),
        )

        assert response.status_code == 403
        assert response.json()["kind"] == "forbidden"

    async def test_reject_requires_reason(self, client, guest, host, accommodation):
        reservation_id = (await create(client, guest, accommodation)).json()["id"]
        url = f"{BASE}/{reservation_id}/state"

        response = await client.patch(url, json={"state": "rejected"}, headers=auth_headers(host))
        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

        response = await client.patch(
            url, json={"state": "rejected", "reason": "Booked offline"}, headers=auth_headers(host)
        )
        assert response.status_code == 200
        assert response.json()["rejection_reason"] == "Booked offline"

    async def test_completion_not_requestable(self, client, guest, admin, accommodation):
        reservation_id = (await create(client, guest, accommodation)).json()["id"]

        response = await client.patch(
            f"{BASE}/{reservation_id}/state",
            json={"state": "completed"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_state"

    async def test_late_cancellation(self, client, guest, host, admin, accommodation):
        reservation_id = (
            await create(client, guest, accommodation, "2025-06-02", "2025-06-05")
        ).json()["id"]
        await client.patch(
            f"{BASE}/{reservation_id}/state", json={"state": "confirmed"}, headers=auth_headers(host)
        )

        response = await client.post(f"{BASE}/{reservation_id}/cancel", headers=auth_headers(guest))
        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_state"

        response = await client.patch(
            f"{BASE}/{reservation_id}/state", json={"state": "cancelled"}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert response.json()["cancelled_by"] == "admin"

    async def test_update(self, client, guest, host, accommodation):
        reservation_id = (await create(client, guest, accommodation)).json()["id"]
        url = f"{BASE}/{reservation_id}"

        response = await client.put(url, json={"guest_count": 3}, headers=auth_headers(guest))
        assert response.status_code == 200
        assert response.json()["guest_count"] == 3

        response = await client.put(url, json={"guest_count": 0}, headers=auth_headers(guest))
        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

        await client.patch(f"{url}/state", json={"state": "confirmed"}, headers=auth_headers(host))
        response = await client.put(url, json={"guest_count": 1}, headers=auth_headers(guest))
        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_state"

    @pytest.mark.parametrize("role", ["guest", "host"])
    async def test_delete_requires_admin(self, client, guest, host, accommodation, role):
        reservation_id = (await create(client, guest, accommodation)).json()["id"]
        user = {"guest": guest, "host": host}[role]

        response = await client.delete(f"{BASE}/{reservation_id}", headers=auth_headers(user))

        assert response.status_code == 403

    async def test_admin_delete(self, client, guest, admin, accommodation):
        reservation_id = (await create(client, guest, accommodation)).json()["id"]

        response = await client.delete(f"{BASE}/{reservation_id}", headers=auth_headers(admin))
        assert response.status_code == 204

        response = await client.get(f"{BASE}/{reservation_id}", headers=auth_headers(admin))
        assert response.status_code == 404


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
