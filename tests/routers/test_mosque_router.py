"""Tests for the mosque admin router."""

import pytest
from fastapi.testclient import TestClient

from mosque_dashboard.exceptions import BackendError

PRAYER_TIMES = {
    "fajr": "05:00 AM",
    "dhuhr": "01:30 PM",
    "asr": "04:45 PM",
    "maghrib": "06:10 PM",
    "isha": "08:00 PM",
    "jummah": "01:15 PM",
}


@pytest.fixture(name="admin_headers")
def admin_headers_fixture(make_token):
    return {"Authorization": f"Bearer {make_token()}"}


class TestGetPrayerTimes:
    def test_public(self, client: TestClient, backend_client):
        backend_client.get_prayer_times.return_value = {"fajr": "05:00 AM"}
        response = client.get("/mosques/m1/prayer-times")
        assert response.status_code == 200
        assert response.json()["fajr"] == "05:00 AM"
        assert response.json()["isha"] is None

    def test_unknown_mosque(self, client: TestClient, backend_client):
        backend_client.get_prayer_times.side_effect = BackendError(
            "Mosque not found", status_code=404
        )
        response = client.get("/mosques/m9/prayer-times")
        assert response.status_code == 404


class TestUpdatePrayerTimes:
    def test_update(self, client: TestClient, backend_client, admin_headers):
        response = client.put("/mosques/m1/prayer-times", json=PRAYER_TIMES, headers=admin_headers)

        assert response.status_code == 200
        mosque_id, sent = backend_client.update_prayer_times.await_args.args
        assert mosque_id == "m1"
        assert sent.jummah == "01:15 PM"

    def test_bad_format(self, client: TestClient, backend_client, admin_headers):
        response = client.put(
            "/mosques/m1/prayer-times",
            json={**PRAYER_TIMES, "maghrib": "18:10"},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["field"] == "maghrib"
        backend_client.update_prayer_times.assert_not_awaited()

    def test_other_mosque(self, client: TestClient, backend_client, admin_headers):
        response = client.put("/mosques/m2/prayer-times", json=PRAYER_TIMES, headers=admin_headers)
        assert response.status_code == 403
        backend_client.update_prayer_times.assert_not_awaited()

    def test_limited_session(self, client: TestClient, make_token):
        token = make_token(status="pending", limited=True)
        response = client.put(
            "/mosques/m1/prayer-times",
            json=PRAYER_TIMES,
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 403

    def test_super_admin(self, client: TestClient, super_admin_token):
        response = client.put(
            "/mosques/m1/prayer-times",
            json=PRAYER_TIMES,
            headers={"Authorization": f"Bearer {super_admin_token}"},
        )
        assert response.status_code == 403

    def test_backend_refusal(self, client: TestClient, backend_client, admin_headers):
        backend_client.update_prayer_times.side_effect = BackendError(
            "Not authorized to update this mosque", status_code=403
        )
        response = client.put("/mosques/m1/prayer-times", json=PRAYER_TIMES, headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["mosque_id"] == "m1"


class TestUpdateMosque:
    def test_update(self, client: TestClient, backend_client, admin_headers):
        response = client.put(
            "/mosques/m1", json={"name": "Al-Noor Centre"}, headers=admin_headers
        )
        assert response.status_code == 200
        _, sent = backend_client.update_mosque.await_args.args
        assert sent.model_dump(exclude_unset=True) == {"name": "Al-Noor Centre"}

    def test_name_too_short(self, client: TestClient, admin_headers):
        response = client.put("/mosques/m1", json={"name": "A"}, headers=admin_headers)
        assert response.status_code == 422

    def test_nothing_to_update(self, client: TestClient, backend_client, admin_headers):
        response = client.put("/mosques/m1", json={}, headers=admin_headers)
        assert response.status_code == 200
        backend_client.update_mosque.assert_not_awaited()
