import time
import jwt
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from mosque_dashboard.core.config import get_settings
from mosque_dashboard.core.dependencies import get_backend_client
from mosque_dashboard.main import app
from mosque_dashboard.services.backend_client import BackendClient

TEST_SIGNING_KEY = "test-backend-signing-key-for-tests-only"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read settings from its own (possibly patched) environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(name="make_token")
def make_token_fixture():
    """
    Factory for backend-style JWTs.

    Claims default to an approved admin of mosque `m1` expiring in one hour;
    keyword arguments override or add claims (pass `exp=None` to drop expiry).
    """

    def create(**claims):
        payload = {
            "userId": "a1",
            "role": "admin",
            "status": "approved",
            "limited": False,
            "mosque_id": "m1",
            "name": "Ali",
            "email": "ali@gmail.com",
            "exp": int(time.time()) + 3600,
        }
        payload.update(claims)
        payload = {k: v for k, v in payload.items() if v is not None}
        return jwt.encode(payload, TEST_SIGNING_KEY, algorithm="HS256")

    return create


@pytest.fixture(name="super_admin_token")
def super_admin_token_fixture(make_token):
    return make_token(
        userId="s1", role="super_admin", status=None, mosque_id=None, name=None,
        email="root@gmail.com",
    )


@pytest.fixture(name="mosque_feed")
def mosque_feed_fixture():
    return [
        {
            "_id": "m1",
            "name": "Al-Noor",
            "location": "Gulberg, Lahore",
            "description": "Friday prayers and weekend classes",
            "contact_email": "info@alnoor.pk",
            "contact_phone": "+923001112233",
            "verification_code": "NOOR42",
            "createdAt": "2026-01-10T08:00:00Z",
        },
        {
            "_id": "m2",
            "name": "Al-Huda",
            "location": "Saddar, Karachi",
            "verification_code": "HUDA77",
            "createdAt": "2026-09-01T08:00:00Z",
        },
        {"_id": "m3", "name": "Masjid Bilal", "location": "F-8, Islamabad"},
    ]


@pytest.fixture(name="approved_feed")
def approved_feed_fixture():
    return [
        {
            "_id": "a1",
            "name": "Ali",
            "email": "ali@gmail.com",
            "phone": "+923004445566",
            "mosque_id": {"_id": "m1", "name": "Al-Noor"},
        }
    ]


@pytest.fixture(name="pending_feed")
def pending_feed_fixture():
    return [
        {"_id": "a2", "name": "Sara", "email": "sara@gmail.com", "mosque_id": "m2"},
    ]


@pytest.fixture(name="rejected_feed")
def rejected_feed_fixture():
    return [
        {
            "_id": "a3",
            "name": "Omar",
            "email": "omar@yahoo.com",
            "previous_mosque_ids": [
                {"_id": "h1", "mosque_id": "m2", "rejection_reason": "Unverified"},
                {"_id": "h2", "mosque_id": {"_id": "m3"}},
            ],
        }
    ]


@pytest.fixture(name="backend_client")
def backend_client_fixture(mosque_feed, approved_feed, pending_feed, rejected_feed):
    """
    A BackendClient double whose feed methods return the sample feeds.

    `with_token` hands back the same double so calls made on behalf of a
    session can be asserted on it.
    """
    client = MagicMock(spec=BackendClient)
    client.with_token.return_value = client
    client.list_mosques = AsyncMock(return_value=mosque_feed)
    client.list_approved_admins = AsyncMock(return_value=approved_feed)
    client.list_pending_admins = AsyncMock(return_value=pending_feed)
    client.list_rejected_admins = AsyncMock(return_value=rejected_feed)
    client.delete_mosque = AsyncMock(return_value={"message": "Mosque deleted"})
    client.bulk_delete_mosques = AsyncMock(return_value={})
    client.assign_admin = AsyncMock(return_value={"message": "Admin assigned"})
    client.login_admin = AsyncMock()
    client.login_super_admin = AsyncMock()
    client.logout = AsyncMock(return_value={})
    client.get_prayer_times = AsyncMock(return_value={})
    client.update_prayer_times = AsyncMock(return_value={})
    client.update_mosque = AsyncMock(return_value={})
    return client


@pytest.fixture(name="client")
def client_fixture(backend_client):
    """TestClient for the app with the directory backend replaced by `backend_client`."""
    app.dependency_overrides[get_backend_client] = lambda: backend_client
    yield TestClient(app)
    app.dependency_overrides.clear()
