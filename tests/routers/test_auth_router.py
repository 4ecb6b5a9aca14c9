"""Tests for auth router."""

from fastapi.testclient import TestClient

from mosque_dashboard.exceptions import BackendError, BackendUnavailableError


class TestAdminLogin:
    def test_login_success(self, client: TestClient, backend_client, make_token):
        token = make_token()
        backend_client.login_admin.return_value = {"token": token, "admin": {"id": "a1"}}

        response = client.post(
            "/auth/admin/login", json={"email": "ali@gmail.com", "password": "Secret123!"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "ok"
        assert data["session"]["token"] == token
        assert data["session"]["role"] == "admin"
        assert data["session"]["mosque_id"] == "m1"

    def test_login_rejected(self, client: TestClient, backend_client, make_token):
        backend_client.login_admin.side_effect = BackendError(
            "Your application was rejected",
            status_code=403,
            code="ACCOUNT_REJECTED",
            payload={
                "token": make_token(status="rejected", limited=True),
                "rejection_reason": "Documents missing",
                "can_reapply": True,
            },
        )

        response = client.post(
            "/auth/admin/login", json={"email": "ali@gmail.com", "password": "Secret123!"}
        )

        assert response.status_code == 403
        data = response.json()
        assert data["outcome"] == "rejected"
        assert data["session"]["limited"] is True
        assert data["rejection"]["rejection_reason"] == "Documents missing"

    def test_login_invalid_credentials(self, client: TestClient, backend_client):
        backend_client.login_admin.side_effect = BackendError(
            "Invalid email or password", status_code=401, code="INVALID_CREDENTIALS"
        )
        response = client.post(
            "/auth/admin/login", json={"email": "ali@gmail.com", "password": "wrong"}
        )
        assert response.status_code == 401
        assert response.json()["outcome"] == "invalid_credentials"

    def test_login_timeout(self, client: TestClient, backend_client):
        backend_client.login_admin.side_effect = BackendUnavailableError(timed_out=True)
        response = client.post(
            "/auth/admin/login", json={"email": "ali@gmail.com", "password": "Secret123!"}
        )
        assert response.status_code == 504
        assert response.json()["outcome"] == "timeout"

    def test_missing_password(self, client: TestClient):
        response = client.post("/auth/admin/login", json={"email": "ali@gmail.com"})
        assert response.status_code == 422


class TestSuperAdminLogin:
    def test_login_success(self, client: TestClient, backend_client, super_admin_token):
        backend_client.login_super_admin.return_value = {
            "token": super_admin_token,
            "super_admin": {"id": "s1", "email": "root@gmail.com"},
        }
        response = client.post(
            "/auth/superadmin/login", json={"email": "root@gmail.com", "password": "Secret123!"}
        )
        assert response.status_code == 200
        assert response.json()["session"]["role"] == "super_admin"


class TestLogout:
    def test_logout(self, client: TestClient, backend_client, super_admin_token):
        response = client.post(
            "/auth/logout", headers={"Authorization": f"Bearer {super_admin_token}"}
        )
        assert response.status_code == 200
        assert response.json()["level"] == "success"
        backend_client.with_token.assert_called_with(super_admin_token)
        backend_client.logout.assert_awaited_once()

    def test_logout_without_token(self, client: TestClient):
        assert client.post("/auth/logout").status_code == 401
