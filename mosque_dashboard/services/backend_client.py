"""
Directory Backend Client Module.

This module provides the low-level HTTP client responsible for communicating with
the mosque directory backend. It handles request formatting, bearer-token
authentication, and the translation of error bodies (`{"error": ..., "code": ...}`)
into application exceptions.

Technological Context:
- Leverages HTTPX for asynchronous, non-blocking network calls.
- Feed methods return the backend's JSON items untouched; shaping them into
  reconciled views is the reconciler's job.
"""

import httpx
import logging
from typing import Any

from mosque_dashboard.core.config import get_settings
from mosque_dashboard.exceptions import BackendError, BackendUnavailableError
from mosque_dashboard.models.admin import AdminAssignment
from mosque_dashboard.models.mosque import MosqueUpdate, PrayerTimes

logger = logging.getLogger(__name__)

RawRecord = dict[str, Any]


def error_message_from(body: Any, status_code: int) -> str:
    """Pick the human-readable part of a backend error body."""
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if body.get(key):
                return str(body[key])
    return f"Directory backend returned HTTP {status_code}"


class BackendClient:
    """
    Client for the directory backend's REST API.

    One client wraps one `httpx.AsyncClient`; `with_token` derives a client
    that shares the same connection pool but authenticates as another session.

    Attributes:
        base_url (str): Root of the backend API, e.g. `http://localhost:3000/api`.
        timeout (float): Network timeout in seconds for each request.
        token (str | None): Bearer token sent with every request.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        token: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT_SECONDS
        self.token = token
        self._http = http_client or httpx.AsyncClient(timeout=self.timeout)
        self._owns_http = http_client is None

    def with_token(self, token: str | None) -> "BackendClient":
        return BackendClient(
            self.base_url, token=token, timeout=self.timeout, http_client=self._http
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            BackendError: The backend answered with a non-2xx status; carries its `error` text and `code`.
            BackendUnavailableError: The request failed at the transport level or timed out.
        """
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        url = f"{self.base_url}{path}"
        try:
            response = await self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            try:
                body = e.response.json()
            except ValueError:
                body = None
            message = error_message_from(body, e.response.status_code)
            logger.warning(
                f"Directory backend returned {e.response.status_code} for {method} {path}: {message}"
            )
            raise BackendError(
                message,
                status_code=e.response.status_code,
                code=body.get("code") if isinstance(body, dict) else None,
                payload=body if isinstance(body, dict) else None,
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Directory backend timed out on {method} {path}")
            raise BackendUnavailableError(
                "Request to the directory backend timed out", timed_out=True
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Could not reach directory backend at {url}: {e}")
            raise BackendUnavailableError(f"Could not reach directory backend: {e}") from e

        if not response.content:
            return {}
        return response.json()

    # Feeds

    async def list_mosques(self, limit: int | None = None) -> list[RawRecord]:
        limit = limit or get_settings().FEED_PAGE_SIZE
        body = await self._request("GET", "/mosques", params={"page": 1, "limit": limit})
        return list(body.get("mosques") or [])

    async def list_approved_admins(self) -> list[RawRecord]:
        body = await self._request("GET", "/superadmin/approved")
        return list(body.get("approved_admins") or [])

    async def list_pending_admins(self) -> list[RawRecord]:
        body = await self._request("GET", "/superadmin/pending")
        return list(body.get("pending_admins") or [])

    async def list_rejected_admins(self, limit: int | None = None) -> list[RawRecord]:
        limit = limit or get_settings().FEED_PAGE_SIZE
        body = await self._request(
            "GET", "/superadmin/rejected-admins", params={"page": 1, "limit": limit}
        )
        return list(body.get("rejected_admins") or [])

    # Super admin mutations

    async def delete_mosque(self, mosque_id: str, reason: str) -> RawRecord:
        return await self._request(
            "DELETE", f"/superadmin/mosque/{mosque_id}", json={"reason": reason}
        )

    async def bulk_delete_mosques(self, mosque_ids: list[str], reason: str) -> RawRecord:
        return await self._request(
            "POST",
            "/superadmin/mosques/bulk-delete",
            json={"mosque_ids": mosque_ids, "reason": reason},
        )

    async def assign_admin(self, mosque_id: str, assignment: AdminAssignment) -> RawRecord:
        return await self._request(
            "POST",
            f"/superadmin/mosques/{mosque_id}/assign-admin",
            json=assignment.model_dump(exclude_none=True),
        )

    # Authentication

    async def login_admin(self, email: str, password: str) -> RawRecord:
        return await self._request(
            "POST", "/admin/login", json={"email": email, "password": password}
        )

    async def login_super_admin(self, email: str, password: str) -> RawRecord:
        return await self._request(
            "POST", "/superadmin/login", json={"email": email, "password": password}
        )

    async def logout(self) -> RawRecord:
        return await self._request("POST", "/logout")

    # Mosque admin

    async def get_prayer_times(self, mosque_id: str) -> RawRecord:
        body = await self._request("GET", f"/mosques/{mosque_id}/prayer-times")
        return body.get("prayer_times", body)

    async def update_prayer_times(self, mosque_id: str, prayer_times: PrayerTimes) -> RawRecord:
        return await self._request(
            "PUT", f"/mosques/{mosque_id}/prayer-times", json=prayer_times.model_dump()
        )

    async def update_mosque(self, mosque_id: str, mosque_in: MosqueUpdate) -> RawRecord:
        return await self._request(
            "PUT", f"/mosques/{mosque_id}", json=mosque_in.model_dump(exclude_unset=True)
        )
