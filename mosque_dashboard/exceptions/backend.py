"""Exceptions raised while talking to the directory backend."""

from typing import Any

from mosque_dashboard.exceptions.base import AppException


class BackendError(AppException):
    """The directory backend answered with an error status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        code: str | None = None,
        payload: dict[str, Any] | None = None,
    ):
        """
        Wrap a failed backend response.

        Parameters:
            message (str): The backend's `error` (or `message`) text.
            status_code (int): HTTP status returned by the backend.
            code (str | None): Machine-readable `code` field of the error body, when present.
            payload (dict | None): The full decoded error body.
        """
        self.status_code = status_code
        self.code = code
        self.payload = payload or {}
        super().__init__(message)


class BackendUnavailableError(AppException):
    """The backend could not be reached or did not answer in time."""

    def __init__(self, message: str = "Directory backend is unavailable", timed_out: bool = False):
        self.timed_out = timed_out
        super().__init__(message)


class FeedFailure(AppException):
    """One of the parallel feed retrievals failed, so the whole load was aborted."""

    def __init__(self, message: str, feed: str | None = None, cycle: int | None = None):
        """
        Parameters:
            message (str): Human-readable reason shown next to the retry action.
            feed (str | None): Name of the feed that failed first, if known.
            cycle (int | None): Load cycle that failed.
        """
        self.feed = feed
        self.cycle = cycle
        super().__init__(message)


class MutationFailure(AppException):
    """A delete or assign call was refused by the backend; local state is left unchanged."""

    def __init__(
        self, message: str, mosque_id: str | None = None, status_code: int | None = None
    ):
        self.mosque_id = mosque_id
        self.status_code = status_code
        super().__init__(message)
