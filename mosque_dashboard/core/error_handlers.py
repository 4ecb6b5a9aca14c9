"""HTTP error handlers for the dashboard service.

This module is the bridge between application exceptions and HTTP responses.
Every error body has the shape `{"detail": <message>, "level": <notice level>}`
so the dashboard can show it as a classified, dismissible notice.

Purpose:
    - Keep HTTP concerns separate from the feed, reconcile and mutation logic
    - Provide one error response format across the API
    - Never let a backend failure reach the client as an unclassified 500
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from mosque_dashboard.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    InsufficientPermissionsError,
    BackendError,
    BackendUnavailableError,
    FeedFailure,
    MutationFailure,
)
from mosque_dashboard.models.enums import NoticeLevel


def _error_content(exc: AppException, level: NoticeLevel = NoticeLevel.ERROR) -> dict:
    return {"detail": exc.message, "level": level.value}


def _upstream_status(status_code: int | None) -> int:
    # Client errors from the backend are passed through; anything else is a bad gateway
    if status_code is not None and 400 <= status_code < 500:
        return status_code
    return status.HTTP_502_BAD_GATEWAY


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """
    Map a NotFoundError to an HTTP 404 JSON response.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (NotFoundError): The exception indicating that a mosque or other resource was not found.

    Returns:
        JSONResponse: Response with status 404 and body `{"detail": ..., "level": "error"}`.
    """
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND, content=_error_content(exc)
    )


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """
    Convert a ValidationError into an HTTP 422 Unprocessable Entity JSON response.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (ValidationError): The input validation error; if `exc.field` is set, the response will include a `field` key.

    Returns:
        JSONResponse: Response with status 422, a `warning` level, and `field` when available.
    """
    content = _error_content(exc, NoticeLevel.WARNING)
    if exc.field:
        content["field"] = exc.field
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, content=content
    )


async def insufficient_permissions_handler(
    request: Request, exc: InsufficientPermissionsError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN, content=_error_content(exc)
    )


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """
    Convert an AuthenticationError into a 401 Unauthorized JSON response that includes a WWW-Authenticate header.

    Parameters:
        request (Request): The incoming HTTP request that triggered the exception.
        exc (AuthenticationError): Invalid, expired or missing session token.

    Returns:
        JSONResponse: Response with status 401 and `WWW-Authenticate: Bearer` header.
    """
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=_error_content(exc),
        headers={"WWW-Authenticate": "Bearer"},
    )


async def feed_failure_handler(request: Request, exc: FeedFailure) -> JSONResponse:
    """
    Report an aborted feed load as 502 Bad Gateway with a retry hint.

    Returns:
        JSONResponse: Body `{"detail": ..., "level": "error", "retry": true}` plus `feed` when known.
    """
    content = _error_content(exc)
    content["retry"] = True
    if exc.feed:
        content["feed"] = exc.feed
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=content)


async def mutation_failure_handler(
    request: Request, exc: MutationFailure
) -> JSONResponse:
    content = _error_content(exc)
    if exc.mosque_id:
        content["mosque_id"] = exc.mosque_id
    return JSONResponse(
        status_code=_upstream_status(exc.status_code), content=content
    )


async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    return JSONResponse(
        status_code=_upstream_status(exc.status_code), content=_error_content(exc)
    )


async def backend_unavailable_handler(
    request: Request, exc: BackendUnavailableError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=_error_content(exc)
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle unhandled application-level exceptions and produce a standardized 500 Internal Server Error response.

    Returns:
        JSONResponse: HTTP 500 response with content {"detail": "An internal error occurred", "level": "error"}.
    """
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal error occurred", "level": NoticeLevel.ERROR.value},
    )


def register_exception_handlers(app) -> None:
    """
    Register the application's domain-to-HTTP exception handlers on a FastAPI app.

    Registers handlers from most specific to most general: NotFoundError -> 404,
    ValidationError -> 422 (with optional `field`), InsufficientPermissionsError -> 403,
    AuthenticationError -> 401 (adds `WWW-Authenticate: Bearer`), FeedFailure -> 502
    (with `retry`), MutationFailure and BackendError -> the backend's 4xx status or 502,
    BackendUnavailableError -> 503, and AppException -> 500.

    Parameters:
        app: The FastAPI application instance to which the exception handlers will be attached.
    """
    # Lookup and input handlers
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)

    # Auth exception handlers (specific before general)
    app.add_exception_handler(
        InsufficientPermissionsError, insufficient_permissions_handler
    )
    app.add_exception_handler(AuthenticationError, authentication_error_handler)

    # Directory backend failures
    app.add_exception_handler(FeedFailure, feed_failure_handler)
    app.add_exception_handler(MutationFailure, mutation_failure_handler)
    app.add_exception_handler(BackendError, backend_error_handler)
    app.add_exception_handler(BackendUnavailableError, backend_unavailable_handler)

    # Catch-all for unhandled application exceptions
    app.add_exception_handler(AppException, app_exception_handler)
