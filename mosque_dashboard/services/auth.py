"""Login and logout against the directory backend, returning tagged results."""

from typing import Any

from loguru import logger

from mosque_dashboard.core.security import SessionContext, session_from_token
from mosque_dashboard.exceptions import (
    AuthenticationError,
    BackendError,
    BackendUnavailableError,
)
from mosque_dashboard.models.enums import AdminStatus, LoginOutcome, UserRole
from mosque_dashboard.models.session import DashboardSession, LoginResult, RejectionInfo
from mosque_dashboard.services.backend_client import BackendClient
from mosque_dashboard.utils.validation import mask_email

TIMEOUT_MESSAGE = (
    "Login request timed out, but the server may still be processing your request. "
    "Please wait a moment and check whether you were logged in before trying again."
)

# Error codes the backend attaches to a refused admin login
ERROR_CODE_OUTCOMES = {
    "ACCOUNT_REJECTED": LoginOutcome.REJECTED,
    "PENDING_APPROVAL": LoginOutcome.PENDING,
    "NOT_APPROVED": LoginOutcome.PENDING,
    "ADMIN_REMOVED": LoginOutcome.REMOVED,
    "MOSQUE_DELETED": LoginOutcome.MOSQUE_DELETED,
    "CODE_REGENERATED_NEEDS_CODE": LoginOutcome.CODE_REGENERATED,
}

STATUS_OUTCOMES = {
    AdminStatus.PENDING: LoginOutcome.PENDING,
    AdminStatus.REJECTED: LoginOutcome.REJECTED,
    AdminStatus.ADMIN_REMOVED: LoginOutcome.REMOVED,
    AdminStatus.MOSQUE_DELETED: LoginOutcome.MOSQUE_DELETED,
    AdminStatus.CODE_REGENERATED: LoginOutcome.CODE_REGENERATED,
}


def _failed_login(error: BackendError | BackendUnavailableError) -> LoginResult:
    if isinstance(error, BackendUnavailableError):
        if error.timed_out:
            return LoginResult(outcome=LoginOutcome.TIMEOUT, message=TIMEOUT_MESSAGE)
        return LoginResult(outcome=LoginOutcome.ERROR, message=error.message)
    if error.status_code == 401:
        return LoginResult(outcome=LoginOutcome.INVALID_CREDENTIALS, message=error.message)
    return LoginResult(outcome=LoginOutcome.ERROR, message=error.message)


def _limited_session(payload: dict[str, Any]) -> DashboardSession | None:
    token = payload.get("token")
    if not token:
        return None
    try:
        session = session_from_token(token, payload.get("admin"))
    except AuthenticationError as e:
        logger.warning(f"Ignoring unusable limited token from login response: {e}")
        return None
    return session.model_copy(update={"limited": True})


def _status_result(outcome: LoginOutcome, payload: dict[str, Any], message: str) -> LoginResult:
    rejection = None
    if outcome == LoginOutcome.REJECTED:
        rejection = RejectionInfo(
            rejection_reason=payload.get("rejection_reason"),
            rejection_date=payload.get("rejection_date"),
            rejection_count=payload.get("rejection_count") or 0,
            can_reapply=bool(payload.get("can_reapply")),
        )
    return LoginResult(
        outcome=outcome,
        message=payload.get("message") or message,
        session=_limited_session(payload),
        rejection=rejection,
    )


async def login_admin(
    client: BackendClient,
    email: str,
    password: str,
    context: SessionContext | None = None,
) -> LoginResult:
    """
    Log a mosque admin in and classify the answer.

    Approved admins get an `ok` result with a full session. Admins whose
    application is pending, rejected, removed, whose mosque was deleted or
    whose verification code was regenerated get the matching outcome together
    with a limited session (when the backend issued one) so they can reach
    their status page.

    Parameters:
        client (BackendClient): Unauthenticated backend client.
        email (str): Login email.
        password (str): Plaintext password, forwarded as-is.
        context (SessionContext | None): When given, any previous session is
            ended and the new one (full or limited) is started in it.

    Returns:
        LoginResult: The tagged outcome; never raises for backend refusals.
    """
    email = email.strip().lower()
    if context is not None:
        context.end()

    try:
        body = await client.login_admin(email, password)
    except BackendError as e:
        outcome = ERROR_CODE_OUTCOMES.get(e.code or "")
        if outcome is None:
            logger.info(f"Admin login refused for {mask_email(email)}: {e.message}")
            return _failed_login(e)
        result = _status_result(outcome, e.payload, e.message)
        logger.info(f"Admin login for {mask_email(email)} ended as {outcome.value}")
        if context is not None and result.session is not None:
            context.start(result.session)
        return result
    except BackendUnavailableError as e:
        return _failed_login(e)

    token = body.get("token")
    if not token:
        return LoginResult(
            outcome=LoginOutcome.ERROR, message="Login response did not include a token"
        )
    try:
        session = session_from_token(token, body.get("admin"))
    except AuthenticationError as e:
        return LoginResult(outcome=LoginOutcome.ERROR, message=e.message)

    outcome = LoginOutcome.OK
    if session.admin_status is not None and session.admin_status != AdminStatus.APPROVED:
        outcome = STATUS_OUTCOMES.get(session.admin_status, LoginOutcome.PENDING)
        session = session.model_copy(update={"limited": True})

    if context is not None:
        context.start(session)
    logger.info(f"Admin {mask_email(email)} logged in ({outcome.value})")
    return LoginResult(outcome=outcome, message=body.get("message"), session=session)


async def login_super_admin(
    client: BackendClient,
    email: str,
    password: str,
    context: SessionContext | None = None,
) -> LoginResult:
    """Log a super admin in; only `ok`, `invalid_credentials`, `timeout` or `error` come back."""
    email = email.strip().lower()
    if context is not None:
        context.end()

    try:
        body = await client.login_super_admin(email, password)
    except (BackendError, BackendUnavailableError) as e:
        logger.info(f"Super admin login refused for {mask_email(email)}: {e.message}")
        return _failed_login(e)

    token = body.get("token")
    if not token:
        return LoginResult(
            outcome=LoginOutcome.ERROR, message="Login response did not include a token"
        )
    try:
        session = session_from_token(token, body.get("super_admin"))
    except AuthenticationError as e:
        return LoginResult(outcome=LoginOutcome.ERROR, message=e.message)
    if session.role != UserRole.SUPER_ADMIN:
        return LoginResult(
            outcome=LoginOutcome.ERROR, message="Account is not a super admin account"
        )

    if context is not None:
        context.start(session)
    logger.info(f"Super admin {mask_email(email)} logged in")
    return LoginResult(outcome=LoginOutcome.OK, message=body.get("message"), session=session)


async def logout(client: BackendClient, context: SessionContext | None = None) -> None:
    """End the session locally, telling the backend when it can be reached."""
    try:
        await client.logout()
    except (BackendError, BackendUnavailableError) as e:
        logger.warning(f"Backend logout failed, ending local session anyway: {e.message}")
    finally:
        if context is not None:
            context.end()
