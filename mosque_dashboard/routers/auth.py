from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from mosque_dashboard.core.dependencies import get_backend_client, oauth2_scheme
from mosque_dashboard.models.enums import LoginOutcome, NoticeLevel
from mosque_dashboard.models.session import LoginRequest, LoginResult
from mosque_dashboard.models.view import Notice
from mosque_dashboard.services import auth as auth_service
from mosque_dashboard.services.backend_client import BackendClient

router = APIRouter(prefix="/auth", tags=["auth"])

# HTTP status sent back with each login outcome; the body is always a LoginResult
LOGIN_STATUS_CODES = {
    LoginOutcome.OK: status.HTTP_200_OK,
    LoginOutcome.PENDING: status.HTTP_403_FORBIDDEN,
    LoginOutcome.REJECTED: status.HTTP_403_FORBIDDEN,
    LoginOutcome.REMOVED: status.HTTP_403_FORBIDDEN,
    LoginOutcome.MOSQUE_DELETED: status.HTTP_403_FORBIDDEN,
    LoginOutcome.CODE_REGENERATED: status.HTTP_403_FORBIDDEN,
    LoginOutcome.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    LoginOutcome.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    LoginOutcome.ERROR: status.HTTP_502_BAD_GATEWAY,
}


@router.post("/admin/login", response_model=LoginResult)
async def login_admin(
    login_in: LoginRequest,
    response: Response,
    client: Annotated[BackendClient, Depends(get_backend_client)],
) -> LoginResult:
    """
    Log a mosque admin in through the directory backend.

    Admins that are not approved still receive a limited session in the
    result, together with an outcome telling the dashboard which status page
    to show (`pending`, `rejected`, `removed`, `mosque_deleted`, `code_regenerated`).
    """
    result = await auth_service.login_admin(client, login_in.email, login_in.password)
    response.status_code = LOGIN_STATUS_CODES[result.outcome]
    return result


@router.post("/superadmin/login", response_model=LoginResult)
async def login_super_admin(
    login_in: LoginRequest,
    response: Response,
    client: Annotated[BackendClient, Depends(get_backend_client)],
) -> LoginResult:
    result = await auth_service.login_super_admin(client, login_in.email, login_in.password)
    response.status_code = LOGIN_STATUS_CODES[result.outcome]
    return result


@router.post("/logout", response_model=Notice)
async def logout(
    token: Annotated[str, Depends(oauth2_scheme)],
    client: Annotated[BackendClient, Depends(get_backend_client)],
) -> Notice:
    # An expired token may still log out, so it is forwarded without decoding
    await auth_service.logout(client.with_token(token))
    return Notice(level=NoticeLevel.SUCCESS, message="Logged out successfully")
