from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from mosque_dashboard.core.security import session_from_token
from mosque_dashboard.exceptions import InsufficientPermissionsError
from mosque_dashboard.models.enums import UserRole
from mosque_dashboard.models.session import DashboardSession
from mosque_dashboard.services.backend_client import BackendClient
from mosque_dashboard.services.dashboard import DashboardService

# Tokens are issued by the directory backend; the dashboard only forwards them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/superadmin/login")


def get_backend_client(request: Request) -> BackendClient:
    """
    Return the shared, unauthenticated backend client kept on the application state.

    The lifespan normally creates it; it is created here on first use otherwise.
    """
    client = getattr(request.app.state, "backend_client", None)
    if client is None:
        client = BackendClient()
        request.app.state.backend_client = client
    return client


def get_current_session(
    token: Annotated[str, Depends(oauth2_scheme)],
) -> DashboardSession:
    """
    Resolve the dashboard session from the bearer token of the request.

    Returns:
        DashboardSession: Role, status and mosque read from the backend token.

    Raises:
        InvalidTokenError: 401 if the token is malformed or carries no dashboard role.
        TokenExpiredError: 401 if the token has expired.
    """
    return session_from_token(token)


def get_super_admin_session(
    session: Annotated[DashboardSession, Depends(get_current_session)],
) -> DashboardSession:
    if session.role != UserRole.SUPER_ADMIN:
        raise InsufficientPermissionsError("Super admin access required")
    return session


def get_session_client(
    session: Annotated[DashboardSession, Depends(get_current_session)],
    client: Annotated[BackendClient, Depends(get_backend_client)],
) -> BackendClient:
    return client.with_token(session.token)


def get_dashboard_service(
    session: Annotated[DashboardSession, Depends(get_super_admin_session)],
    client: Annotated[BackendClient, Depends(get_backend_client)],
) -> DashboardService:
    """Build a dashboard for this request, talking to the backend as the super admin."""
    return DashboardService(client.with_token(session.token))
