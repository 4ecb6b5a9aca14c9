from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mosque_dashboard.core.config import get_settings, parse_comma_separated_origins
from mosque_dashboard.core.error_handlers import register_exception_handlers
from mosque_dashboard.core.telemetry import setup_telemetry
from mosque_dashboard.routers import auth, dashboard, mosque
from mosque_dashboard.services.backend_client import BackendClient
from mosque_dashboard.utils.logger import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Run startup and shutdown around the serving period of the app.

    Sets up logging, opens the shared directory backend client on `app.state`,
    and initializes telemetry; the client is closed on shutdown.
    """
    setup_logging()
    app.state.backend_client = BackendClient()
    setup_telemetry(app)
    yield
    await app.state.backend_client.aclose()


app = FastAPI(
    title="Mosque Dashboard API",
    description="Reconciled mosque directory for super admins and mosque admins",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        str(origin)
        for origin in parse_comma_separated_origins(get_settings().BACKEND_CORS_ORIGINS)
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health", include_in_schema=False)
def health_check():
    """
    Provide the application's liveness state for health checks.

    Returns:
        dict: A mapping with key "status" and value "ok" indicating the service is healthy.
    """
    return {"status": "ok"}


app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(mosque.router)
