"""
Traces and metrics for the dashboard service.

Incoming FastAPI requests and the outgoing httpx calls to the directory backend
are traced, so a slow dashboard page can be followed down to the feed that held
it up. Nothing is exported unless ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set.
"""

import os
from fastapi import FastAPI
from opentelemetry import trace, metrics
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from loguru import logger

from mosque_dashboard.core.config import get_settings

UNTRACED_URLS = "/health,/metrics"

# Instrumentors patch globally; each may only be applied once per process
_instrumented = False


def _service_resource() -> Resource:
    return Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", "mosque-dashboard"),
            "service.namespace": "mosque-directory",
            "deployment.environment": get_settings().ENVIRONMENT,
            "directory.backend_url": get_settings().API_BASE_URL,
        }
    )


def _install_providers(resource: Resource, endpoint: str, insecure: bool) -> None:
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=insecure))
    )
    trace.set_tracer_provider(tracer_provider)

    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=endpoint, insecure=insecure)
    )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))


def _instrument(app: FastAPI) -> None:
    global _instrumented
    if _instrumented:
        return
    FastAPIInstrumentor.instrument_app(app, excluded_urls=UNTRACED_URLS)
    HTTPXClientInstrumentor().instrument()
    _instrumented = True


def setup_telemetry(app: FastAPI):
    """
    Export traces and metrics over OTLP and instrument the app and its backend calls.

    Reads ``OTEL_EXPORTER_OTLP_ENDPOINT``, ``OTEL_SERVICE_NAME`` and
    ``OTEL_EXPORTER_OTLP_INSECURE``. Without an endpoint this only logs a
    warning. A failing setup is logged and the service keeps running untraced.
    """
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        logger.warning("No endpoint configured. Telemetry disabled.")
        return

    insecure = os.getenv("OTEL_EXPORTER_OTLP_INSECURE", "false").lower() == "true"
    try:
        _install_providers(_service_resource(), endpoint, insecure)
        _instrument(app)
    except Exception as e:
        logger.error(f"Telemetry setup failed: {e}")
        return

    logger.info(f"Tracing requests and directory backend calls to {endpoint}")
