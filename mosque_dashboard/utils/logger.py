import logging
import os
import sys
from types import FrameType
from loguru import logger
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry._logs import set_logger_provider

from mosque_dashboard.core.config import get_settings

# Loggers that install their own handlers; they are rerouted through loguru.
ROUTED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "httpx",
    "httpcore",
    "mosque_dashboard",
)

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> <level>{level: <8}</level> "
    "<cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """
    Hands stdlib log records to loguru, keeping the original caller location.

    Records emitted by OpenTelemetry itself are dropped, since they would be
    exported again through the OTel sink.
    """

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith("opentelemetry"):
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _route_stdlib_loggers() -> None:
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(logging.INFO)

    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers = [InterceptHandler()]
        routed.propagate = False


def _add_otel_sink(endpoint: str) -> None:
    resource = Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", "mosque-dashboard"),
            "deployment.environment": get_settings().ENVIRONMENT,
        }
    )
    provider = LoggerProvider(resource=resource)
    set_logger_provider(provider)

    insecure = os.getenv("OTEL_EXPORTER_OTLP_INSECURE", "false").lower() == "true"
    provider.add_log_record_processor(
        BatchLogRecordProcessor(OTLPLogExporter(endpoint=endpoint, insecure=insecure))
    )
    logger.add(
        LoggingHandler(level=logging.INFO, logger_provider=provider),
        level="INFO",
        serialize=True,
    )


def setup_logging():
    """
    Configure loguru as the single logging pipeline for the service.

    Stdlib loggers (uvicorn, httpx, this package) are rerouted into loguru,
    a console sink is installed at ``LOG_LEVEL``, and when
    ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set the records are also exported over
    OTLP. A failing exporter leaves the console sink in place.

    Returns:
        The configured loguru logger.
    """
    _route_stdlib_loggers()

    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().LOG_LEVEL,
        format=CONSOLE_FORMAT,
        colorize=True,
        enqueue=True,
    )

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        try:
            _add_otel_sink(endpoint)
            logger.info("Log export to {} active.", endpoint)
        except Exception as e:
            print(f"Log Setup Failed: {e}", file=sys.stderr)

    return logger
