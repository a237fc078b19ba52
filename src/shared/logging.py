import logging
import sys

from opentelemetry._logs import set_logger_provider
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor, ConsoleLogRecordExporter
from opentelemetry.sdk.resources import Resource

from .config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(app_name: str | None = None, level: str | None = None) -> None:
    """Send stdlib log records to the OpenTelemetry console exporter and stdout.

    Safe to call more than once: handlers installed by an earlier call are
    replaced rather than stacked.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    resource = Resource.create({"service.name": app_name or settings.APP_NAME})

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(ConsoleLogRecordExporter())
    )
    set_logger_provider(logger_provider)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_webhook_tls_handler", False):
            root.removeHandler(existing)

    otel_handler = LoggingHandler(
        level=getattr(logging, level_name), logger_provider=logger_provider
    )
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    for handler in (otel_handler, stream_handler):
        handler._webhook_tls_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level_name)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


logger = logging.getLogger("webhook_tls")
