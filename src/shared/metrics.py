from opentelemetry import metrics
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource

# Console export is for local debugging; keep it infrequent
CONSOLE_EXPORT_INTERVAL_MS = 60_000


def setup_metrics(app_name: str, console: bool = True) -> MeterProvider:
    """Install a meter provider with a Prometheus reader and an optional console reader."""

    resource = Resource.create({"service.name": app_name})

    readers: list[MetricReader] = [PrometheusMetricReader()]
    if console:
        readers.append(
            PeriodicExportingMetricReader(
                ConsoleMetricExporter(), export_interval_millis=CONSOLE_EXPORT_INTERVAL_MS
            )
        )

    provider = MeterProvider(resource=resource, metric_readers=readers)
    metrics.set_meter_provider(provider)
    return provider
