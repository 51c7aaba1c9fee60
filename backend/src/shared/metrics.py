from opentelemetry import metrics
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest


def setup_metrics(app_name: str, console_export: bool = False) -> MeterProvider:
    """Configure OpenTelemetry metrics.

    The Prometheus reader registers with the default prometheus_client registry,
    which render_prometheus() serialises for the /metrics endpoint.
    """
    resource = Resource.create({"service.name": app_name})

    readers: list[MetricReader] = [PrometheusMetricReader()]
    if console_export:
        readers.append(PeriodicExportingMetricReader(ConsoleMetricExporter()))

    provider = MeterProvider(resource=resource, metric_readers=readers)
    metrics.set_meter_provider(provider)
    return provider


def render_prometheus() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
