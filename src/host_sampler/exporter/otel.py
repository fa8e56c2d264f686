"""OpenTelemetry exporter – pushes host metrics via OTLP/HTTP."""

from __future__ import annotations

import logging
import socket
from typing import Any

from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource

from .. import __version__
from ..collector.base import MetricSample
from ..config import OtelExporterConfig
from .base import BaseExporter

logger = logging.getLogger(__name__)


class OtelExporter(BaseExporter):
    """Records samples as OpenTelemetry gauges.

    One synchronous gauge is created per metric name on first sight; the
    sample's labels become the data point attributes.  The SDK's
    ``PeriodicExportingMetricReader`` pushes the latest values to the
    configured OTLP/HTTP endpoint every ``export_interval_ms``.

    The meter provider is owned by the exporter and not installed as the
    global provider, so several samplers can export side by side.
    """

    def __init__(self, config: OtelExporterConfig) -> None:
        self._config = config
        resource = Resource.create({
            SERVICE_NAME: config.service_name,
            "host.name": socket.gethostname(),
        })

        exporter_kwargs: dict[str, Any] = {
            "endpoint": f"{config.endpoint.rstrip('/')}/v1/metrics",
        }
        if config.headers:
            exporter_kwargs["headers"] = config.headers

        reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(**exporter_kwargs),
            export_interval_millis=config.export_interval_ms,
        )
        self._provider = MeterProvider(resource=resource, metric_readers=[reader])
        self._meter = self._provider.get_meter("host_sampler", __version__)
        self._gauges: dict[str, metrics.Gauge] = {}

        logger.info(
            "OtelExporter initialized → %s (service=%s)",
            config.endpoint,
            config.service_name,
        )

    def _gauge(self, sample: MetricSample) -> metrics.Gauge:
        gauge = self._gauges.get(sample.name)
        if gauge is None:
            gauge = self._gauges[sample.name] = self._meter.create_gauge(
                name=sample.name,
                unit=sample.unit,
                description=sample.description,
            )
        return gauge

    def export(self, samples: list[MetricSample]) -> None:
        for s in samples:
            self._gauge(s).set(s.value, attributes=s.labels.to_dict())

    def shutdown(self) -> None:
        self._provider.shutdown()
        logger.info("OtelExporter shut down")
