"""Base interface for metric sinks."""

from __future__ import annotations

import abc

from ..collector.base import MetricSample


class BaseExporter(abc.ABC):
    """Abstract base for exporters that receive metric samples.

    Exporters are registered with
    :meth:`~host_sampler.collector.manager.CollectorManager.add_sink`
    through their :meth:`export` method.
    """

    @abc.abstractmethod
    def export(self, samples: list[MetricSample]) -> None:
        """Export a batch of metric samples."""

    @abc.abstractmethod
    def shutdown(self) -> None:
        """Flush and release resources."""
