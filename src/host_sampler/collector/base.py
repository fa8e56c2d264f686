"""Base interface for system resource collectors."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field

from ..labels import LabelSet
from ..provider import StatProvider
from ..state import SamplerState


@dataclass
class MetricSample:
    """A single metric data point."""

    name: str
    value: float
    unit: str
    timestamp: float
    labels: LabelSet = field(default_factory=LabelSet)
    description: str = ""


class BaseCollector(abc.ABC):
    """Abstract base class for system resource collectors.

    A collector queries its provider, computes derived values against the
    state it owns in :class:`SamplerState`, and returns samples.  It must
    finish every provider query before touching state so that a failed
    query leaves the previous baseline intact.
    """

    #: state families owned by this collector, reset when it is disabled
    families: tuple[str, ...] = ()

    def __init__(self, common_labels: LabelSet | None = None) -> None:
        self._labels = common_labels if common_labels is not None else LabelSet()

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Collector name used in configuration and output."""

    @abc.abstractmethod
    def collect(
        self,
        provider: StatProvider,
        state: SamplerState,
        collect_time: float,
    ) -> list[MetricSample]:
        """Collect current resource metrics. Returns a list of samples."""

    def _sample(
        self,
        name: str,
        value: float,
        unit: str,
        timestamp: float,
        labels: LabelSet | None = None,
        description: str = "",
    ) -> MetricSample:
        return MetricSample(
            name=name,
            value=float(value),
            unit=unit,
            timestamp=timestamp,
            labels=labels if labels is not None else self._labels,
            description=description,
        )
