"""System-wide open file descriptor collector."""

from __future__ import annotations

from ..provider import StatProvider
from ..state import SamplerState
from .base import BaseCollector, MetricSample


class OpenFdCollector(BaseCollector):
    """Collects the kernel's allocated and maximum file handle counts."""

    @property
    def name(self) -> str:
        return "open_fd"

    def collect(self, provider: StatProvider, state: SamplerState, collect_time: float) -> list[MetricSample]:
        fds = provider.file_descriptors()
        return [
            self._sample("fd_allocated", fds.allocated - fds.unused, "1", collect_time,
                         description="Allocated file handles"),
            self._sample("fd_max", fds.maximum, "1", collect_time,
                         description="Maximum file handles"),
        ]
