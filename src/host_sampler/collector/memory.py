"""Memory resource collector."""

from __future__ import annotations

from ..provider import StatProvider
from ..state import SamplerState
from .base import BaseCollector, MetricSample


class MemoryCollector(BaseCollector):
    """Collects memory usage metrics."""

    @property
    def name(self) -> str:
        return "memory"

    def collect(self, provider: StatProvider, state: SamplerState, collect_time: float) -> list[MetricSample]:
        mem = provider.virtual_memory()
        swap = provider.swap_memory()

        return [
            self._sample("mem_util", mem.percent, "%", collect_time,
                         description="Memory usage percentage"),
            self._sample("mem_cache", mem.cached, "bytes", collect_time,
                         description="Memory used by the page cache"),
            self._sample("mem_free", mem.free, "bytes", collect_time,
                         description="Memory free in bytes"),
            self._sample("mem_available", mem.available, "bytes", collect_time,
                         description="Memory available in bytes"),
            self._sample("mem_used", mem.used, "bytes", collect_time,
                         description="Memory used in bytes"),
            self._sample("mem_total", mem.total, "bytes", collect_time,
                         description="Total memory in bytes"),
            self._sample("mem_swap_util", swap.percent, "%", collect_time,
                         description="Swap usage percentage"),
        ]
