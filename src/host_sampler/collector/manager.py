"""Collector manager that orchestrates resource collection."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from ..config import SamplerConfig
from ..errors import ProviderError
from ..filters import DeviceFilter
from ..labels import LabelSet
from ..provider import PsutilProvider, StatProvider
from ..state import SamplerState
from .base import BaseCollector, MetricSample
from .core import CoreCollector
from .cpu import CpuCollector
from .disk import DiskCollector
from .memory import MemoryCollector
from .network import NetworkCollector
from .openfd import OpenFdCollector
from .protocol import ProtocolCollector

logger = logging.getLogger(__name__)

Sink = Callable[[list[MetricSample]], None]


def build_common_labels(config: SamplerConfig, provider: StatProvider) -> LabelSet:
    """Host identity labels merged with the configured static labels."""
    return LabelSet.build(
        {"hostname": provider.hostname(), "ip": provider.ip_address()},
        **config.labels,
    )


class CollectorManager:
    """Runs the enabled collectors once per cycle, optionally on an interval.

    Each instance owns its own :class:`SamplerState`, so several managers can
    sample side by side.  Collectors run sequentially in a fixed order and
    share one collection timestamp per cycle.  A failing collector is logged
    and skipped; the others still run and its baseline is kept.

    Cycles on one instance are serialized.  :meth:`set_enabled` never waits
    for a running cycle; its change is queued and applied once the cycle
    has finished.

    Raises :class:`~host_sampler.errors.ConfigurationError` when an exclude
    pattern does not compile.
    """

    def __init__(self, config: SamplerConfig, provider: StatProvider | None = None) -> None:
        self._config = config
        self._provider = provider or PsutilProvider()
        self._state = SamplerState()
        self._sinks: list[Sink] = []
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._cycle_lock = threading.Lock()
        self._pending_lock = threading.Lock()
        self._pending: dict[str, bool] = {}

        device_filter = DeviceFilter(config.exclude_disk_path, config.exclude_disk_fs_type)
        labels = build_common_labels(config, self._provider)
        self._common_labels = labels

        self._collectors: list[BaseCollector] = [
            CoreCollector(labels),
            CpuCollector(labels, cpu_percent=config.cpu_percent, cpu_request=config.cpu_request),
            MemoryCollector(labels),
            DiskCollector(labels, device_filter=device_filter, disks=config.disks),
            NetworkCollector(labels, interfaces=config.net_interfaces),
            ProtocolCollector(labels, tcp_states=config.tcp),
            OpenFdCollector(labels),
        ]
        flags = config.collector_flags()
        self._enabled = {c.name for c in self._collectors if flags.get(c.name, False)}

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def common_labels(self) -> LabelSet:
        return self._common_labels

    @property
    def enabled_collectors(self) -> list[str]:
        return [c.name for c in self._collectors if c.name in self._enabled]

    def set_enabled(self, name: str, enabled: bool) -> None:
        """Enable or disable a collector between cycles.

        Disabling drops the collector's baselines so that re-enabling it
        starts with a warm-up cycle instead of a delta across the gap.
        A change requested while a cycle is running is applied when that
        cycle ends, after the collectors have written their baselines.
        """
        self._get(name)
        with self._pending_lock:
            self._pending[name] = enabled
        if self._cycle_lock.acquire(blocking=False):
            try:
                self._apply_pending()
            finally:
                self._cycle_lock.release()

    def _apply_pending(self) -> None:
        with self._pending_lock:
            pending, self._pending = self._pending, {}
        for name, enabled in pending.items():
            if enabled:
                self._enabled.add(name)
                continue
            self._enabled.discard(name)
            for family in self._get(name).families:
                self._state.reset(family)

    def _get(self, name: str) -> BaseCollector:
        for collector in self._collectors:
            if collector.name == name:
                return collector
        raise KeyError(f"unknown collector {name!r}")

    def add_sink(self, sink: Sink) -> None:
        """Register a callback to receive collected samples."""
        self._sinks.append(sink)

    def collect_once(self, now: float | None = None) -> list[MetricSample]:
        """Run all enabled collectors once and return aggregated samples."""
        collect_time = time.time() if now is None else now
        all_samples: list[MetricSample] = []
        with self._cycle_lock:
            self._apply_pending()
            for collector in self._collectors:
                if collector.name not in self._enabled:
                    continue
                try:
                    all_samples.extend(collector.collect(self._provider, self._state, collect_time))
                except ProviderError as exc:
                    logger.warning("Collector %s skipped this cycle: %s", collector.name, exc)
                except Exception:
                    logger.exception("Collector %s failed", collector.name)
            self._apply_pending()
        return all_samples

    def dispatch(self, samples: list[MetricSample]) -> None:
        """Hand *samples* to every registered sink."""
        for sink in self._sinks:
            try:
                sink(samples)
            except Exception:
                logger.exception("Sink failed")

    def _run(self) -> None:
        """Background thread loop."""
        while not self._stop_event.is_set():
            self.dispatch(self.collect_once())
            self._stop_event.wait(self._config.interval_seconds)

    def start(self) -> None:
        """Start collecting in the background."""
        if not self._config.enabled:
            return
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        logger.info(
            "CollectorManager started (interval=%.1fs, collectors=%s)",
            self._config.interval_seconds,
            ",".join(self.enabled_collectors),
        )

    def stop(self) -> None:
        """Stop background collection."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("CollectorManager stopped")
