"""Disk space and block device I/O collector."""

from __future__ import annotations

import logging
import os

from ..errors import ProviderError
from ..filters import DeviceFilter
from ..labels import LabelSet
from ..provider import DiskIOCounters, DiskPartition, StatProvider, sum_counters
from ..state import TOTAL, SamplerState
from .base import BaseCollector, MetricSample
from .delta import average_latency, busy_utilization, counter_rate, elapsed_seconds, has_baseline

logger = logging.getLogger(__name__)

DISK_FAMILY = "disk"


class DiskCollector(BaseCollector):
    """Collects per-mount space usage and per-device I/O rates.

    Devices are filtered before the ``total`` aggregate is summed, so an
    excluded device contributes to no disk metric at all.  A device with
    mounted partitions is excluded only when every one of its mounts is.
    """

    families = (DISK_FAMILY,)

    def __init__(
        self,
        common_labels: LabelSet | None = None,
        *,
        device_filter: DeviceFilter | None = None,
        disks: list[str] | None = None,
    ) -> None:
        super().__init__(common_labels)
        self._filter = device_filter or DeviceFilter()
        self._disks = list(disks or [])

    @property
    def name(self) -> str:
        return "disk"

    def collect(self, provider: StatProvider, state: SamplerState, collect_time: float) -> list[MetricSample]:
        partitions = provider.disk_partitions()
        samples = self._collect_usage(provider, partitions, collect_time)

        counters = provider.disk_io_counters(self._disks or None)
        counters = self._filter_devices(counters, partitions)
        total = sum_counters(list(counters.values()), DiskIOCounters)

        store = state.store(DISK_FAMILY)
        for device, current in [(TOTAL, total), *sorted(counters.items())]:
            previous, previous_time, found = store.get(device)
            elapsed = elapsed_seconds(previous_time, collect_time)
            if has_baseline(found, elapsed):
                samples.extend(self._collect_one(device, previous, current, elapsed, collect_time))
            store.put(device, current, collect_time)
        return samples

    def _collect_usage(
        self,
        provider: StatProvider,
        partitions: list[DiskPartition],
        collect_time: float,
    ) -> list[MetricSample]:
        samples: list[MetricSample] = []
        for part in partitions:
            if self._filter.is_excluded(part.mountpoint, part.fstype):
                continue
            try:
                usage = provider.disk_usage(part.mountpoint)
            except ProviderError as exc:
                logger.debug("Skipping disk usage for %s: %s", part.mountpoint, exc)
                continue
            labels = LabelSet.build(
                self._labels, path=part.mountpoint, device=part.device, fs_type=part.fstype,
            )
            samples.append(self._sample("disk_space_usage", usage.percent, "%", collect_time, labels,
                                        f"Space used on {part.mountpoint}"))
            samples.append(self._sample("disk_space_used", usage.used, "bytes", collect_time, labels))
            samples.append(self._sample("disk_space_free", usage.free, "bytes", collect_time, labels))
            samples.append(self._sample("disk_space_total", usage.total, "bytes", collect_time, labels))
        return samples

    def _filter_devices(
        self,
        counters: dict[str, DiskIOCounters],
        partitions: list[DiskPartition],
    ) -> dict[str, DiskIOCounters]:
        mounts: dict[str, list[bool]] = {}
        for part in partitions:
            excluded = self._filter.is_excluded(part.mountpoint, part.fstype)
            mounts.setdefault(os.path.basename(part.device), []).append(excluded)
        return {
            name: c for name, c in counters.items()
            if not (mounts.get(name) and all(mounts[name]))
        }

    def _collect_one(
        self,
        device: str,
        last: DiskIOCounters,
        now: DiskIOCounters,
        elapsed: float,
        collect_time: float,
    ) -> list[MetricSample]:
        labels = self._labels.with_label("disk", device)
        samples = [
            self._sample("disk_rbps", counter_rate(last.read_bytes, now.read_bytes, elapsed),
                         "bytes/s", collect_time, labels, f"Read throughput of {device}"),
            self._sample("disk_wbps", counter_rate(last.write_bytes, now.write_bytes, elapsed),
                         "bytes/s", collect_time, labels, f"Write throughput of {device}"),
            self._sample("disk_riops", counter_rate(last.read_count, now.read_count, elapsed),
                         "ops/s", collect_time, labels, f"Read IOPS of {device}"),
            self._sample("disk_wiops", counter_rate(last.write_count, now.write_count, elapsed),
                         "ops/s", collect_time, labels, f"Write IOPS of {device}"),
            self._sample("disk_rlatency",
                         average_latency(now.read_time - last.read_time, now.read_count - last.read_count),
                         "ms", collect_time, labels, f"Average read latency of {device}"),
            self._sample("disk_wlatency",
                         average_latency(now.write_time - last.write_time, now.write_count - last.write_count),
                         "ms", collect_time, labels, f"Average write latency of {device}"),
        ]
        if device != TOTAL:
            samples.append(self._sample(
                "disk_util", busy_utilization(now.busy_time - last.busy_time, elapsed),
                "%", collect_time, labels, f"Busy time percentage of {device}",
            ))
        return samples
