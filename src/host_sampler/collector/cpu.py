"""CPU resource collector."""

from __future__ import annotations

import logging

from ..labels import LabelSet
from ..provider import CpuTimes, StatProvider
from ..state import SamplerState
from .base import BaseCollector, MetricSample
from .delta import bucket_percent, elapsed_seconds, has_baseline

logger = logging.getLogger(__name__)

CPU_KEY = "cpu"

# metric name -> CpuTimes bucket
BUCKET_METRICS = (
    ("cpu_wait_util", "iowait"),
    ("cpu_sys_util", "system"),
    ("cpu_user_util", "user"),
    ("cpu_irq_util", "irq"),
    ("cpu_softirq_util", "softirq"),
    ("cpu_nice_util", "nice"),
    ("cpu_steal_util", "steal"),
    ("cpu_guest_util", "guest"),
    ("cpu_guestnice_util", "guest_nice"),
)


def cpu_share_factor(cpu_request: str | int | None, ncpus: int) -> float:
    """Scale factor turning host-wide CPU percentages into quota percentages.

    *cpu_request* is the CPU quota in millicores.  Raises ``ValueError`` for a
    quota that cannot be applied.
    """
    if cpu_request is None or cpu_request == "":
        return 1.0
    request = int(cpu_request)
    if request <= 0 or ncpus <= 0:
        raise ValueError(f"cpu_request={request} ncpus={ncpus}")
    return ncpus / (request / 1000.0)


class CpuCollector(BaseCollector):
    """Collects CPU count and per-bucket utilization.

    Utilization is the share of the jiffies elapsed since the previous cycle,
    every bucket normalized by the same total delta.
    """

    families = (CPU_KEY,)

    def __init__(
        self,
        common_labels: LabelSet | None = None,
        *,
        cpu_percent: bool = True,
        cpu_request: str | int | None = None,
    ) -> None:
        super().__init__(common_labels)
        self._cpu_percent = cpu_percent
        self._cpu_request = cpu_request
        self._quota_warned = False

    @property
    def name(self) -> str:
        return "cpu"

    def _factor(self, ncpus: int) -> float:
        try:
            return cpu_share_factor(self._cpu_request, ncpus)
        except ValueError as exc:
            if not self._quota_warned:
                logger.error("Ignoring invalid CPU quota %r: %s", self._cpu_request, exc)
                self._quota_warned = True
            return 1.0

    def collect(self, provider: StatProvider, state: SamplerState, collect_time: float) -> list[MetricSample]:
        ncpus = provider.cpu_count()
        samples = [self._sample("cpu_count", ncpus, "1", collect_time,
                                description="Number of logical CPUs")]

        times = provider.cpu_times()
        store = state.store(CPU_KEY)
        previous, previous_time, found = store.get(CPU_KEY)
        elapsed = elapsed_seconds(previous_time, collect_time)

        if self._cpu_percent and has_baseline(found, elapsed):
            samples.extend(self._utilization(previous, times, self._factor(ncpus), collect_time))

        store.put(CPU_KEY, times, collect_time)
        return samples

    def _utilization(
        self,
        previous: CpuTimes,
        current: CpuTimes,
        factor: float,
        collect_time: float,
    ) -> list[MetricSample]:
        total_delta = current.total - previous.total
        if total_delta <= 0:
            return []
        samples = [self._sample(
            "cpu_util",
            bucket_percent(previous.busy, current.busy, total_delta, factor),
            "%",
            collect_time,
            description="CPU busy percentage",
        )]
        for metric, bucket in BUCKET_METRICS:
            samples.append(self._sample(
                metric,
                bucket_percent(getattr(previous, bucket), getattr(current, bucket), total_delta, factor),
                "%",
                collect_time,
                description=f"CPU {bucket} percentage",
            ))
        return samples
