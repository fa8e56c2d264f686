"""Host load and boot time collector."""

from __future__ import annotations

import logging

from ..errors import ProviderError
from ..provider import StatProvider
from ..state import SamplerState
from .base import BaseCollector, MetricSample

logger = logging.getLogger(__name__)


class CoreCollector(BaseCollector):
    """Collects load averages and the host boot time.

    Boot time does not change while the host is up, so it is fetched on the
    first successful cycle and reused afterwards.  When the load average
    cannot be read the cycle still reports the boot time.
    """

    @property
    def name(self) -> str:
        return "core"

    def collect(self, provider: StatProvider, state: SamplerState, collect_time: float) -> list[MetricSample]:
        boot_time = state.boot_time
        if boot_time is None:
            boot_time = provider.boot_time()
        state.boot_time = boot_time

        samples: list[MetricSample] = []
        try:
            load = provider.load_average()
        except ProviderError as exc:
            logger.warning("Load average unavailable: %s", exc)
        else:
            samples.extend([
                self._sample("system_load1", load.load1, "1", collect_time,
                             description="Load average 1 minute"),
                self._sample("system_load5", load.load5, "1", collect_time,
                             description="Load average 5 minutes"),
                self._sample("system_load15", load.load15, "1", collect_time,
                             description="Load average 15 minutes"),
            ])
        samples.append(
            self._sample("system_boot_time", boot_time, "s", collect_time,
                         description="Host boot time (unix seconds)"),
        )
        return samples
