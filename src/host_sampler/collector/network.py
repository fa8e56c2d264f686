"""Network resource collector."""

from __future__ import annotations

from ..labels import LabelSet
from ..provider import NetIOCounters, StatProvider, sum_counters
from ..state import TOTAL, SamplerState
from .base import BaseCollector, MetricSample
from .delta import counter_rate, delta_ratio, elapsed_seconds, has_baseline

NETWORK_FAMILY = "network"


class NetworkCollector(BaseCollector):
    """Collects network I/O rates and error/drop ratios.

    Metrics are emitted for every interface and for the synthetic ``total``
    interface summing all of them.
    """

    families = (NETWORK_FAMILY,)

    def __init__(self, common_labels: LabelSet | None = None, *, interfaces: list[str] | None = None) -> None:
        super().__init__(common_labels)
        self._interfaces = list(interfaces or [])

    @property
    def name(self) -> str:
        return "network"

    def collect(self, provider: StatProvider, state: SamplerState, collect_time: float) -> list[MetricSample]:
        counters = provider.net_io_counters(self._interfaces or None)
        if not counters:
            return []
        total = sum_counters(list(counters.values()), NetIOCounters)

        samples: list[MetricSample] = []
        store = state.store(NETWORK_FAMILY)
        for iface, current in [(TOTAL, total), *sorted(counters.items())]:
            previous, previous_time, found = store.get(iface)
            elapsed = elapsed_seconds(previous_time, collect_time)
            if has_baseline(found, elapsed):
                samples.extend(self._collect_one(iface, previous, current, elapsed, collect_time))
            store.put(iface, current, collect_time)
        return samples

    def _collect_one(
        self,
        iface: str,
        last: NetIOCounters,
        now: NetIOCounters,
        elapsed: float,
        collect_time: float,
    ) -> list[MetricSample]:
        labels = self._labels.with_label("interface", iface)

        delta_errors = (now.errin - last.errin) + (now.errout - last.errout)
        delta_drops = (now.dropin - last.dropin) + (now.dropout - last.dropout)
        delta_packets = (now.packets_sent - last.packets_sent) + (now.packets_recv - last.packets_recv)

        return [
            self._sample("net_in", counter_rate(last.bytes_recv, now.bytes_recv, elapsed),
                         "bytes/s", collect_time, labels, f"Receive rate on {iface}"),
            self._sample("net_out", counter_rate(last.bytes_sent, now.bytes_sent, elapsed),
                         "bytes/s", collect_time, labels, f"Send rate on {iface}"),
            self._sample("net_in_pkt", counter_rate(last.packets_recv, now.packets_recv, elapsed),
                         "packets/s", collect_time, labels, f"Packets received per second on {iface}"),
            self._sample("net_out_pkt", counter_rate(last.packets_sent, now.packets_sent, elapsed),
                         "packets/s", collect_time, labels, f"Packets sent per second on {iface}"),
            self._sample("net_drop_util", delta_ratio(delta_drops, delta_packets),
                         "%", collect_time, labels, f"Dropped packet percentage on {iface}"),
            self._sample("net_err_util", delta_ratio(delta_errors, delta_packets),
                         "%", collect_time, labels, f"Errored packet percentage on {iface}"),
        ]
