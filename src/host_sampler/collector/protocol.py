"""TCP protocol counter collector."""

from __future__ import annotations

import logging

from ..errors import ProviderError
from ..labels import LabelSet
from ..provider import ProtoCounters, StatProvider
from ..state import SamplerState
from .base import BaseCollector, MetricSample
from .delta import delta_ratio, elapsed_seconds, has_baseline

logger = logging.getLogger(__name__)

PROTOCOL_FAMILY = "protocol"
TCP = "tcp"


class ProtocolCollector(BaseCollector):
    """Collects TCP segment deltas and the retransmission percentage.

    Only the ``tcp`` entry of the provider's protocol counters is used.
    Segment metrics are raw per-cycle deltas, not per-second rates.  With
    *tcp_states* enabled the current connection count per TCP state is
    emitted as well.
    """

    families = (PROTOCOL_FAMILY,)

    def __init__(self, common_labels: LabelSet | None = None, *, tcp_states: bool = False) -> None:
        super().__init__(common_labels)
        self._tcp_states = tcp_states

    @property
    def name(self) -> str:
        return "protocol"

    def collect(self, provider: StatProvider, state: SamplerState, collect_time: float) -> list[MetricSample]:
        counters = [c for c in provider.proto_counters() if c.protocol == TCP]
        samples: list[MetricSample] = []
        if self._tcp_states:
            samples.extend(self._collect_states(provider, collect_time))

        store = state.store(PROTOCOL_FAMILY)
        for current in counters:
            # baselines are keyed by protocol name
            previous, previous_time, found = store.get(current.protocol)
            elapsed = elapsed_seconds(previous_time, collect_time)
            if has_baseline(found, elapsed):
                samples.extend(self._collect_tcp(previous, current, collect_time))
            store.put(current.protocol, current, collect_time)
        return samples

    def _collect_tcp(self, last: ProtoCounters, now: ProtoCounters, collect_time: float) -> list[MetricSample]:
        def delta(field: str) -> int:
            return now.stats.get(field, 0) - last.stats.get(field, 0)

        out_segs = delta("OutSegs")
        in_segs = delta("InSegs")
        retrans_segs = delta("RetransSegs")
        return [
            self._sample("protocol_tcp_outsegs", out_segs, "segments", collect_time,
                         description="TCP segments sent since the previous cycle"),
            self._sample("protocol_tcp_insegs", in_segs, "segments", collect_time,
                         description="TCP segments received since the previous cycle"),
            self._sample("protocol_tcp_retran_segs", retrans_segs, "segments", collect_time,
                         description="TCP segments retransmitted since the previous cycle"),
            self._sample("protocol_tcp_retran_util", delta_ratio(retrans_segs, out_segs), "%", collect_time,
                         description="Retransmitted share of sent TCP segments"),
        ]

    def _collect_states(self, provider: StatProvider, collect_time: float) -> list[MetricSample]:
        try:
            states = provider.tcp_connection_states()
        except ProviderError as exc:
            logger.warning("TCP connection states unavailable: %s", exc)
            return []
        return [
            self._sample(f"protocol_tcp_{status}", count, "connections", collect_time,
                         description=f"TCP connections in state {status.upper()}")
            for status, count in sorted(states.items())
        ]
