"""Pure delta/rate arithmetic shared by the collectors.

Each metric family has its own fallback for an empty interval: latency
averages become NaN, ratio percentages become ``0.0``, and rate metrics
are not produced at all (see :func:`has_baseline`).
"""

from __future__ import annotations

import math


def elapsed_seconds(previous_time: float, now: float) -> float:
    return now - previous_time


def has_baseline(found: bool, elapsed: float) -> bool:
    """Whether a delta can be computed against the stored baseline."""
    return found and elapsed > 0


def counter_rate(previous: float, current: float, elapsed: float) -> float:
    """Per-second rate of a monotonic counter.

    A counter that went backwards (device replaced, counter wrapped) is not
    special-cased and yields a negative rate.
    """
    return (current - previous) / elapsed


def bucket_percent(previous: float, current: float, total_delta: float, factor: float = 1.0) -> float:
    """Share of *total_delta* spent in one CPU bucket, as a percentage."""
    return 100 * (current - previous) / total_delta * factor


def average_latency(time_delta: float, ops_delta: float) -> float:
    """Mean time per operation, or NaN when no operation completed."""
    if ops_delta > 0:
        return time_delta / ops_delta
    return math.nan


def delta_ratio(numerator_delta: float, denominator_delta: float) -> float:
    """``100 * numerator / denominator``, or ``0.0`` for an empty denominator."""
    if denominator_delta <= 0:
        return 0.0
    return 100 * numerator_delta / denominator_delta


def busy_utilization(busy_ms_delta: float, elapsed: float) -> float:
    """Percentage of wall-clock time a device was busy."""
    return busy_ms_delta * 100.0 / 1000.0 / elapsed
