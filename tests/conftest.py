"""Shared fixtures: an in-memory stat provider with scriptable counters."""

from __future__ import annotations

import pytest

from host_sampler.errors import ProviderError
from host_sampler.provider import (
    CpuTimes,
    DiskIOCounters,
    DiskPartition,
    DiskUsage,
    FileDescriptorStat,
    LoadAverage,
    NetIOCounters,
    ProtoCounters,
    StatProvider,
    SwapMemory,
    VirtualMemory,
)


class FakeProvider(StatProvider):
    """Provider returning whatever the test assigned to its attributes.

    Method names listed in ``failing`` raise :class:`ProviderError`.
    """

    def __init__(self) -> None:
        self.load = LoadAverage(0.5, 0.4, 0.3)
        self.boot = 1_700_000_000.0
        self.boot_calls = 0
        self.cpu = CpuTimes(user=100.0, system=50.0, idle=800.0, iowait=10.0)
        self.ncpus = 4
        self.memory = VirtualMemory(
            total=8_000, available=5_000, used=3_000, free=4_000, cached=1_000, percent=37.5,
        )
        self.swap = SwapMemory(total=2_000, used=500, percent=25.0)
        self.partitions: list[DiskPartition] = []
        self.usage: dict[str, DiskUsage] = {}
        self.disks: dict[str, DiskIOCounters] = {}
        self.nics: dict[str, NetIOCounters] = {}
        self.protos: list[ProtoCounters] = []
        self.tcp_states: dict[str, int] = {}
        self.fds = FileDescriptorStat(allocated=1_024, unused=0, maximum=65_536)
        self.failing: set[str] = set()

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise ProviderError(f"{name} unavailable")

    def load_average(self) -> LoadAverage:
        self._check("load_average")
        return self.load

    def boot_time(self) -> float:
        self._check("boot_time")
        self.boot_calls += 1
        return self.boot

    def cpu_times(self) -> CpuTimes:
        self._check("cpu_times")
        return self.cpu

    def cpu_count(self) -> int:
        self._check("cpu_count")
        return self.ncpus

    def virtual_memory(self) -> VirtualMemory:
        self._check("virtual_memory")
        return self.memory

    def swap_memory(self) -> SwapMemory:
        self._check("swap_memory")
        return self.swap

    def disk_partitions(self) -> list[DiskPartition]:
        self._check("disk_partitions")
        return list(self.partitions)

    def disk_usage(self, path: str) -> DiskUsage:
        self._check("disk_usage")
        if path not in self.usage:
            raise ProviderError(f"no usage for {path}")
        return self.usage[path]

    def disk_io_counters(self, disks: list[str] | None = None) -> dict[str, DiskIOCounters]:
        self._check("disk_io_counters")
        return {k: v for k, v in self.disks.items() if not disks or k in disks}

    def net_io_counters(self, interfaces: list[str] | None = None) -> dict[str, NetIOCounters]:
        self._check("net_io_counters")
        return {k: v for k, v in self.nics.items() if not interfaces or k in interfaces}

    def proto_counters(self) -> list[ProtoCounters]:
        self._check("proto_counters")
        return list(self.protos)

    def tcp_connection_states(self) -> dict[str, int]:
        self._check("tcp_connection_states")
        return dict(self.tcp_states)

    def file_descriptors(self) -> FileDescriptorStat:
        self._check("file_descriptors")
        return self.fds

    def hostname(self) -> str:
        return "test-host"

    def ip_address(self) -> str:
        return "10.0.0.5"


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()
