"""OS statistics provider – raw counter snapshots for the collectors.

:class:`StatProvider` is the interface the collectors consume.
:class:`PsutilProvider` implements it with psutil, falling back to reading
``/proc`` directly for the counters psutil does not expose (protocol
counters and the system-wide file descriptor table).
"""

from __future__ import annotations

import abc
import contextlib
import logging
import socket
from collections import Counter
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Iterator

import psutil

from .errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadAverage:
    load1: float
    load5: float
    load15: float


@dataclass(frozen=True)
class CpuTimes:
    """Cumulative CPU time per bucket, summed over all cores (seconds)."""

    user: float = 0.0
    nice: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    steal: float = 0.0
    guest: float = 0.0
    guest_nice: float = 0.0

    @property
    def busy(self) -> float:
        return (self.guest_nice + self.guest + self.nice + self.softirq
                + self.irq + self.user + self.system)

    @property
    def total(self) -> float:
        return self.busy + self.idle + self.iowait + self.steal


@dataclass(frozen=True)
class VirtualMemory:
    total: int
    available: int
    used: int
    free: int
    cached: int
    percent: float


@dataclass(frozen=True)
class SwapMemory:
    total: int
    used: int
    percent: float


@dataclass(frozen=True)
class DiskPartition:
    device: str
    mountpoint: str
    fstype: str


@dataclass(frozen=True)
class DiskUsage:
    total: int
    used: int
    free: int
    percent: float


@dataclass(frozen=True)
class DiskIOCounters:
    """Cumulative block device counters; times are in milliseconds."""

    read_count: int = 0
    write_count: int = 0
    read_bytes: int = 0
    write_bytes: int = 0
    read_time: int = 0
    write_time: int = 0
    busy_time: int = 0


@dataclass(frozen=True)
class NetIOCounters:
    bytes_sent: int = 0
    bytes_recv: int = 0
    packets_sent: int = 0
    packets_recv: int = 0
    errin: int = 0
    errout: int = 0
    dropin: int = 0
    dropout: int = 0


@dataclass(frozen=True)
class ProtoCounters:
    """Counters of one protocol from ``/proc/net/snmp`` (e.g. ``tcp``)."""

    protocol: str
    stats: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class FileDescriptorStat:
    allocated: int
    unused: int
    maximum: int


def sum_counters(snapshots: list, cls: type):
    """Sum the integer fields of same-typed counter snapshots into one."""
    totals = {f.name: 0 for f in fields(cls)}
    for snap in snapshots:
        for name in totals:
            totals[name] += getattr(snap, name)
    return cls(**totals)


def parse_proto_counters(text: str) -> list[ProtoCounters]:
    """Parse the header/value line pairs of ``/proc/net/snmp``.

    Each protocol appears as two lines sharing a ``Name:`` prefix, the
    first holding field names and the second their values.
    """
    headers: dict[str, list[str]] = {}
    result: list[ProtoCounters] = []
    for line in text.splitlines():
        if ":" not in line:
            continue
        prefix, _, rest = line.partition(":")
        parts = rest.split()
        if prefix not in headers:
            headers[prefix] = parts
            continue
        names = headers.pop(prefix)
        stats: dict[str, int] = {}
        for name, raw in zip(names, parts):
            try:
                stats[name] = int(raw)
            except ValueError:
                continue
        result.append(ProtoCounters(protocol=prefix.strip().lower(), stats=stats))
    return result


def parse_file_nr(text: str) -> FileDescriptorStat:
    parts = text.split()
    if len(parts) < 3:
        raise ValueError(f"unexpected file-nr content: {text!r}")
    return FileDescriptorStat(allocated=int(parts[0]), unused=int(parts[1]), maximum=int(parts[2]))


class StatProvider(abc.ABC):
    """Source of best-effort OS snapshots.

    Every query either returns a complete snapshot or raises
    :class:`ProviderError`; partial snapshots are never returned.
    """

    @abc.abstractmethod
    def load_average(self) -> LoadAverage: ...

    @abc.abstractmethod
    def boot_time(self) -> float: ...

    @abc.abstractmethod
    def cpu_times(self) -> CpuTimes: ...

    @abc.abstractmethod
    def cpu_count(self) -> int: ...

    @abc.abstractmethod
    def virtual_memory(self) -> VirtualMemory: ...

    @abc.abstractmethod
    def swap_memory(self) -> SwapMemory: ...

    @abc.abstractmethod
    def disk_partitions(self) -> list[DiskPartition]: ...

    @abc.abstractmethod
    def disk_usage(self, path: str) -> DiskUsage: ...

    @abc.abstractmethod
    def disk_io_counters(self, disks: list[str] | None = None) -> dict[str, DiskIOCounters]: ...

    @abc.abstractmethod
    def net_io_counters(self, interfaces: list[str] | None = None) -> dict[str, NetIOCounters]: ...

    @abc.abstractmethod
    def proto_counters(self) -> list[ProtoCounters]: ...

    @abc.abstractmethod
    def tcp_connection_states(self) -> dict[str, int]: ...

    @abc.abstractmethod
    def file_descriptors(self) -> FileDescriptorStat: ...

    def hostname(self) -> str:
        return socket.gethostname()

    def ip_address(self) -> str:
        return ""


@contextlib.contextmanager
def _query(what: str) -> Iterator[None]:
    try:
        yield
    except ProviderError:
        raise
    except (psutil.Error, OSError, RuntimeError, AttributeError, ValueError) as exc:
        raise ProviderError(f"{what} query failed: {exc}") from exc


def _only(mapping: dict, names: list[str] | None) -> dict:
    if not names:
        return dict(mapping)
    return {k: v for k, v in mapping.items() if k in names}


class PsutilProvider(StatProvider):
    """Reads host statistics through psutil and ``/proc``.

    *proc_root* points at the procfs mount, which differs when the sampler
    runs in a container with the host's procfs mounted elsewhere.
    """

    def __init__(self, proc_root: str | Path = "/proc") -> None:
        self._proc_root = Path(proc_root)

    def load_average(self) -> LoadAverage:
        with _query("load average"):
            load1, load5, load15 = psutil.getloadavg()
        return LoadAverage(load1, load5, load15)

    def boot_time(self) -> float:
        with _query("boot time"):
            return float(psutil.boot_time())

    def cpu_times(self) -> CpuTimes:
        with _query("cpu times"):
            raw = psutil.cpu_times(percpu=False)
        # buckets other than user/system/idle are platform dependent
        return CpuTimes(**{
            f.name: float(getattr(raw, f.name, 0.0)) for f in fields(CpuTimes)
        })

    def cpu_count(self) -> int:
        with _query("cpu count"):
            return psutil.cpu_count(logical=True) or 0

    def virtual_memory(self) -> VirtualMemory:
        with _query("virtual memory"):
            mem = psutil.virtual_memory()
        return VirtualMemory(
            total=mem.total,
            available=mem.available,
            used=mem.used,
            free=mem.free,
            cached=getattr(mem, "cached", 0),
            percent=mem.percent,
        )

    def swap_memory(self) -> SwapMemory:
        with _query("swap memory"):
            swap = psutil.swap_memory()
        return SwapMemory(total=swap.total, used=swap.used, percent=swap.percent)

    def disk_partitions(self) -> list[DiskPartition]:
        with _query("disk partitions"):
            parts = psutil.disk_partitions(all=False)
        return [DiskPartition(p.device, p.mountpoint, p.fstype) for p in parts]

    def disk_usage(self, path: str) -> DiskUsage:
        with _query(f"disk usage of {path}"):
            usage = psutil.disk_usage(path)
        return DiskUsage(usage.total, usage.used, usage.free, usage.percent)

    def disk_io_counters(self, disks: list[str] | None = None) -> dict[str, DiskIOCounters]:
        with _query("disk io counters"):
            raw = psutil.disk_io_counters(perdisk=True) or {}
        return {
            name: DiskIOCounters(
                read_count=c.read_count,
                write_count=c.write_count,
                read_bytes=c.read_bytes,
                write_bytes=c.write_bytes,
                read_time=c.read_time,
                write_time=c.write_time,
                busy_time=getattr(c, "busy_time", 0),
            )
            for name, c in _only(raw, disks).items()
        }

    def net_io_counters(self, interfaces: list[str] | None = None) -> dict[str, NetIOCounters]:
        with _query("network io counters"):
            raw = psutil.net_io_counters(pernic=True) or {}
        return {
            name: NetIOCounters(
                bytes_sent=c.bytes_sent,
                bytes_recv=c.bytes_recv,
                packets_sent=c.packets_sent,
                packets_recv=c.packets_recv,
                errin=c.errin,
                errout=c.errout,
                dropin=c.dropin,
                dropout=c.dropout,
            )
            for name, c in _only(raw, interfaces).items()
        }

    def proto_counters(self) -> list[ProtoCounters]:
        with _query("protocol counters"):
            text = (self._proc_root / "net" / "snmp").read_text(encoding="utf-8")
        return parse_proto_counters(text)

    def tcp_connection_states(self) -> dict[str, int]:
        with _query("tcp connections"):
            conns = psutil.net_connections(kind="tcp")
        return dict(Counter(c.status.lower() for c in conns if c.status != psutil.CONN_NONE))

    def file_descriptors(self) -> FileDescriptorStat:
        with _query("file descriptors"):
            text = (self._proc_root / "sys" / "fs" / "file-nr").read_text(encoding="utf-8")
            return parse_file_nr(text)

    def ip_address(self) -> str:
        try:
            addrs = psutil.net_if_addrs()
        except (psutil.Error, OSError):
            logger.debug("Could not list interface addresses", exc_info=True)
            return ""
        for name, entries in sorted(addrs.items()):
            for addr in entries:
                if addr.family == socket.AF_INET and not addr.address.startswith("127."):
                    return addr.address
        return ""
