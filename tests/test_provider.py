"""Tests for the psutil-backed stat provider."""

import sys
import tempfile
from pathlib import Path

import pytest

from host_sampler.errors import ProviderError
from host_sampler.provider import (
    CpuTimes,
    NetIOCounters,
    PsutilProvider,
    parse_file_nr,
    parse_proto_counters,
    sum_counters,
)

SNMP = """\
Ip: Forwarding DefaultTTL InReceives
Ip: 1 64 12345
Icmp: InMsgs InErrors
Icmp: 10 0
Tcp: RtoAlgorithm RtoMin RtoMax MaxConn ActiveOpens PassiveOpens AttemptFails EstabResets CurrEstab InSegs OutSegs RetransSegs InErrs OutRsts InCsumErrors
Tcp: 1 200 120000 -1 500 20 3 7 12 98765 87654 321 0 44 0
Udp: InDatagrams NoPorts
Udp: 55 1
"""


def test_parse_proto_counters():
    protos = parse_proto_counters(SNMP)
    assert [p.protocol for p in protos] == ["ip", "icmp", "tcp", "udp"]
    tcp = protos[2]
    assert tcp.stats["OutSegs"] == 87654
    assert tcp.stats["RetransSegs"] == 321
    assert tcp.stats["MaxConn"] == -1


def test_parse_file_nr():
    fds = parse_file_nr("2048\t0\t9223372036854775807\n")
    assert fds.allocated == 2048
    assert fds.unused == 0
    assert fds.maximum == 9223372036854775807
    with pytest.raises(ValueError):
        parse_file_nr("12")


def test_sum_counters():
    total = sum_counters([NetIOCounters(bytes_recv=1, errin=2), NetIOCounters(bytes_recv=4)], NetIOCounters)
    assert total == NetIOCounters(bytes_recv=5, errin=2)
    assert sum_counters([], NetIOCounters) == NetIOCounters()


def test_cpu_times_busy_and_total():
    times = CpuTimes(user=1, nice=2, system=3, idle=4, iowait=5, irq=6, softirq=7,
                     steal=8, guest=9, guest_nice=10)
    assert times.busy == 1 + 2 + 3 + 6 + 7 + 9 + 10
    assert times.total == times.busy + 4 + 5 + 8


def test_proc_root_override():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "net").mkdir()
        (root / "net" / "snmp").write_text(SNMP, encoding="utf-8")
        (root / "sys" / "fs").mkdir(parents=True)
        (root / "sys" / "fs" / "file-nr").write_text("100 0 500\n", encoding="utf-8")

        provider = PsutilProvider(proc_root=root)
        assert provider.proto_counters()[2].protocol == "tcp"
        assert provider.file_descriptors().maximum == 500


def test_missing_proc_files_raise_provider_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        provider = PsutilProvider(proc_root=tmpdir)
        with pytest.raises(ProviderError):
            provider.proto_counters()
        with pytest.raises(ProviderError):
            provider.file_descriptors()


def test_disk_usage_of_missing_path():
    with pytest.raises(ProviderError):
        PsutilProvider().disk_usage("/nonexistent/host_sampler/path")


def test_psutil_snapshots():
    provider = PsutilProvider()
    assert provider.cpu_count() >= 1
    assert provider.boot_time() > 0
    times = provider.cpu_times()
    assert times.total > 0
    mem = provider.virtual_memory()
    assert mem.total > 0
    assert 0 <= mem.percent <= 100
    assert provider.load_average().load1 >= 0
    assert isinstance(provider.net_io_counters(), dict)
    assert provider.hostname()


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="reads /proc")
def test_linux_proc_counters():
    provider = PsutilProvider()
    names = [p.protocol for p in provider.proto_counters()]
    assert "tcp" in names
    assert provider.file_descriptors().maximum > 0


def test_allow_lists():
    provider = PsutilProvider()
    assert provider.net_io_counters(["__no_such_nic__"]) == {}
