"""Tests for the metric exporters."""

import json
import math
import tempfile
from pathlib import Path

import pytest

from host_sampler.collector.base import MetricSample
from host_sampler.config import LocalExporterConfig, OtelExporterConfig
from host_sampler.exporter.local import LocalExporter, sample_to_record
from host_sampler.labels import LabelSet


def _sample(name="disk_rbps", value=400.0, **labels):
    return MetricSample(
        name=name,
        value=value,
        unit="bytes/s",
        timestamp=1700000000.0,
        labels=LabelSet.build({"hostname": "h1"}, **labels),
    )


def test_sample_to_record():
    record = sample_to_record(_sample(disk="sda"))
    assert record == {
        "name": "disk_rbps",
        "value": 400.0,
        "unit": "bytes/s",
        "timestamp": 1700000000.0,
        "labels": {"disk": "sda", "hostname": "h1"},
    }


def test_nan_is_written_as_null():
    record = sample_to_record(_sample("disk_rlatency", math.nan, disk="sda"))
    assert record["value"] is None
    json.dumps(record, allow_nan=False)


def test_local_exporter_writes_jsonl():
    with tempfile.TemporaryDirectory() as tmpdir:
        exporter = LocalExporter(LocalExporterConfig(output_dir=tmpdir))
        exporter.export([_sample(disk="sda"), _sample(disk="total")])
        exporter.export([])
        exporter.export([_sample("net_in", 12.5, interface="eth0")])
        exporter.shutdown()

        files = list(Path(tmpdir).glob("metrics-*.jsonl"))
        assert len(files) == 1
        lines = files[0].read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        assert json.loads(lines[2])["labels"]["interface"] == "eth0"


def test_local_exporter_creates_output_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / "nested" / "metrics"
        exporter = LocalExporter(LocalExporterConfig(output_dir=str(target)))
        exporter.shutdown()
        assert target.is_dir()


def test_otel_exporter_records_gauges():
    pytest.importorskip("opentelemetry.sdk")
    from host_sampler.exporter.otel import OtelExporter

    # long interval so nothing is pushed to the unreachable endpoint
    exporter = OtelExporter(OtelExporterConfig(
        endpoint="http://127.0.0.1:9", export_interval_ms=3_600_000,
    ))
    try:
        exporter.export([_sample(disk="sda"), _sample(disk="sdb"), _sample("net_in", 1.0)])
        assert sorted(exporter._gauges) == ["disk_rbps", "net_in"]
    finally:
        exporter._provider.shutdown(timeout_millis=100)
