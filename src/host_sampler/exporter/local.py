"""Local file exporter – writes metric samples to JSONL files."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from ..collector.base import MetricSample
from ..config import LocalExporterConfig
from .base import BaseExporter

logger = logging.getLogger(__name__)


def sample_to_record(sample: MetricSample) -> dict:
    """JSON-ready form of one sample; NaN values are written as ``null``."""
    value = sample.value
    if value != value:
        value = None
    return {
        "name": sample.name,
        "value": value,
        "unit": sample.unit,
        "timestamp": sample.timestamp,
        "labels": sample.labels.to_dict(),
    }


class LocalExporter(BaseExporter):
    """Writes metric samples to JSONL files on disk.

    One file per UTC day is created inside the configured *output_dir*.
    """

    def __init__(self, config: LocalExporterConfig) -> None:
        self._config = config
        self._output_dir = Path(config.output_dir)
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._fh = None
        self._current_date: str | None = None
        logger.info("LocalExporter initialized → %s", self._output_dir)

    def _ensure_file(self) -> None:
        today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        if self._current_date != today or self._fh is None:
            if self._fh is not None:
                self._fh.close()
            filepath = self._output_dir / f"metrics-{today}.jsonl"
            self._fh = open(filepath, "a", encoding="utf-8")  # noqa: SIM115
            self._current_date = today

    def export(self, samples: list[MetricSample]) -> None:
        if not samples:
            return
        self._ensure_file()
        assert self._fh is not None
        for s in samples:
            self._fh.write(json.dumps(sample_to_record(s)) + "\n")
        self._fh.flush()

    def shutdown(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        logger.info("LocalExporter shut down")
