"""Configuration loading and validation for host_sampler."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError

DEFAULT_EXCLUDE_DISK_PATH = "^/(dev|proc|sys|var/lib/docker/.+|var/lib/kubelet/pods/.+)($|/)"
DEFAULT_EXCLUDE_DISK_FS_TYPE = (
    "^(autofs|binfmt_misc|cgroup|configfs|debugfs|devpts|devtmpfs|fusectl|hugetlbfs|mqueue"
    "|overlay|proc|procfs|pstore|rpc_pipefs|securityfs|sysfs|tracefs)$"
)


@dataclass
class OtelExporterConfig:
    """OpenTelemetry exporter settings."""

    endpoint: str = "http://localhost:4318"
    service_name: str = "host-sampler"
    headers: dict[str, str] = field(default_factory=dict)
    export_interval_ms: int = 10000


@dataclass
class SamplerConfig:
    """Host sampler settings: which collectors run and how devices are chosen."""

    enabled: bool = True
    interval_seconds: float = 10.0
    core: bool = True
    cpu: bool = True
    cpu_percent: bool = True
    memory: bool = True
    disk: bool = True
    network: bool = True
    protocol: bool = True
    tcp: bool = False
    open_fd: bool = True
    disks: list[str] = field(default_factory=list)
    net_interfaces: list[str] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    exclude_disk_path: str = DEFAULT_EXCLUDE_DISK_PATH
    exclude_disk_fs_type: str = DEFAULT_EXCLUDE_DISK_FS_TYPE
    # CPU quota in millicores; CPU percentages are rescaled to it when set
    cpu_request: str | None = None

    def collector_flags(self) -> dict[str, bool]:
        """Enable flag per collector name."""
        return {
            "core": self.core,
            "cpu": self.cpu,
            "memory": self.memory,
            "disk": self.disk,
            "network": self.network,
            "protocol": self.protocol,
            "open_fd": self.open_fd,
        }


@dataclass
class LocalExporterConfig:
    """Local file exporter settings."""

    enabled: bool = True
    output_dir: str = "./metrics_data"
    format: str = "jsonl"


@dataclass
class HostSamplerConfig:
    """Top-level host_sampler configuration."""

    mode: str = "local"
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    otel: OtelExporterConfig = field(default_factory=OtelExporterConfig)
    local_exporter: LocalExporterConfig = field(default_factory=LocalExporterConfig)


def _merge_dict(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *source* into *target*."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge_dict(target[key], value)
        else:
            target[key] = value
    return target


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using HOST_SAMPLER_ prefix."""
    env_map = {
        "HOST_SAMPLER_MODE": ("mode",),
        "HOST_SAMPLER_OTEL_ENDPOINT": ("otel", "endpoint"),
        "HOST_SAMPLER_OTEL_SERVICE_NAME": ("otel", "service_name"),
        "HOST_SAMPLER_INTERVAL": ("sampler", "interval_seconds"),
        "HOST_SAMPLER_CPU_REQUEST": ("sampler", "cpu_request"),
        "HOST_SAMPLER_LOCAL_OUTPUT_DIR": ("local_exporter", "output_dir"),
    }
    for env_key, path in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            obj = data
            for part in path[:-1]:
                obj = obj.setdefault(part, {})
            final_key = path[-1]
            # coerce numeric values
            if final_key == "interval_seconds":
                try:
                    obj[final_key] = float(value)
                except ValueError as exc:
                    raise ConfigurationError(f"{env_key} must be a number, got {value!r}") from exc
            else:
                obj[final_key] = value
    return data


def _section(cls: type, data: Any) -> Any:
    if not isinstance(data, dict):
        data = {}
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _dict_to_config(data: dict[str, Any]) -> HostSamplerConfig:
    """Convert a raw dictionary to a HostSamplerConfig dataclass."""
    sampler = _section(SamplerConfig, data.get("sampler", {}))
    if sampler.cpu_request is not None:
        sampler.cpu_request = str(sampler.cpu_request)
    sampler.labels = {str(k): str(v) for k, v in (sampler.labels or {}).items()}

    return HostSamplerConfig(
        mode=data.get("mode", "local"),
        sampler=sampler,
        otel=_section(OtelExporterConfig, data.get("otel", {})),
        local_exporter=_section(LocalExporterConfig, data.get("local_exporter", {})),
    )


def load_config(path: str | Path | None = None, overrides: dict[str, Any] | None = None) -> HostSamplerConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``host_sampler.yaml`` in the current directory if *path* is None.
    *overrides* are merged over the file contents before environment
    variables are applied.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("host_sampler.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            try:
                loaded = yaml.safe_load(fh)
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"cannot parse {path}: {exc}") from exc
            if isinstance(loaded, dict):
                data = loaded

    if overrides:
        _merge_dict(data, overrides)
    data = _apply_env_overrides(data)
    return _dict_to_config(data)
