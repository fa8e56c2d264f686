"""Pattern-based exclusion of mounted filesystems."""

from __future__ import annotations

import logging
import re

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _compile(pattern: str | None, option: str) -> re.Pattern[str] | None:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        logger.error("Invalid %s pattern %r: %s", option, pattern, exc)
        raise ConfigurationError(f"invalid {option} pattern {pattern!r}: {exc}") from exc


class DeviceFilter:
    """Excludes devices whose mount path or filesystem type matches a pattern.

    Both patterns are optional and compiled once; an invalid pattern raises
    :class:`ConfigurationError` so a misconfigured sampler never starts.
    """

    def __init__(self, exclude_path: str | None = None, exclude_fs_type: str | None = None) -> None:
        self._path_re = _compile(exclude_path, "exclude_disk_path")
        self._fs_type_re = _compile(exclude_fs_type, "exclude_disk_fs_type")

    def is_excluded(self, path: str, fs_type: str) -> bool:
        if self._path_re is not None and self._path_re.search(path):
            return True
        if self._fs_type_re is not None and self._fs_type_re.search(fs_type):
            return True
        return False
