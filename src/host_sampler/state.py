"""Per-instance cache of the last counter snapshot for each device."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

TOTAL = "total"


class DeltaStateStore(Generic[T]):
    """Last observed snapshot and capture time, keyed by device name.

    Entries for devices that disappear are never looked up again and are
    left in place; the OS device count bounds the mapping.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[T, float]] = {}

    def get(self, key: str) -> tuple[T | None, float, bool]:
        entry = self._entries.get(key)
        if entry is None:
            return None, 0.0, False
        snapshot, captured_at = entry
        return snapshot, captured_at, True

    def put(self, key: str, snapshot: T, captured_at: float) -> None:
        self._entries[key] = (snapshot, captured_at)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class SamplerState:
    """All mutable state owned by one sampler instance.

    ``stores`` maps a resource family ("cpu", "disk", "network", "protocol")
    to its :class:`DeltaStateStore`.  ``boot_time`` is fetched once and kept
    for the lifetime of the instance.
    """

    stores: dict[str, DeltaStateStore[Any]] = field(default_factory=dict)
    boot_time: float | None = None

    def store(self, family: str) -> DeltaStateStore[Any]:
        store = self.stores.get(family)
        if store is None:
            store = self.stores[family] = DeltaStateStore()
        return store

    def reset(self, family: str) -> None:
        store = self.stores.get(family)
        if store is not None:
            store.clear()
