"""Deterministic label sets attached to every emitted metric."""

from __future__ import annotations

from typing import Iterable, Iterator

KEY_VALUE_SEPARATOR = "#$#"
PAIR_SEPARATOR = "|"


class LabelSet:
    """An ordered set of ``(key, value)`` pairs with unique keys.

    Pairs are kept sorted by key so two sets built from the same pairs in a
    different order serialize identically.  Instances are never mutated by
    :meth:`with_label`; collectors clone the common base for each device.
    """

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        merged: dict[str, str] = {}
        for key, value in pairs:
            merged[str(key)] = str(value)
        self._pairs: tuple[tuple[str, str], ...] = tuple(sorted(merged.items()))

    @classmethod
    def build(cls, common: LabelSet | dict[str, str] | None = None, /, **extra: str) -> LabelSet:
        """Merge *common* labels with *extra* dimensions; *extra* wins on conflict."""
        pairs: list[tuple[str, str]] = []
        if isinstance(common, LabelSet):
            pairs.extend(common)
        elif common:
            pairs.extend(common.items())
        pairs.extend(extra.items())
        return cls(pairs)

    def with_label(self, key: str, value: str) -> LabelSet:
        """Return a copy with one more dimension appended."""
        return LabelSet((*self._pairs, (key, value)))

    def serialize(self) -> str:
        return PAIR_SEPARATOR.join(f"{k}{KEY_VALUE_SEPARATOR}{v}" for k, v in self._pairs)

    def to_dict(self) -> dict[str, str]:
        return dict(self._pairs)

    def get(self, key: str, default: str | None = None) -> str | None:
        for k, v in self._pairs:
            if k == key:
                return v
        return default

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelSet):
            return NotImplemented
        return self._pairs == other._pairs

    def __hash__(self) -> int:
        return hash(self._pairs)

    def __repr__(self) -> str:
        return f"LabelSet({self.serialize()!r})"

    def __str__(self) -> str:
        return self.serialize()
