"""Single-slot cache holding the most recent list-view result window."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from catalog_admin.domain.models import Product


@dataclass(frozen=True)
class CacheEntry:
    key: str
    records: Tuple[Product, ...]
    total: int


class ResultCache:
    """
    Holds zero or one `CacheEntry`.

    Entries are immutable and swapped in with a single assignment, so a
    reader on the event loop never observes a half-written entry. There is
    no eviction policy: the next `set` replaces the slot.
    """

    def __init__(self) -> None:
        self._entry: Optional[CacheEntry] = None

    def get(self) -> Optional[CacheEntry]:
        return self._entry

    @property
    def key(self) -> Optional[str]:
        return self._entry.key if self._entry is not None else None

    def set(self, key: str, records: Iterable[Product], total: int) -> CacheEntry:
        entry = CacheEntry(key=key, records=tuple(records), total=total)
        self._entry = entry
        return entry

    def invalidate(self) -> None:
        self._entry = None


__all__ = ["CacheEntry", "ResultCache"]
