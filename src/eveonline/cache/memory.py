"""Process-local cache backed by a ``dict``."""

from __future__ import annotations

from typing import NamedTuple, Optional

from eveonline.cache.base import Cache, Clock


class _Entry(NamedTuple):
    value: str
    expire_time: float


class MemoryCache(Cache):
    """Keeps entries in memory for the lifetime of the process.

    Expired entries are not removed; they are skipped on read and replaced
    by the next write of the same key.  The number of entries is unbounded,
    so long-running processes touching many distinct requests should use
    :class:`~eveonline.cache.FileCache` instead.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self._entries: dict[str, _Entry] = {}

    def write(self, key: str, value: str, ttl: float) -> None:
        self._entries[key] = _Entry(value, self.get_current_time() + ttl)

    def read(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None or self.get_current_time() >= entry.expire_time:
            return None
        return entry.value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
