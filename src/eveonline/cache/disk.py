"""Cache backed by :mod:`diskcache`.

An alternative to :class:`~eveonline.cache.FileCache` for hosts that issue
many distinct requests: :class:`diskcache.Cache` keeps entries in a SQLite
index plus value files and enforces expiry natively, so expired entries
are culled by diskcache itself rather than on read.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Optional, Union

import diskcache

from eveonline.cache.base import Cache
from eveonline.exceptions import CacheError


class DiskCache(Cache):
    """Cache persisted in a :class:`diskcache.Cache` directory.

    diskcache tracks expiry against the wall clock, so the ``clock``
    argument of :class:`~eveonline.cache.base.Cache` does not apply here.

    Args:
        path: Directory for the diskcache database.
    """

    blocking = True

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__()
        self._path = Path(path)
        self._cache: Optional[diskcache.Cache] = None

    @property
    def path(self) -> Path:
        """The diskcache directory."""
        return self._path

    def write(self, key: str, value: str, ttl: float) -> None:
        try:
            self._backend().set(key, value, expire=ttl)
        except (OSError, sqlite3.Error) as exc:
            raise CacheError(f"Cannot write to disk cache {self._path}: {exc}") from exc

    def read(self, key: str) -> Optional[str]:
        try:
            value: Any = self._backend().get(key)
        except (OSError, sqlite3.Error) as exc:
            raise CacheError(f"Cannot read from disk cache {self._path}: {exc}") from exc
        return value

    def clear(self) -> None:
        try:
            self._backend().clear()
        except (OSError, sqlite3.Error) as exc:
            raise CacheError(f"Cannot clear disk cache {self._path}: {exc}") from exc

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()
            self._cache = None

    def __len__(self) -> int:
        return len(self._backend())

    def _backend(self) -> diskcache.Cache:
        if self._cache is None:
            self._cache = diskcache.Cache(str(self._path))
        return self._cache
