"""Filesystem cache with hash-sharded directories and lazy expiry.

Each entry lives in its own file.  The SHA-1 digest of the cache key picks
the location: the first two hex characters name the top-level directory,
the next two the second-level directory, and the file itself is named
``<prefix><digest>``::

    <root>/dc/bc/dcbc8f63b06c899b9db957f0e03466860fce8056

A file holds one line of JSON metadata followed by the raw value::

    {"expireTime": 1320956033.0}
    {"serverOpen": "True", ...}

Only the first newline separates metadata from value, so values may
contain newlines.  Expired files are deleted when they are next read;
files that are never read again stay until :meth:`FileCache.clear`.
"""

from __future__ import annotations

import hashlib
import json
import shutil
from pathlib import Path
from typing import Optional, Union

from eveonline.cache.base import Cache, Clock
from eveonline.config import atomic_write
from eveonline.exceptions import CacheError


class FileCache(Cache):
    """Cache storing one file per entry beneath *path*.

    Args:
        path: Cache root directory.  Created on first write.
        prefix: Prepended to every cache file name.
        clock: Time source, see :class:`~eveonline.cache.base.Cache`.

    Example::

        cache = FileCache("/tmp/eveonline-cache", prefix="tq-")
        cache.write("https://api.eveonline.com/server/ServerStatus.xml.aspx", "{}", 180)
    """

    blocking = True

    def __init__(
        self,
        path: Union[str, Path],
        prefix: str = "",
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(clock)
        self._path = Path(path)
        self._prefix = prefix

    @property
    def path(self) -> Path:
        """The cache root directory."""
        return self._path

    @property
    def prefix(self) -> str:
        """The file name prefix."""
        return self._prefix

    def get_file_path(self, key: str) -> Path:
        """Return the path of the file holding the entry for *key*."""
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        return self._path / digest[:2] / digest[2:4] / f"{self._prefix}{digest}"

    def write(self, key: str, value: str, ttl: float) -> None:
        file_path = self.get_file_path(key)
        meta = json.dumps({"expireTime": self.get_current_time() + ttl})
        try:
            # exist_ok: concurrent writers may race to create the same shard
            file_path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(file_path, f"{meta}\n{value}")
        except OSError as exc:
            raise CacheError(f"Cannot write cache file {file_path}: {exc}") from exc

    def read(self, key: str) -> Optional[str]:
        file_path = self.get_file_path(key)
        try:
            data = file_path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CacheError(f"Cannot read cache file {file_path}: {exc}") from exc

        header, _, raw_value = data.partition(b"\n")
        try:
            expire_time = float(json.loads(header)["expireTime"])
            value = raw_value.decode("utf-8")
        except (ValueError, KeyError, TypeError) as exc:
            raise CacheError(f"Corrupt cache file {file_path}: {exc}") from exc

        if self.get_current_time() >= expire_time:
            try:
                file_path.unlink(missing_ok=True)
            except OSError as exc:
                raise CacheError(f"Cannot remove expired cache file {file_path}: {exc}") from exc
            return None
        return value

    def clear(self) -> None:
        """Delete everything beneath the cache root, keeping the root itself."""
        if not self._path.is_dir():
            return
        try:
            for child in self._path.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink(missing_ok=True)
        except OSError as exc:
            raise CacheError(f"Cannot clear cache directory {self._path}: {exc}") from exc
