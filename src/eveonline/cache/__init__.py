"""Response caches for eveonline.

Every backend implements :class:`Cache` (``write``, ``read``, ``clear``):

* :class:`MemoryCache` -- process-local ``dict``; the client's default.
* :class:`FileCache` -- one file per entry in hash-sharded directories.
* :class:`DiskCache` -- :mod:`diskcache`-backed store.

Clients store JSON-serialised API results under the request's cache key
for as long as the server's ``cachedUntil`` timestamp allows.
"""

from eveonline.cache.base import Cache
from eveonline.cache.disk import DiskCache
from eveonline.cache.file import FileCache
from eveonline.cache.memory import MemoryCache

__all__ = ["Cache", "DiskCache", "FileCache", "MemoryCache"]
