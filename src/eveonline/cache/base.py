"""Abstract cache interface shared by all backends.

A cache maps string keys to string values, each with an absolute expiry
instant.  Durations are seconds and the clock is :func:`time.time`, so an
entry written with ``ttl=180`` stops being returned three minutes later.
Reading a missing or expired key returns ``None``; only storage faults
raise (:class:`~eveonline.exceptions.CacheError`).
"""

from __future__ import annotations

import abc
import time
from typing import Callable, Optional

Clock = Callable[[], float]


class Cache(abc.ABC):
    """Base class for response caches.

    Args:
        clock: Returns the current time in seconds since the epoch.
            Defaults to :func:`time.time`; tests pass a fake clock.
    """

    #: Whether read/write touch the filesystem.  The async client moves
    #: calls on blocking caches off the event loop.
    blocking: bool = False

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or time.time

    def get_current_time(self) -> float:
        """Return the current time in seconds."""
        return self._clock()

    @abc.abstractmethod
    def write(self, key: str, value: str, ttl: float) -> None:
        """Store *value* under *key* for *ttl* seconds, replacing any previous entry."""

    @abc.abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the value stored under *key*, or ``None`` if absent or expired."""

    @abc.abstractmethod
    def clear(self) -> None:
        """Remove every entry."""

    def close(self) -> None:
        """Release resources held by the backend."""
