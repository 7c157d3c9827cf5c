"""FIFO rate limiter for outgoing API calls.

The EVE API throttles clients that issue too many requests per second.
:class:`RateLimiter` spaces jobs out on the asyncio event loop so that no
two start closer together than ``1 / per_second`` seconds, in the order
they were enqueued.

A job should perform its rate-limited action *immediately* when invoked
(e.g. send the HTTP request).  A job that waits before doing so can make
the observed rate spike above the limit, although the average rate stays
below it as long as each job performs a single action.

Usage::

    limiter = RateLimiter(per_second=30)
    result = await limiter.enqueue(lambda: client.fetch("server:ServerStatus"))
"""

from __future__ import annotations

import asyncio
import inspect
from collections import deque
from typing import Any, Callable, Optional

from eveonline.output import get_output

Job = Callable[[], Any]


class RateLimiter:
    """Runs zero-argument jobs FIFO, at most *per_second* per second.

    Jobs are always invoked from the event loop, never from within
    :meth:`enqueue` itself, so an exception raised by a job only fails the
    future returned for that job.

    Args:
        per_second: Maximum number of jobs started per second.
    """

    def __init__(self, per_second: float) -> None:
        if per_second <= 0:
            raise ValueError("per_second must be greater than 0")
        self._per_second = per_second
        self._interval = 1.0 / per_second
        self._last_executed: Optional[float] = None
        self._pending: deque[tuple[Job, asyncio.Future[Any]]] = deque()
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def per_second(self) -> float:
        return self._per_second

    @property
    def pending(self) -> int:
        """Number of jobs waiting for their turn."""
        return len(self._pending)

    def enqueue(self, job: Job) -> asyncio.Future[Any]:
        """Schedule *job* and return a future for its result.

        If *job* returns an awaitable, the future resolves with the awaited
        value.  Must be called from within a running event loop.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        now = loop.time()

        wait = 0.0
        if self._last_executed is not None:
            wait = self._last_executed + self._interval - now
        if self._timer is not None or wait > 0:
            self._pending.append((job, future))
            if self._timer is None:
                self._timer = loop.call_later(wait, self._process_pending)
            get_output().debug(f"Rate limit reached, {len(self._pending)} job(s) queued")
        else:
            self._last_executed = now
            loop.call_soon(self._run, job, future)
        return future

    def _process_pending(self) -> None:
        loop = asyncio.get_running_loop()
        job, future = self._pending.popleft()
        if self._pending:
            self._timer = loop.call_later(self._interval, self._process_pending)
        else:
            self._timer = None
        self._last_executed = loop.time()
        self._run(job, future)

    def _run(self, job: Job, future: asyncio.Future[Any]) -> None:
        if future.cancelled():
            return
        try:
            result = job()
        except Exception as exc:
            future.set_exception(exc)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            task.add_done_callback(lambda t: _resolve(future, t))
        else:
            future.set_result(result)


def _resolve(future: asyncio.Future[Any], task: asyncio.Future[Any]) -> None:
    if future.cancelled():
        return
    if task.cancelled():
        future.cancel()
    elif task.exception() is not None:
        future.set_exception(task.exception())
    else:
        future.set_result(task.result())
