"""Asynchronous EVE API client -- mirrors :class:`~eveonline.client.sync_client.Client`.

:class:`AsyncClient` wraps :class:`httpx.AsyncClient` and suspends only on
I/O.  Response chunks are pushed into a
:class:`~eveonline.parser.StreamDecoder` as they arrive, and calls on
filesystem-backed caches (``Cache.blocking``) run in a worker thread via
:func:`asyncio.to_thread`.

An optional :class:`~eveonline.ratelimiter.RateLimiter` spaces out the
HTTP requests issued on cache misses; cache hits are never throttled.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Mapping, Optional, TypeVar

import httpx

from eveonline.client.base import BaseClient
from eveonline.models import ApiRequest
from eveonline.output import get_output
from eveonline.parser import StreamDecoder
from eveonline.ratelimiter import RateLimiter

T = TypeVar("T")


class AsyncClient(BaseClient):
    """Asynchronous EVE API client.

    Args:
        transport: Custom :class:`httpx.AsyncBaseTransport`.  Takes
            precedence over ``interface``.
        rate_limiter: Throttles outgoing requests.
        **kwargs: See :class:`~eveonline.client.base.BaseClient`.

    Example::

        async with AsyncClient(rate_limiter=RateLimiter(30)) as client:
            names = await client.fetch("eve:CharacterName", {"ids": "797400947"})
    """

    def __init__(
        self,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rate_limiter: Optional[RateLimiter] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._transport = transport
        self._rate_limiter = rate_limiter
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def rate_limiter(self) -> Optional[RateLimiter]:
        return self._rate_limiter

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        self._http()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP connection pool and the cache backend."""
        if self._client:
            await self._client.aclose()
            self._client = None
        await self._cache_call(self._cache.close)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def fetch(self, path: str, params: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        """Fetch an API resource, serving it from the cache while it is fresh.

        Same contract and errors as
        :meth:`~eveonline.client.sync_client.Client.fetch`.
        """
        self._require_path(path)
        request = self.get_request(path, params)
        key = request.cache_key
        output = get_output()

        cached = await self._cache_call(self._cache.read, key)
        if cached is not None:
            output.debug(f"Cache hit: {key}")
            return self._load_cached(cached)
        output.debug(f"Cache miss: {key}")

        if self._rate_limiter is not None:
            result = await self._rate_limiter.enqueue(lambda: self._send(request))
        else:
            result = await self._send(request)

        entry = self._prepare_entry(key, result)
        if entry is not None:
            value, ttl = entry
            await self._cache_call(self._cache.write, key, value, ttl)
        return result

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            transport = self._transport
            if transport is None and self._interface:
                transport = httpx.AsyncHTTPTransport(
                    local_address=self._interface, verify=self._verify_ssl,
                )
            self._client = httpx.AsyncClient(transport=transport, **self._client_kwargs())
        return self._client

    async def _send(self, request: ApiRequest) -> dict[str, Any]:
        get_output().debug(f"GET {request.url}")
        decoder = StreamDecoder()
        try:
            async with self._http().stream("GET", request.url) as response:
                self._check_status(response)
                async for chunk in response.aiter_bytes():
                    decoder.feed(chunk)
        except httpx.HTTPError as exc:
            raise self._wrap_transport_error(request, exc) from exc
        return decoder.close()

    async def _cache_call(self, func: Callable[..., T], *args: Any) -> T:
        if self._cache.blocking:
            return await asyncio.to_thread(func, *args)
        return func(*args)
