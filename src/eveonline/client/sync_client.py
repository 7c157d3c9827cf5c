"""Blocking EVE API client.

:class:`Client` wraps :class:`httpx.Client` and runs the cache-aside
pipeline described in :mod:`eveonline.client.base`.  Response bodies are
streamed straight into the XML decoder, so large documents are never
buffered as a whole.

See Also:
    :class:`~eveonline.client.async_client.AsyncClient` for the
    equivalent non-blocking implementation.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from eveonline.client.base import BaseClient
from eveonline.models import ApiRequest
from eveonline.output import get_output
from eveonline.parser import decode


class Client(BaseClient):
    """Synchronous EVE API client.

    Can be used as a context manager to close the connection pool on exit;
    otherwise call :meth:`close` when done.  The underlying
    :class:`httpx.Client` is created on first use.

    Args:
        transport: Custom :class:`httpx.BaseTransport` (tests pass an
            :class:`httpx.MockTransport`).  Takes precedence over
            ``interface``.
        **kwargs: See :class:`~eveonline.client.base.BaseClient`.

    Example::

        with Client(params={"keyID": "123", "vCode": "abc"}) as client:
            status = client.fetch("server:ServerStatus")
            status["onlinePlayers"]
    """

    def __init__(self, *, transport: Optional[httpx.BaseTransport] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> Client:
        self._http()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP connection pool and the cache backend."""
        if self._client:
            self._client.close()
            self._client = None
        self._cache.close()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def fetch(self, path: str, params: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        """Fetch an API resource, serving it from the cache while it is fresh.

        Args:
            path: Short-hand ``namespace:Resource`` (``"eve:CharacterName"``)
                or an absolute path (``"/eve/CharacterName.xml.aspx"``).
            params: Query parameters; override the client's defaults.

        Returns:
            The decoded ``result`` mapping, including ``currentTime`` and
            ``cachedUntil``.

        Raises:
            InvalidUsageError: *path* is empty or the server URL is invalid.
            TransportError: Connection failure or unsupported HTTP status.
            DecodeError: The response is not a valid API document.
            ApiError: The API returned an error envelope.
            CacheError: The cache backend failed.
        """
        self._require_path(path)
        request = self.get_request(path, params)
        key = request.cache_key
        output = get_output()

        cached = self._cache.read(key)
        if cached is not None:
            output.debug(f"Cache hit: {key}")
            return self._load_cached(cached)
        output.debug(f"Cache miss: {key}")

        result = self._send(request)

        entry = self._prepare_entry(key, result)
        if entry is not None:
            value, ttl = entry
            self._cache.write(key, value, ttl)
        return result

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _http(self) -> httpx.Client:
        if self._client is None:
            transport = self._transport
            if transport is None and self._interface:
                transport = httpx.HTTPTransport(
                    local_address=self._interface, verify=self._verify_ssl,
                )
            self._client = httpx.Client(transport=transport, **self._client_kwargs())
        return self._client

    def _send(self, request: ApiRequest) -> dict[str, Any]:
        get_output().debug(f"GET {request.url}")
        try:
            with self._http().stream("GET", request.url) as response:
                self._check_status(response)
                return decode(response.iter_bytes())
        except httpx.HTTPError as exc:
            raise self._wrap_transport_error(request, exc) from exc
