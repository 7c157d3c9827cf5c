"""State and helpers shared by :class:`~eveonline.client.Client` and
:class:`~eveonline.client.AsyncClient`.

Both clients run the same cache-aside pipeline and differ only in how they
perform I/O:

1. resolve the request (server URL, short-hand path, default parameters);
2. read the cache under the request's canonical URL (parameters sorted);
3. on a miss, GET the URL; status 200 and 403 carry an ``eveapi``
   envelope and are decoded, anything else is a
   :class:`~eveonline.exceptions.TransportError`;
4. store the JSON-serialised result for ``cachedUntil - currentTime``
   seconds and return it.

Errors of every kind propagate to the caller and nothing is cached for
them.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Mapping, Optional

import httpx

from eveonline import __version__
from eveonline.cache import Cache, MemoryCache
from eveonline.exceptions import InvalidUsageError, TransportError
from eveonline.models import DEFAULT_URL, ApiRequest, ClientConfig
from eveonline.output import get_output
from eveonline.parser import decode
from eveonline.request import build_request

USER_AGENT = f"eveonline/{__version__}"

#: 403 is used by the API for error envelopes (bad key, access denied).
DECODABLE_STATUSES = frozenset({200, 403})

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_timestamp(value: str) -> datetime:
    """Parse an API timestamp such as ``2011-11-10 20:08:53`` (UTC)."""
    return datetime.strptime(value, TIMESTAMP_FORMAT)


def cache_ttl(result: Mapping[str, Any]) -> Optional[float]:
    """Seconds the server allows *result* to be cached, or ``None`` if unknown."""
    try:
        current = parse_timestamp(result["currentTime"])
        until = parse_timestamp(result["cachedUntil"])
    except (KeyError, TypeError, ValueError):
        return None
    return (until - current).total_seconds()


class BaseClient:
    """Configuration surface common to both clients.

    Args:
        url: API server URL; may include a base path.
        params: Default query parameters (e.g. ``keyID``, ``vCode``).
        cache: Cache backend.  Defaults to a new
            :class:`~eveonline.cache.MemoryCache`.
        interface: Local IP address to bind outgoing connections to.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        params: Optional[Mapping[str, Any]] = None,
        cache: Optional[Cache] = None,
        interface: Optional[str] = None,
        timeout: float = 30,
        verify_ssl: bool = True,
    ) -> None:
        self._url = url
        self._params: dict[str, Any] = dict(params or {})
        self._cache: Cache = cache if cache is not None else MemoryCache()
        self._interface = interface
        self._timeout = timeout
        self._verify_ssl = verify_ssl

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any):
        """Create a client from a resolved :class:`~eveonline.models.ClientConfig`.

        The cache backend is built with
        :func:`~eveonline.config.create_cache` unless ``cache`` is passed
        explicitly; other keyword arguments are forwarded to the constructor.
        """
        from eveonline.config import create_cache

        if "cache" not in kwargs:
            kwargs["cache"] = create_cache(config)
        return cls(
            url=config.url,
            params=config.params,
            interface=config.request.interface,
            timeout=config.request.timeout,
            verify_ssl=config.request.verify_ssl,
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    @property
    def url(self) -> str:
        return self._url

    @url.setter
    def url(self, value: str) -> None:
        self._url = value

    @property
    def interface(self) -> Optional[str]:
        return self._interface

    @property
    def cache(self) -> Cache:
        return self._cache

    @cache.setter
    def cache(self, value: Cache) -> None:
        self._cache = value

    @property
    def params(self) -> dict[str, Any]:
        """Default query parameters (a copy)."""
        return dict(self._params)

    def set_param(self, name: str, value: Any) -> None:
        self._params[name] = value

    def set_params(self, params: Mapping[str, Any]) -> None:
        self._params.update(params)

    def get_param(self, name: str) -> Optional[Any]:
        return self._params.get(name)

    def clear_params(self) -> None:
        self._params.clear()

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def get_request(self, path: str, params: Optional[Mapping[str, Any]] = None) -> ApiRequest:
        """Resolve *path* and *params* against the server URL and defaults."""
        return build_request(self._url, path, params, self._params)

    def get_cache_key(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Return the cache key used for *path* with *params*."""
        return self.get_request(path, params).cache_key

    @staticmethod
    def parse(xml: Any) -> dict[str, Any]:
        """Decode an API response without fetching it.

        See :func:`eveonline.parser.decode` for accepted inputs and errors.
        """
        return decode(xml)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _client_kwargs(self) -> dict[str, Any]:
        return {
            "timeout": self._timeout,
            "verify": self._verify_ssl,
            "follow_redirects": True,
            "headers": {"User-Agent": USER_AGENT},
        }

    @staticmethod
    def _check_status(response: httpx.Response) -> None:
        status = response.status_code
        get_output().debug(f"HTTP {status} {response.request.url}")
        if status not in DECODABLE_STATUSES:
            raise TransportError(f"Unsupported HTTP response: {status}", status_code=status)

    @staticmethod
    def _load_cached(value: str) -> dict[str, Any]:
        return json.loads(value)

    @staticmethod
    def _prepare_entry(key: str, result: Mapping[str, Any]) -> Optional[tuple[str, float]]:
        """Return ``(serialised result, ttl)``, or ``None`` if it must not be cached."""
        ttl = cache_ttl(result)
        if ttl is None or ttl <= 0:
            get_output().debug(f"Not caching {key}: no usable cachedUntil/currentTime")
            return None
        get_output().debug(f"Caching {key} for {ttl:.0f}s")
        return json.dumps(result), ttl

    @staticmethod
    def _wrap_transport_error(request: ApiRequest, exc: httpx.HTTPError) -> TransportError:
        return TransportError(f"Request to {request.url} failed: {exc}")

    @staticmethod
    def _require_path(path: str) -> None:
        if not path:
            raise InvalidUsageError("API path must not be empty")
