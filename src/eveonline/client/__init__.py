"""EVE XML API clients.

Provides synchronous and asynchronous clients that wrap :mod:`httpx` with
request building, streamed XML decoding and response caching.

Classes:
    :class:`Client` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.

Both accept the same core parameters (``url``, ``params``, ``cache``,
``interface``) and expose the same ``fetch(path, params)`` operation.

Example::

    from eveonline.client import Client

    with Client() as client:
        client.fetch("server:ServerStatus")
"""

from eveonline.client.async_client import AsyncClient
from eveonline.client.base import BaseClient, cache_ttl, parse_timestamp
from eveonline.client.sync_client import Client

__all__ = ["AsyncClient", "BaseClient", "Client", "cache_ttl", "parse_timestamp"]
