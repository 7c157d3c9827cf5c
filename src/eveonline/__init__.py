"""eveonline -- client for the EVE Online XML API.

Fetches API resources over HTTP, decodes the XML responses into plain
``dict`` trees and caches them for as long as the server allows.

Typical usage::

    from eveonline.client import Client

    with Client(params={"keyID": "123", "vCode": "abc"}) as client:
        sheet = client.fetch("char:CharacterSheet", {"characterID": "95465499"})

or from the shell::

    eveonline fetch server:ServerStatus

Modules:
    app: Typer CLI entry point.
    client: Synchronous and asynchronous API clients.
    cache: Memory, file and diskcache-backed response caches.
    parser: Streaming XML decoder for API responses.
    request: Path short-hands and URL/cache-key construction.
    ratelimiter: asyncio FIFO rate limiter.
    models: Pydantic configuration models.
    config: XDG-aware configuration loading.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
