"""Canonical Pydantic models shared across eveonline modules.

**Configuration models** -- serialised as JSON in the user's config
directory and consumed by :func:`eveonline.config.resolve_config`:
    :class:`CacheBackend`, :class:`CacheConfig`, :class:`RequestConfig`,
    and :class:`ClientConfig`.

**Request model** -- produced by :func:`eveonline.request.build_request`
and consumed by the fetch pipeline:
    :class:`ApiRequest`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, Field

DEFAULT_URL = "https://api.eveonline.com"


# --- Configuration ---


class CacheBackend(str, enum.Enum):
    """Storage backends selectable with :attr:`CacheConfig.backend`."""

    MEMORY = "memory"
    FILE = "file"
    DISK = "disk"


class CacheConfig(BaseModel):
    """Response cache settings.

    ``path`` is only used by the ``file`` and ``disk`` backends; when it is
    left unset the XDG cache directory is used (see
    :func:`~eveonline.config.get_cache_dir`).
    """

    backend: CacheBackend = Field(
        default=CacheBackend.MEMORY, description="Cache backend: memory, file, disk"
    )
    path: Optional[str] = Field(
        default=None, description="Cache root directory for file/disk backends"
    )
    prefix: str = Field(default="", description="File name prefix for the file backend")


class RequestConfig(BaseModel):
    """HTTP settings applied to every API call."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    interface: Optional[str] = Field(
        default=None, description="Local IP address to bind outgoing connections to"
    )


class ClientConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/eveonline/config.json``.

    Loaded and saved by :func:`~eveonline.config.load_config` and
    :func:`~eveonline.config.save_config`.  ``params`` are default query
    parameters (typically ``keyID`` and ``vCode``) merged into every
    request; parameters passed to a fetch take precedence.
    """

    url: str = Field(default=DEFAULT_URL, description="API server base URL")
    params: dict[str, str] = Field(default_factory=dict)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Requests ---


class ApiRequest(BaseModel):
    """A fully resolved API call: base URL, absolute path, merged parameters.

    ``params`` preserves insertion order (caller parameters first, then any
    defaults that were not overridden).  That order is used on the wire;
    :attr:`cache_key` sorts by parameter name so that two requests that
    differ only in parameter order share a cache entry.
    """

    base_url: str
    path: str
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def url(self) -> str:
        """The request URL with the query string in parameter order."""
        return self._format(self.params)

    @property
    def cache_key(self) -> str:
        """The request URL with the query string sorted alphabetically."""
        return self._format(dict(sorted(self.params.items())))

    def _format(self, params: dict[str, Any]) -> str:
        url = f"{self.base_url}{self.path}"
        if params:
            url = f"{url}?{urlencode({k: str(v) for k, v in params.items()})}"
        return url
