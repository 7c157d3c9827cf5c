"""Request URL construction for the EVE XML API.

API resources live under ``/<namespace>/<Resource>.xml.aspx``.  Callers may
use the short-hand ``namespace:Resource`` form, which this module expands,
or pass an absolute path starting with ``/``.  Either form is resolved
relative to the path component of the configured server URL, so a client
pointed at ``https://api.eveonline.com/char`` can fetch ``AccountBalance``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

from eveonline.exceptions import InvalidUsageError
from eveonline.models import ApiRequest

_RESOURCE_SUFFIX = ".xml.aspx"


def get_path_name(base_path: str, path: str) -> str:
    """Resolve *path* against the server's *base_path*.

    Examples::

        get_path_name("", "eve:SkillTree")          # '/eve/SkillTree.xml.aspx'
        get_path_name("/char/", "AccountBalance")   # '/char/AccountBalance.xml.aspx'
        get_path_name("/", "/char/AccountBalance.xml.aspx")
    """
    if not path:
        raise InvalidUsageError("API path must not be empty")

    base = base_path.strip("/")
    if not path.startswith("/"):
        path = path.replace(":", "/", 1) + _RESOURCE_SUFFIX
    if base:
        base = f"/{base}"
    return f"{base}/{path.strip('/')}"


def build_request(
    url: str,
    path: str,
    params: Optional[Mapping[str, Any]] = None,
    default_params: Optional[Mapping[str, Any]] = None,
) -> ApiRequest:
    """Build an :class:`~eveonline.models.ApiRequest` for *path*.

    Args:
        url: Server URL, optionally with a base path.
        path: Short-hand (``server:ServerStatus``) or absolute path.
        params: Caller-supplied query parameters.
        default_params: Parameters merged in when the caller did not
            supply a value of the same name.

    Returns:
        The resolved request.
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise InvalidUsageError(f"Invalid API server URL: {url!r}")

    merged: dict[str, Any] = dict(params or {})
    for name, value in (default_params or {}).items():
        merged.setdefault(name, value)

    return ApiRequest(
        base_url=f"{parts.scheme}://{parts.netloc}",
        path=get_path_name(parts.path, path),
        params=merged,
    )
