"""Fetch and parse commands.

``eveonline fetch`` calls the API through :class:`~eveonline.client.Client`
with the resolved configuration (so repeated calls are served from the
configured cache), and ``eveonline parse`` decodes a saved response
document without touching the network.  Both render the decoded result
through the global output manager.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from eveonline.exceptions import ApiError, EveOnlineError, InvalidUsageError
from eveonline.output import error, format_response


def parse_params(values: Optional[list[str]]) -> dict[str, str]:
    """Turn ``name=value`` strings into a parameter mapping.

    Raises:
        InvalidUsageError: A value has no ``=`` or an empty name.
    """
    params: dict[str, str] = {}
    for item in values or []:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise InvalidUsageError(f"Invalid parameter {item!r}, expected name=value")
        params[name] = value
    return params


def _report(exc: EveOnlineError) -> typer.Exit:
    if isinstance(exc, ApiError) and exc.code is not None:
        error(f"API error {exc.code}: {exc.message}")
    else:
        error(str(exc))
    return typer.Exit(code=exc.exit_code)


def fetch_command(
    path: str = typer.Argument(
        help="API path, e.g. 'server:ServerStatus' or '/eve/CharacterName.xml.aspx'."
    ),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-P", help="Query parameter as name=value (repeatable)."
    ),
    url: Optional[str] = typer.Option(None, "--url", help="API server URL."),
    cache: Optional[str] = typer.Option(
        None, "--cache", help="Cache backend: memory, file or disk."
    ),
) -> None:
    """Fetch an API resource and print the decoded result.

    Default parameters (``keyID``, ``vCode``) come from the config file or
    the ``EVEONLINE_KEY_ID`` / ``EVEONLINE_VCODE`` environment variables;
    ``-P`` values take precedence.

    Example::

        eveonline fetch server:ServerStatus
        eveonline fetch eve:CharacterName -P ids=797400947 --json
    """
    from eveonline.client import Client
    from eveonline.config import resolve_config

    try:
        params = parse_params(param)
        config = resolve_config(cli_url=url, cli_cache=cache)
        with Client.from_config(config) as client:
            result = client.fetch(path, params)
    except EveOnlineError as exc:
        raise _report(exc) from None

    format_response(result)


def parse_command(
    file: Path = typer.Argument(
        help="Saved API response (XML).", exists=True, dir_okay=False, readable=True
    ),
) -> None:
    """Decode a saved API response and print the result.

    Example::

        eveonline parse CharacterSheet.xml --json
    """
    from eveonline.parser import decode

    try:
        with open(file, "rb") as f:
            result = decode(f)
    except EveOnlineError as exc:
        raise _report(exc) from None

    format_response(result)
