"""Cache commands -- inspect and empty the response cache."""

from __future__ import annotations

from typing import Optional

import typer

from eveonline.exceptions import EveOnlineError
from eveonline.output import error, print_data, success, warning


cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("clear")
def cache_clear(
    cache: Optional[str] = typer.Option(
        None, "--cache", help="Cache backend to clear: file or disk."
    ),
) -> None:
    """Remove every cached response of the configured backend.

    Example::

        eveonline cache clear
        eveonline cache clear --cache disk
    """
    from eveonline.config import create_cache, resolve_config
    from eveonline.models import CacheBackend

    try:
        config = resolve_config(cli_cache=cache)
        if config.cache.backend == CacheBackend.MEMORY:
            warning("The memory cache only lives inside a running client; nothing to clear.")
            return
        store = create_cache(config)
        try:
            store.clear()
        finally:
            store.close()
    except EveOnlineError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Cleared {config.cache.backend.value} cache.")


@cache_app.command("path")
def cache_path(
    key: str = typer.Argument(help="Cache key (the request URL with sorted parameters)."),
) -> None:
    """Print the file the ``file`` backend uses for KEY.

    Example::

        eveonline cache path 'https://api.eveonline.com/server/ServerStatus.xml.aspx'
    """
    from eveonline.config import create_cache, resolve_config

    try:
        store = create_cache(resolve_config(cli_cache="file"))
    except EveOnlineError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_data(str(store.get_file_path(key)))
