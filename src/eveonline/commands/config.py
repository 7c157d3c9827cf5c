"""Config commands -- view and modify the client configuration.

Provides the ``eveonline config`` sub-command group for reading and
updating the user's configuration file
(:class:`~eveonline.models.ClientConfig`). Settings are persisted in the
eveonline config directory and control the server URL, default query
parameters, the cache backend and HTTP options.
"""

from __future__ import annotations

import typer

from eveonline.exceptions import ConfigError
from eveonline.exit_codes import EXIT_INVALID_USAGE
from eveonline.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)

# Mappings whose keys are free-form; ``config set`` may add new entries.
_OPEN_SECTIONS = {"params"}


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Example::

        eveonline config show
        eveonline config show --json
    """
    from eveonline.config import get_config_dir, load_config

    try:
        config = load_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'cache.backend' or 'params.keyID')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to match the
    existing field's type (bool, int, or str) and the result is validated
    against :class:`~eveonline.models.ClientConfig` before saving.

    Example::

        eveonline config set cache.backend file
        eveonline config set params.keyID 123456
        eveonline config set request.timeout 10
    """
    from eveonline.config import load_config, save_config
    from eveonline.models import ClientConfig

    try:
        config = load_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target and not (len(keys) == 2 and keys[0] in _OPEN_SECTIONS):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target.get(final_key)
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    else:
        coerced = value  # type: ignore[assignment]

    target[final_key] = coerced

    try:
        new_config = ClientConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_config(new_config)
    success(f"Set {key} = {coerced}")
