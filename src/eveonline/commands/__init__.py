"""Built-in CLI sub-commands for eveonline.

* :mod:`~eveonline.commands.fetch` -- ``fetch`` and ``parse``.
* :mod:`~eveonline.commands.cache` -- clear the cache, locate cache files.
* :mod:`~eveonline.commands.config` -- view and modify settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``cache`` and ``config``) or plain callback
functions registered directly on the root app.
"""
