"""Numeric process exit codes used by the ``eveonline`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~eveonline.exceptions.EveOnlineError` subclass.
Shell scripts wrapping ``eveonline fetch`` can inspect the exit code to
tell an API-level refusal apart from a network failure without parsing
stderr.

Example::

    $ eveonline fetch account:Characters
    $ echo $?
    3   # EXIT_API_ERROR -- the API answered with an <error> envelope
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_API_ERROR = 3
"""The API returned an ``<error>`` envelope (bad key, missing parameter, ...)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error or an unsupported HTTP status occurred."""

EXIT_DECODE_ERROR = 7
"""The response body was malformed XML or did not match the envelope schema."""

EXIT_CACHE_ERROR = 8
"""Reading from or writing to the response cache failed."""
