"""Exception hierarchy for eveonline.

All exceptions inherit from :class:`EveOnlineError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`eveonline.exit_codes`.
The command line entry point in :func:`eveonline.app.main` catches
``EveOnlineError`` and exits with the appropriate code.

The three failure categories of a fetch stay distinguishable by type:
the network (:class:`TransportError`), the response document
(:class:`DecodeError`), and the API itself (:class:`ApiError`).  Cache
misses and expired entries are never errors.

Subclass hierarchy::

    EveOnlineError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ApiError            (exit 3)
    +-- TransportError      (exit 6)
    +-- DecodeError         (exit 7)
    |   +-- XMLParseError
    |   +-- StructureError
    +-- CacheError          (exit 8)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Optional

from eveonline.exit_codes import (
    EXIT_API_ERROR,
    EXIT_CACHE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class EveOnlineError(Exception):
    """Base exception for all eveonline errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`eveonline.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(EveOnlineError):
    """Raised for invalid CLI arguments (e.g. a ``-P`` value without ``=``)."""

    exit_code = EXIT_INVALID_USAGE


class ApiError(EveOnlineError):
    """The API answered with an ``<error code="...">`` envelope.

    Args:
        message: The error text from the envelope.
        code: Numeric error code from the ``code`` attribute, or ``None``
            when the attribute was missing.
        current_time: Server ``currentTime`` timestamp, if present.
        cached_until: Server ``cachedUntil`` timestamp, if present.
    """

    exit_code = EXIT_API_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        current_time: Optional[str] = None,
        cached_until: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.current_time = current_time
        self.cached_until = cached_until


class TransportError(EveOnlineError):
    """Raised on network failures and on HTTP statuses that carry no envelope.

    Attributes:
        status_code: The HTTP status, or ``None`` when no response arrived.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(EveOnlineError):
    """Base class for responses that could not be turned into a result."""

    exit_code = EXIT_DECODE_ERROR


class XMLParseError(DecodeError):
    """The response body is not well-formed XML."""


class StructureError(DecodeError):
    """Well-formed XML that does not match the ``eveapi`` envelope schema."""


class CacheError(EveOnlineError):
    """Raised for cache storage faults other than a missing entry."""

    exit_code = EXIT_CACHE_ERROR


class ConfigError(EveOnlineError):
    """Raised for configuration problems (invalid JSON, unknown cache backend)."""

    exit_code = EXIT_GENERIC_FAILURE
