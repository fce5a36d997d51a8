"""Exception hierarchy for sparqlcache.

All exceptions inherit from :class:`SparqlCacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`sparqlcache.exit_codes`.
The top-level error handler in :func:`sparqlcache.app.main` catches
``SparqlCacheError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SparqlCacheError (exit 1)
    +-- ConfigError                  (exit 1)
    +-- TransportError               (exit 6)
    |   +-- EndpointResponseError    (exit 5)
    |   +-- EndpointUnreachableError (exit 6)
    +-- CacheError                   (exit 8)
    |   +-- CacheDirectoryError
    |   +-- CacheWriteError
    |   +-- CacheReadError
    +-- ParseError                   (exit 7)
    +-- QueryNotFoundError           (exit 4)
    +-- QueryReadError               (exit 4)
"""

from __future__ import annotations

from typing import Optional

from sparqlcache.exit_codes import (
    EXIT_CACHE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_FOUND,
    EXIT_PARSE_ERROR,
    EXIT_SERVER_ERROR,
)


class SparqlCacheError(Exception):
    """Base exception for all sparqlcache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`sparqlcache.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(SparqlCacheError):
    """Raised for configuration problems (invalid project file, no endpoint configured)."""

    exit_code = EXIT_GENERIC_FAILURE


class TransportError(SparqlCacheError):
    """Raised when a query could not be answered by the endpoint.

    Catch this to handle both rejected and unreachable cases alike; catch
    the subclasses to tell them apart.
    """

    exit_code = EXIT_CONNECTION_ERROR


class EndpointResponseError(TransportError):
    """Raised when the endpoint is reachable but answers with a non-2xx status.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status returned by the endpoint.
        body: A short excerpt of the response body, for diagnostics.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EndpointUnreachableError(TransportError):
    """Raised when no usable response was received (network failure, timeout, redirect loop)."""

    exit_code = EXIT_CONNECTION_ERROR


class CacheError(SparqlCacheError):
    """Base class for cache directory and cache entry failures.

    Args:
        message: Human-readable error description.
        path: The file or directory the failure refers to.
    """

    exit_code = EXIT_CACHE_ERROR

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class CacheDirectoryError(CacheError):
    """Raised when the cache directory cannot be listed at startup or created at write time."""


class CacheWriteError(CacheError):
    """Raised when a fresh response cannot be written and flushed to its cache entry."""


class CacheReadError(CacheError):
    """Raised when a cache entry is missing or unreadable after it was expected to exist."""


class ParseError(SparqlCacheError):
    """Raised when a response body is not a valid SPARQL JSON result document."""

    exit_code = EXIT_PARSE_ERROR


class QueryNotFoundError(SparqlCacheError):
    """Raised when a named query has no ``.rq`` file under the queries directory."""

    exit_code = EXIT_NOT_FOUND


class QueryReadError(SparqlCacheError):
    """Raised when a named query file exists but cannot be read."""

    exit_code = EXIT_NOT_FOUND
