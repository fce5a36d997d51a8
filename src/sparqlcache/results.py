"""Parsing of SPARQL 1.1 Query Results JSON documents.

The repository never interprets response bodies itself; it hands the bytes of
a cache entry to a :class:`ResultParser`. :func:`parse_results` is the default
parser, validating the document against
:class:`~sparqlcache.models.SparqlResults`. Tests and callers with special
needs can inject any callable with the same signature.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import ValidationError

from sparqlcache.exceptions import ParseError
from sparqlcache.models import SparqlResults

SPARQL_RESULTS_JSON = "application/sparql-results+json"


class ResultParser(Protocol):
    """Callable that turns a stored response body into a result document.

    Implementations must raise :class:`~sparqlcache.exceptions.ParseError`
    for content that is not a valid result document.
    """

    def __call__(self, data: bytes) -> SparqlResults: ...


def parse_results(data: bytes) -> SparqlResults:
    """Parse *data* as a SPARQL JSON result document.

    Args:
        data: Raw response body, exactly as stored in a cache entry.

    Returns:
        The validated :class:`~sparqlcache.models.SparqlResults`.

    Raises:
        ParseError: If *data* is not JSON or does not have the shape of a
            SELECT or ASK result document.
    """
    try:
        return SparqlResults.model_validate_json(data)
    except ValidationError as exc:
        raise ParseError(f"Invalid SPARQL JSON results: {_first_error(exc)}") from exc


def _first_error(exc: ValidationError) -> str:
    """Condense a pydantic validation error to its first message."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    msg = first.get("msg", "")
    return f"{loc}: {msg}" if loc else msg
