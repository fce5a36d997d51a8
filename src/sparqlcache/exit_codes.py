"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~sparqlcache.exceptions.SparqlCacheError` subclass.
Build scripts wrapping ``sparqlcache`` can inspect the exit code to tell an
unreachable endpoint apart from a corrupted cache without parsing stderr.

Example::

    $ sparqlcache query 'SELECT * WHERE { ?s ?p ?o } LIMIT 1'
    $ echo $?
    6   # EXIT_CONNECTION_ERROR -- the endpoint could not be reached
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_NOT_FOUND = 4
"""A named query file does not exist or cannot be read."""

EXIT_SERVER_ERROR = 5
"""The SPARQL endpoint answered with a non-success HTTP status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_PARSE_ERROR = 7
"""A stored or fresh response is not a valid SPARQL JSON result document."""

EXIT_CACHE_ERROR = 8
"""The cache directory or a cache entry could not be listed, written or read."""
