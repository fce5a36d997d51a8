"""Content-addressed query cache in front of a SPARQL endpoint.

:class:`Repository` answers SPARQL queries from files on disk, going to the
network only for query texts it has not seen. Each response body is stored
verbatim as ``<cache_dir>/<sha256(query)>.json`` and every answer, fresh or
cached, is parsed back from that file, so a replay is indistinguishable from
the original call.

The cache key is the SHA-256 of the exact query text. There is no
normalisation: queries that differ only in whitespace or variable names are
separate entries. Entries are never rewritten or removed by this module.

Two modes are supported:

- **Persistent** (``cache_enabled=True``) -- the known-entry index is seeded
  from the cache directory at construction, so a query answered by any earlier
  run is never sent again.
- **Per-run** (``cache_enabled=False``) -- the index starts empty. Responses
  are still written and the index still suppresses a second identical query
  within the same :class:`Repository`, but earlier runs are ignored.

The index is a snapshot: entries created by other processes after
construction are not seen until the next run.

See Also:
    :class:`~sparqlcache.client.SparqlTransport` -- the network layer.
    :mod:`sparqlcache.templates` -- named query files.
"""

from __future__ import annotations

import hashlib
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Protocol

from sparqlcache.config import atomic_write_bytes
from sparqlcache.exceptions import (
    CacheDirectoryError,
    CacheReadError,
    CacheWriteError,
    ParseError,
)
from sparqlcache.models import Row, SparqlResults
from sparqlcache.output import get_output
from sparqlcache.results import ResultParser, parse_results
from sparqlcache.templates import load_template, render_template

if TYPE_CHECKING:
    import httpx

DEFAULT_CACHE_DIR = Path(".sparqlcache") / "cache"
DEFAULT_QUERIES_DIR = Path("queries")
CACHE_EXTENSION = ".json"


class Transport(Protocol):
    """Anything that can send one query and return the raw response body."""

    def execute(self, query: str) -> bytes: ...


def cache_key(query: str) -> str:
    """Return the cache entry identifier for *query*: its SHA-256 hex digest."""
    return hashlib.sha256(query.encode("utf-8")).hexdigest()


class Repository:
    """SPARQL endpoint handle with a write-once response cache.

    Args:
        transport: Sends queries that are not cached. Usually a
            :class:`~sparqlcache.client.SparqlTransport`.
        cache_enabled: Seed the index from *cache_dir* so answers from
            earlier runs are replayed.
        cache_dir: Directory holding cache entries. Created on first write.
        queries_dir: Directory holding named ``.rq`` query files.
        parser: Turns stored bodies into result documents.

    Raises:
        CacheDirectoryError: If *cache_enabled* is set and *cache_dir* cannot
            be listed.

    Example::

        transport = SparqlTransport("https://dbpedia.org/sparql")
        repo = Repository(transport, cache_dir=Path(".sparqlcache/cache"))
        rows = repo.query("SELECT ?x WHERE { ?x a <http://dbpedia.org/ontology/City> } LIMIT 5")
        for row in rows:
            print(row["x"].value)
    """

    def __init__(
        self,
        transport: Transport,
        cache_enabled: bool = True,
        cache_dir: Path = DEFAULT_CACHE_DIR,
        queries_dir: Path = DEFAULT_QUERIES_DIR,
        parser: ResultParser = parse_results,
    ) -> None:
        self.transport = transport
        self.cache_enabled = cache_enabled
        self.cache_dir = Path(cache_dir)
        self.queries_dir = Path(queries_dir)
        self._parser = parser

        # Used even with caching off, to avoid issuing duplicate queries in one run.
        self.cache_hashes: set[str] = set()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

        if cache_enabled:
            self.cache_hashes.update(self._scan_cache_dir())

    @classmethod
    def connect(
        cls,
        endpoint: str,
        client: Optional[httpx.Client] = None,
        cache_enabled: bool = True,
        cache_dir: Path = DEFAULT_CACHE_DIR,
        queries_dir: Path = DEFAULT_QUERIES_DIR,
    ) -> Repository:
        """Build a repository talking HTTP to *endpoint*.

        Args:
            endpoint: SPARQL endpoint URL.
            client: Optional shared :class:`httpx.Client`.
            cache_enabled: See :class:`Repository`.
            cache_dir: See :class:`Repository`.
            queries_dir: See :class:`Repository`.
        """
        from sparqlcache.client import SparqlTransport

        return cls(
            SparqlTransport(endpoint, client=client),
            cache_enabled=cache_enabled,
            cache_dir=cache_dir,
            queries_dir=queries_dir,
        )

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the transport's resources, if it has any."""
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def query(self, query: str) -> list[Row]:
        """Answer *query*, from the cache when possible.

        Args:
            query: SPARQL SELECT query text. Used byte-for-byte as cache key.

        Returns:
            Solution rows in the order the endpoint returned them.

        Raises:
            TransportError: The query was not cached and the endpoint call
                failed. Nothing is written to the cache.
            CacheDirectoryError: The cache directory could not be created.
            CacheWriteError: The response could not be stored.
            CacheReadError: The cache entry could not be read back.
            ParseError: The stored body is not a valid result document.
        """
        return self.query_results(query).solutions()

    def query_results(self, query: str) -> SparqlResults:
        """Like :meth:`query`, but return the whole result document (head and all)."""
        data = self.query_raw(query)
        return self._parser(data)

    def query_raw(self, query: str) -> bytes:
        """Like :meth:`query`, but return the stored response body unparsed."""
        return self._read_entry(self._ensure_entry(query))

    def ask(self, query: str) -> bool:
        """Answer an ASK *query*, from the cache when possible.

        Raises:
            ParseError: The stored body is not an ASK result document.
        """
        results = self.query_results(query)
        if results.boolean is None:
            raise ParseError("Result document has no 'boolean' member; not an ASK query result")
        return results.boolean

    def dynamic_query(self, name: str, argument: str) -> list[Row]:
        """Run the named query file with *argument* substituted for ``{{.}}``.

        Only the first placeholder is replaced, verbatim and without escaping.

        Args:
            name: Query name, resolved to ``<queries_dir>/<name>.rq``.
            argument: Text substituted into the template.

        Raises:
            QueryNotFoundError: The query file does not exist.
            QueryReadError: The query file could not be read.

        Any error from :meth:`query` propagates unchanged.
        """
        return self.dynamic_query_results(name, argument).solutions()

    def dynamic_query_results(self, name: str, argument: str) -> SparqlResults:
        """Like :meth:`dynamic_query`, but return the whole result document."""
        get_output().info(f"Issuing dynamic query {name} with argument {argument}")
        template = load_template(self.queries_dir, name)
        return self.query_results(render_template(template, argument))

    # ------------------------------------------------------------------ #
    # Cache inspection
    # ------------------------------------------------------------------ #

    def cache_path(self, query: str) -> Path:
        """Return where the entry for *query* is (or would be) stored."""
        return self._entry_path(cache_key(query))

    def is_cached(self, query: str) -> bool:
        """Whether *query* would be answered without a network call."""
        return cache_key(query) in self.cache_hashes

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``enabled`` (bool), ``directory`` (str path), and
            ``known_entries`` (size of the in-memory index).
        """
        return {
            "enabled": self.cache_enabled,
            "directory": str(self.cache_dir),
            "known_entries": len(self.cache_hashes),
        }

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _scan_cache_dir(self) -> set[str]:
        """Collect the identifiers of the entries already in the cache directory."""
        try:
            paths = list(self.cache_dir.iterdir())
        except OSError as exc:
            raise CacheDirectoryError(
                f"Cannot read cache directory {self.cache_dir}: {exc}",
                path=str(self.cache_dir),
            ) from exc
        return {p.stem for p in paths if p.suffix == CACHE_EXTENSION}

    def _entry_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}{CACHE_EXTENSION}"

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _ensure_entry(self, query: str) -> Path:
        """Make sure an entry for *query* exists, fetching it if unknown."""
        key = cache_key(query)
        path = self._entry_path(key)
        output = get_output()

        # Check, fetch and write under one lock so concurrent identical
        # queries produce a single network call.
        with self._lock_for(key):
            if key in self.cache_hashes:
                output.debug(f"Cache hit: {key}")
                return path

            output.debug(f"Cache miss: {key}")
            body = self.transport.execute(query)
            self._write_entry(path, body)
            self.cache_hashes.add(key)

        return path

    def _write_entry(self, path: Path, body: bytes) -> None:
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheDirectoryError(
                f"Cannot create cache directory {self.cache_dir}: {exc}",
                path=str(self.cache_dir),
            ) from exc
        try:
            atomic_write_bytes(path, body)
        except OSError as exc:
            raise CacheWriteError(
                f"Cannot write cache entry {path}: {exc}", path=str(path)
            ) from exc

    def _read_entry(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise CacheReadError(
                f"Cannot read cache entry {path}: {exc}", path=str(path)
            ) from exc
