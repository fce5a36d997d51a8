"""Shared test fixtures for sparqlcache.

Provides a mock SPARQL endpoint built on :class:`httpx.MockTransport` that
records every request it receives, canned result documents, and isolation
of the working directory and global output state.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from sparqlcache.client import SparqlTransport
from sparqlcache.output import OutputManager, reset_output, set_output
from sparqlcache.repository import Repository


ENDPOINT = "https://sparql.example.org/query"

SELECT_RESULTS: dict[str, Any] = {
    "head": {"vars": ["x", "label"]},
    "results": {
        "bindings": [
            {
                "x": {"type": "uri", "value": "http://example.org/a"},
                "label": {"type": "literal", "value": "Alpha", "xml:lang": "en"},
            },
            {
                "x": {"type": "uri", "value": "http://example.org/b"},
                "label": {
                    "type": "literal",
                    "value": "2",
                    "datatype": "http://www.w3.org/2001/XMLSchema#integer",
                },
            },
            {
                "x": {"type": "bnode", "value": "b0"},
            },
        ]
    },
}

ASK_RESULTS: dict[str, Any] = {"head": {}, "boolean": True}


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a quiet, colourless OutputManager and reset it afterwards.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams the
    cached references go stale, so each test starts from a fresh one.
    """
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Mock endpoint
# ---------------------------------------------------------------------------


class RecordingEndpoint:
    """A fake SPARQL endpoint that answers every POST with a fixed response.

    ``requests`` holds every :class:`httpx.Request` received, so tests can
    count network calls and inspect what was sent.
    """

    def __init__(
        self,
        body: bytes = json.dumps(SELECT_RESULTS).encode("utf-8"),
        status_code: int = 200,
        error: Optional[Exception] = None,
    ) -> None:
        self.body = body
        self.status_code = status_code
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            content=self.body,
            headers={"content-type": "application/sparql-results+json"},
        )

    @property
    def calls(self) -> int:
        return len(self.requests)

    def sent_queries(self) -> list[str]:
        """Decode the ``query`` form field of every recorded request."""
        from urllib.parse import parse_qs

        return [parse_qs(r.content.decode("utf-8"))["query"][0] for r in self.requests]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def endpoint() -> RecordingEndpoint:
    """A recording endpoint answering with :data:`SELECT_RESULTS`."""
    return RecordingEndpoint()


@pytest.fixture
def transport(endpoint: RecordingEndpoint) -> SparqlTransport:
    """A SparqlTransport wired to the recording endpoint."""
    return SparqlTransport(ENDPOINT, client=endpoint.client())


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """An existing, empty cache directory."""
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def queries_dir(tmp_path: Path) -> Path:
    """An existing, empty queries directory."""
    path = tmp_path / "queries"
    path.mkdir()
    return path


@pytest.fixture
def make_repository(
    transport: SparqlTransport, cache_dir: Path, queries_dir: Path
) -> Callable[..., Repository]:
    """Factory for repositories sharing the recording transport and directories."""

    def _make(**kwargs: Any) -> Repository:
        kwargs.setdefault("cache_enabled", True)
        kwargs.setdefault("cache_dir", cache_dir)
        kwargs.setdefault("queries_dir", queries_dir)
        return Repository(transport, **kwargs)

    return _make


@pytest.fixture
def isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty project directory with no SPARQLCACHE_* env vars."""
    for var in ["SPARQLCACHE_ENDPOINT", "SPARQLCACHE_CACHE_DIR", "SPARQLCACHE_NO_CACHE"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
