"""Canonical Pydantic models shared across all sparqlcache modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- read from ``sparqlcache.json`` in the project root:
    :class:`RequestConfig`, :class:`CacheConfig`, :class:`OutputConfig`, and
    :class:`ProjectConfig`.

**Result models** -- the SPARQL 1.1 Query Results JSON Format, produced by
:func:`sparqlcache.results.parse_results` from a cache entry:
    :class:`IRITerm`, :class:`LiteralTerm`, :class:`BlankNodeTerm`,
    :class:`ResultHead`, :class:`ResultBindings`, and :class:`SparqlResults`.

All models use Pydantic v2. Result models accept unknown keys so that
endpoint-specific extensions (e.g. Virtuoso's ``distinct`` and ``ordered``
flags) do not fail validation.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings used when sparqlcache builds its own :class:`httpx.Client`.

    Ignored when the caller injects a pre-configured client.
    """

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class CacheConfig(BaseModel):
    """Persistent query cache settings."""

    enabled: bool = Field(
        default=True, description="Replay responses stored by earlier runs"
    )
    directory: str = Field(
        default=".sparqlcache/cache",
        description="Cache root, relative to the project root unless absolute",
    )


class OutputConfig(BaseModel):
    """Default output format preferences."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class ProjectConfig(BaseModel):
    """Project-local configuration persisted at ``./sparqlcache.json``.

    Loaded by :func:`~sparqlcache.config.load_project_config`. Fields here
    can be overridden by environment variables or CLI flags; see
    :func:`~sparqlcache.config.resolve_config` for the full precedence chain.

    Example::

        {
            "endpoint": "https://query.wikidata.org/sparql",
            "queries_dir": "queries",
            "cache": {"enabled": true, "directory": ".sparqlcache/cache"}
        }
    """

    endpoint: Optional[str] = Field(
        default=None, description="SPARQL endpoint URL"
    )
    queries_dir: str = Field(
        default="queries", description="Directory holding named <name>.rq files"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- SPARQL JSON results ---


class IRITerm(BaseModel):
    """An IRI bound to a query variable."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: Literal["uri"] = "uri"
    value: str

    def n3(self) -> str:
        return f"<{self.value}>"

    def __str__(self) -> str:
        return self.value


class LiteralTerm(BaseModel):
    """A literal bound to a query variable.

    ``typed-literal`` is the SPARQL 1.0 spelling still emitted by some
    endpoints; it is accepted and treated like ``literal``.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    type: Literal["literal", "typed-literal"] = "literal"
    value: str
    datatype: Optional[str] = None
    lang: Optional[str] = Field(default=None, alias="xml:lang")

    def n3(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        if self.lang:
            return f'"{escaped}"@{self.lang}'
        if self.datatype:
            return f'"{escaped}"^^<{self.datatype}>'
        return f'"{escaped}"'

    def __str__(self) -> str:
        return self.value


class BlankNodeTerm(BaseModel):
    """A blank node bound to a query variable. Labels are scoped to one result."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: Literal["bnode"] = "bnode"
    value: str

    def n3(self) -> str:
        return f"_:{self.value}"

    def __str__(self) -> str:
        return f"_:{self.value}"


Term = Annotated[
    Union[IRITerm, LiteralTerm, BlankNodeTerm], Field(discriminator="type")
]
"""Any RDF term that can appear in a solution binding."""

Row = dict[str, Term]
"""One solution: query variable name to bound term. Unbound variables are absent."""


class ResultHead(BaseModel):
    """The ``head`` member of a result document."""

    model_config = ConfigDict(extra="allow")

    vars: list[str] = Field(default_factory=list)
    link: list[str] = Field(default_factory=list)


class ResultBindings(BaseModel):
    """The ``results`` member of a SELECT result document."""

    model_config = ConfigDict(extra="allow")

    bindings: list[Row] = Field(default_factory=list)


class SparqlResults(BaseModel):
    """A complete SPARQL JSON result document.

    SELECT results carry ``results``; ASK results carry ``boolean``. A document
    with neither is rejected.
    """

    model_config = ConfigDict(extra="allow")

    head: ResultHead = Field(default_factory=ResultHead)
    results: Optional[ResultBindings] = None
    boolean: Optional[bool] = None

    @model_validator(mode="after")
    def _require_results_or_boolean(self) -> SparqlResults:
        if self.results is None and self.boolean is None:
            raise ValueError("result document has neither 'results' nor 'boolean'")
        return self

    def solutions(self) -> list[Row]:
        """Return the solution rows in the order the endpoint sent them.

        ASK documents have no solutions and return an empty list.
        """
        if self.results is None:
            return []
        return list(self.results.bindings)
