"""sparqlcache -- Query SPARQL endpoints through a write-once local response cache.

Every response is stored on disk under the SHA-256 of the exact query text,
so a build that issues the same queries again replays them without touching
the network. Named queries live as ``queries/<name>.rq`` templates with a
single ``{{.}}`` placeholder.

Typical use::

    from sparqlcache import Repository

    with Repository.connect("https://dbpedia.org/sparql") as repo:
        rows = repo.dynamic_query("cityByName", "Berlin")

Modules:
    repository: The caching query layer and named-query execution.
    client: HTTP transport to the endpoint.
    results: SPARQL JSON result parsing.
    templates: Named query file resolution and substitution.
    models: Pydantic models for configuration and results.
    config: Project configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from sparqlcache.repository import Repository, cache_key  # noqa: E402

__all__ = ["Repository", "cache_key", "__version__"]
