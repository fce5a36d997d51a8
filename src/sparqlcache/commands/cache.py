"""Cache commands -- inspect the local response cache.

Provides the ``sparqlcache cache`` sub-command group. All commands are
read-only: entries are written by queries and never removed by sparqlcache.
"""

from __future__ import annotations

import typer

from sparqlcache.output import get_output, print_data

cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show cache location, state, and number of stored entries.

    Example::

        sparqlcache cache stats
    """
    from sparqlcache.app import open_repository

    repo = open_repository(ctx)
    stats = repo.stats()
    output = get_output()
    output.print_table(
        ["Setting", "Value"],
        [[key, str(value)] for key, value in stats.items()],
        title="Query cache",
    )


@cache_app.command("path")
def cache_path(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Exact SPARQL query text."),
) -> None:
    """Print the cache entry path for QUERY and whether it is known.

    Example::

        sparqlcache cache path 'ASK { ?s ?p ?o }'
    """
    from sparqlcache.app import open_repository

    repo = open_repository(ctx)
    print_data(str(repo.cache_path(query)))
    if repo.is_cached(query):
        get_output().info("cached")
    else:
        get_output().info("not cached")
