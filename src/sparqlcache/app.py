"""Typer application and CLI entry point for sparqlcache.

This module wires together the top-level Typer application: the root
callback that installs the output manager and collects connection options,
the query commands (``query``, ``run``, ``ask``, ``queries``), and the
``cache`` inspection group.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled non-sparqlcache exceptions are written to a crash
log under ``.sparqlcache/logs``.

See Also:
    :mod:`sparqlcache.config`: Configuration resolution.
    :mod:`sparqlcache.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from sparqlcache import __version__
from sparqlcache.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE
from sparqlcache.repository import Repository

app = typer.Typer(
    name="sparqlcache",
    help="Query SPARQL endpoints through a write-once local response cache.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from sparqlcache.commands.cache import cache_app  # noqa: E402

app.add_typer(cache_app, name="cache", help="Inspect the local response cache.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"sparqlcache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    endpoint: Optional[str] = typer.Option(
        None, "--endpoint", "-e", help="SPARQL endpoint URL."
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Ignore responses stored by earlier runs."
    ),
    cache_dir: Optional[str] = typer.Option(
        None, "--cache-dir", help="Cache directory."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~sparqlcache.output.OutputManager` from
    CLI flags and stores the connection options in the Typer context so that
    sub-commands can build a repository via :func:`open_repository`.
    """
    from sparqlcache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["endpoint"] = endpoint
    ctx.obj["no_cache"] = no_cache
    ctx.obj["cache_dir"] = cache_dir


def open_repository(ctx: typer.Context) -> Repository:
    """Return the repository for this invocation, building it on first use.

    The repository is closed when the root context closes.
    """
    from sparqlcache.config import build_repository, resolve_config

    root = ctx.find_root()
    root.ensure_object(dict)
    repo = root.obj.get("repository")
    if repo is None:
        config = resolve_config(
            cli_endpoint=root.obj.get("endpoint"),
            cli_no_cache=bool(root.obj.get("no_cache")),
            cli_cache_dir=root.obj.get("cache_dir"),
        )
        repo = build_repository(config)
        root.obj["repository"] = repo
        root.call_on_close(repo.close)
    return repo


def _read_query_file(path: Path) -> str:
    """Read query text from *path*, mapping failures to QueryReadError."""
    from sparqlcache.exceptions import QueryReadError

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise QueryReadError(f"Cannot read query file {path}: {exc}") from exc


@app.command("query")
def query_command(
    ctx: typer.Context,
    query: Optional[str] = typer.Argument(None, help="SPARQL query text."),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Read the query text from a file."
    ),
    raw: bool = typer.Option(
        False, "--raw", help="Print the stored response body instead of rows."
    ),
) -> None:
    """Run a SELECT query and print its solution rows.

    Example::

        sparqlcache -e https://dbpedia.org/sparql query 'SELECT ?s WHERE { ?s ?p ?o } LIMIT 3'
        sparqlcache query -f report.rq --raw
    """
    from sparqlcache.output import error, get_output

    if (query is None) == (file is None):
        error("Pass exactly one of QUERY or --file")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    if file is not None:
        text = _read_query_file(file)
    else:
        text = query

    repo = open_repository(ctx)
    if raw:
        get_output().print_data(repo.query_raw(text).decode("utf-8", errors="replace"))
        return

    results = repo.query_results(text)
    get_output().print_rows(results.head.vars, results.solutions())


@app.command("run")
def run_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Query name, resolved to queries/<name>.rq."),
    argument: str = typer.Argument("", help="Value substituted for {{.}}."),
) -> None:
    """Run a named query file with ARGUMENT substituted.

    Example::

        sparqlcache run cityByName Berlin
    """
    from sparqlcache.output import get_output

    repo = open_repository(ctx)
    results = repo.dynamic_query_results(name, argument)
    get_output().print_rows(results.head.vars, results.solutions())


@app.command("ask")
def ask_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="SPARQL ASK query text."),
) -> None:
    """Run an ASK query and print ``true`` or ``false``."""
    from sparqlcache.output import print_data

    repo = open_repository(ctx)
    print_data("true" if repo.ask(query) else "false")


@app.command("queries")
def queries_command(
    directory: Optional[Path] = typer.Option(
        None, "--dir", help="Queries directory (default from config)."
    ),
) -> None:
    """List the named queries available to ``run``."""
    from sparqlcache.config import load_project_config
    from sparqlcache.output import get_output
    from sparqlcache.templates import list_queries, resolve_query_path

    queries_dir = directory or Path(load_project_config().queries_dir)
    names = list_queries(queries_dir)
    get_output().print_table(
        ["Name", "File"],
        [[name, str(resolve_query_path(queries_dir, name))] for name in names],
        title=f"Named queries ({len(names)})",
    )


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    logs_dir = Path(".sparqlcache") / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path.resolve())


def main() -> None:
    """CLI entry point invoked by the ``sparqlcache`` console script.

    Unhandled :class:`~sparqlcache.exceptions.SparqlCacheError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from sparqlcache.exceptions import SparqlCacheError
        from sparqlcache.output import error

        if isinstance(exc, SparqlCacheError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
