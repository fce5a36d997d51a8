"""Named query templates stored as ``<queries_dir>/<name>.rq`` files.

A template is plain SPARQL with at most one ``{{.}}`` placeholder. Rendering
replaces the first occurrence only, verbatim: the argument is not escaped, so
callers must make sure it cannot break the query syntax.
"""

from __future__ import annotations

from pathlib import Path

from sparqlcache.exceptions import QueryNotFoundError, QueryReadError

PLACEHOLDER = "{{.}}"
QUERY_EXTENSION = ".rq"


def resolve_query_path(queries_dir: Path, name: str) -> Path:
    """Return the file path for the named query. The file may not exist."""
    return queries_dir / f"{name}{QUERY_EXTENSION}"


def render_template(template: str, argument: str) -> str:
    """Substitute *argument* for the first ``{{.}}`` in *template*.

    Templates without a placeholder are returned unchanged.
    """
    return template.replace(PLACEHOLDER, argument, 1)


def load_template(queries_dir: Path, name: str) -> str:
    """Read the text of the named query.

    Raises:
        QueryNotFoundError: If ``<queries_dir>/<name>.rq`` does not exist.
        QueryReadError: If the file exists but cannot be read or decoded.
    """
    path = resolve_query_path(queries_dir, name)
    if not path.is_file():
        raise QueryNotFoundError(f"Query '{name}' not found at {path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise QueryReadError(f"Cannot read query '{name}' at {path}: {exc}") from exc


def list_queries(queries_dir: Path) -> list[str]:
    """Return the names of all ``.rq`` files under *queries_dir*, sorted.

    Nested directories are included with ``/``-separated names, matching how
    they are addressed by :func:`resolve_query_path`.
    """
    if not queries_dir.is_dir():
        return []
    return sorted(
        p.relative_to(queries_dir).with_suffix("").as_posix()
        for p in queries_dir.rglob(f"*{QUERY_EXTENSION}")
        if p.is_file()
    )
