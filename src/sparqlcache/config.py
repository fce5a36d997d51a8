"""Configuration loading, precedence resolution, and atomic writes.

This module handles all configuration for sparqlcache:

* **Project config** -- ``./sparqlcache.json`` deserialised into a
  :class:`~sparqlcache.models.ProjectConfig`. See :func:`load_project_config`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the project file into the effective
  configuration.
* **Repository construction** -- :func:`build_repository` turns the effective
  configuration into a ready :class:`~sparqlcache.repository.Repository`.

Cache entries are written with :func:`atomic_write_bytes`, a temp-file-then-
rename strategy that guarantees readers never observe a half-written entry.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from sparqlcache.exceptions import ConfigError
from sparqlcache.models import ProjectConfig

if TYPE_CHECKING:
    import httpx

    from sparqlcache.repository import Repository

PROJECT_CONFIG_FILENAME = "sparqlcache.json"

ENV_ENDPOINT = "SPARQLCACHE_ENDPOINT"
ENV_CACHE_DIR = "SPARQLCACHE_CACHE_DIR"
ENV_NO_CACHE = "SPARQLCACHE_NO_CACHE"

_TRUTHY = {"1", "true", "yes", "on"}


# --- Atomic file writes ---


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. The data is flushed
    and fsynced before the rename; on any failure the temp file is removed
    and *path* is left untouched. The parent directory must already exist.
    """
    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Project config ---


def load_project_config(path: Optional[Path] = None) -> ProjectConfig:
    """Load the project configuration.

    Args:
        path: Explicit config file. Defaults to ``./sparqlcache.json``.

    Returns:
        The deserialised :class:`~sparqlcache.models.ProjectConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but cannot be read, contains invalid
            JSON, or fails Pydantic validation.
    """
    if path is None:
        path = Path.cwd() / PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return ProjectConfig()
    try:
        text = path.read_text(encoding="utf-8")
        return ProjectConfig.model_validate(json.loads(text))
    except OSError as exc:
        raise ConfigError(f"Cannot read project config at {path}: {exc}") from exc
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc


# --- Precedence resolution ---


def resolve_config(
    cli_endpoint: Optional[str] = None,
    cli_no_cache: bool = False,
    cli_cache_dir: Optional[str] = None,
    cli_format: Optional[str] = None,
    config_path: Optional[Path] = None,
) -> ProjectConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``--endpoint``, ``--no-cache``, ``--cache-dir``)
        2. Environment variables (``SPARQLCACHE_ENDPOINT``,
           ``SPARQLCACHE_NO_CACHE``, ``SPARQLCACHE_CACHE_DIR``)
        3. Project config (``./sparqlcache.json``)
        4. Defaults

    Returns:
        The effective :class:`~sparqlcache.models.ProjectConfig`.
    """
    config = load_project_config(config_path)

    # 2. Environment variables
    env_endpoint = os.environ.get(ENV_ENDPOINT)
    if env_endpoint:
        config.endpoint = env_endpoint
    env_cache_dir = os.environ.get(ENV_CACHE_DIR)
    if env_cache_dir:
        config.cache.directory = env_cache_dir
    if os.environ.get(ENV_NO_CACHE, "").strip().lower() in _TRUTHY:
        config.cache.enabled = False

    # 1. CLI flags
    if cli_endpoint is not None:
        config.endpoint = cli_endpoint
    if cli_cache_dir is not None:
        config.cache.directory = cli_cache_dir
    if cli_no_cache:
        config.cache.enabled = False
    if cli_format is not None:
        config.output.format = cli_format

    return config


def build_repository(
    config: ProjectConfig,
    client: Optional[httpx.Client] = None,
) -> Repository:
    """Create a :class:`~sparqlcache.repository.Repository` from *config*.

    Args:
        config: Effective configuration, usually from :func:`resolve_config`.
        client: Optional pre-configured HTTP client to share.

    Raises:
        ConfigError: If no endpoint is configured.
        CacheDirectoryError: If caching is enabled and the cache directory
            cannot be listed.
    """
    from sparqlcache.client import SparqlTransport
    from sparqlcache.repository import Repository

    if not config.endpoint:
        raise ConfigError(
            f"No SPARQL endpoint configured. Pass --endpoint, set {ENV_ENDPOINT}, "
            f"or add \"endpoint\" to {PROJECT_CONFIG_FILENAME}"
        )

    transport = SparqlTransport(config.endpoint, client=client, request_config=config.request)
    return Repository(
        transport,
        cache_enabled=config.cache.enabled,
        cache_dir=Path(config.cache.directory),
        queries_dir=Path(config.queries_dir),
    )
