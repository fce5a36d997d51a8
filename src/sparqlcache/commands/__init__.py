"""Built-in CLI sub-commands for sparqlcache.

* :mod:`~sparqlcache.commands.cache` -- inspect the local response cache.

Query commands (``query``, ``run``, ``ask``, ``queries``) are registered
directly on the root app in :mod:`sparqlcache.app`.
"""
