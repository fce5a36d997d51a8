"""HTTP transport for sparqlcache.

This package provides :class:`SparqlTransport`, the stateless layer that
sends one SPARQL query to an endpoint and returns the raw response body.
It is consumed by :class:`~sparqlcache.repository.Repository`, which adds
caching on top.
"""

from sparqlcache.client.transport import SparqlTransport

__all__ = ["SparqlTransport"]
