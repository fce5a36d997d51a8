"""HTTP transport for SPARQL endpoints.

:class:`SparqlTransport` sends one query as a form-encoded POST and returns
the raw response body. It wraps :class:`httpx.Client` and maps failures onto
:class:`~sparqlcache.exceptions.TransportError` subclasses:

- **Rejected** -- the endpoint answered with a non-2xx status
  (:class:`~sparqlcache.exceptions.EndpointResponseError`).
- **Unreachable** -- DNS failure, refused connection, timeout, redirect
  loop, undecodable body
  (:class:`~sparqlcache.exceptions.EndpointUnreachableError`).

There is no retry and no caching at this layer. Every call to
:meth:`SparqlTransport.execute` issues exactly one HTTP request.

See Also:
    :class:`~sparqlcache.repository.Repository` -- the caching layer built
    on top of this transport.
"""

from __future__ import annotations

from typing import Optional

import httpx

from sparqlcache.exceptions import EndpointResponseError, EndpointUnreachableError
from sparqlcache.models import RequestConfig
from sparqlcache.output import get_output
from sparqlcache.results import SPARQL_RESULTS_JSON

_BODY_EXCERPT = 200


class SparqlTransport:
    """Send SPARQL queries to a single endpoint over HTTP.

    The underlying :class:`httpx.Client` may be shared: when *client* is
    given it is used as-is and never closed by this object, so callers can
    configure proxies, auth or timeouts once and reuse the client elsewhere.
    When omitted, a client is built from *request_config* and closed by
    :meth:`close`.

    Args:
        endpoint: The SPARQL endpoint URL.
        client: Optional pre-configured client.
        request_config: Timeout and SSL settings for a client built here.

    Example::

        with SparqlTransport("https://dbpedia.org/sparql") as transport:
            body = transport.execute("ASK { ?s ?p ?o }")
    """

    def __init__(
        self,
        endpoint: str,
        client: Optional[httpx.Client] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        self.endpoint = endpoint
        self._owns_client = client is None
        if client is None:
            config = request_config or RequestConfig()
            client = httpx.Client(
                timeout=config.timeout,
                verify=config.verify_ssl,
                follow_redirects=True,
            )
        self._client = client

    @property
    def client(self) -> httpx.Client:
        """The :class:`httpx.Client` used for requests."""
        return self._client

    def __enter__(self) -> SparqlTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def execute(self, query: str) -> bytes:
        """POST *query* to the endpoint and return the raw response body.

        Args:
            query: SPARQL query text, sent verbatim in the ``query`` form field.

        Returns:
            The complete response body bytes of a 2xx response.

        Raises:
            EndpointResponseError: The endpoint answered with a non-2xx status.
            EndpointUnreachableError: The request could not be completed.
        """
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": SPARQL_RESULTS_JSON,
        }
        get_output().debug(f"POST {self.endpoint} ({len(query)} chars)")

        try:
            response = self._client.post(
                self.endpoint,
                data={"query": query},
                headers=headers,
            )
        except httpx.RequestError as exc:
            raise EndpointUnreachableError(
                f"Request to SPARQL endpoint {self.endpoint} failed: {exc}"
            ) from exc

        if not response.is_success:
            excerpt = response.text[:_BODY_EXCERPT] if response.content else ""
            msg = f"Received bad response from SPARQL endpoint: HTTP {response.status_code}"
            if excerpt:
                msg = f"{msg}: {excerpt}"
            raise EndpointResponseError(msg, status_code=response.status_code, body=excerpt)

        return response.content
