"""Tests for the SPARQL HTTP transport."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from sparqlcache.client import SparqlTransport
from sparqlcache.exceptions import (
    EndpointResponseError,
    EndpointUnreachableError,
    TransportError,
)
from sparqlcache.models import RequestConfig

from tests.conftest import ENDPOINT, RecordingEndpoint


def _transport(endpoint: RecordingEndpoint) -> SparqlTransport:
    return SparqlTransport(ENDPOINT, client=endpoint.client())


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------


class TestRequest:
    def test_posts_form_encoded_query(self) -> None:
        endpoint = RecordingEndpoint()
        query = 'SELECT ?s WHERE { ?s ?p "a&b=c" }'
        _transport(endpoint).execute(query)

        assert endpoint.calls == 1
        request = endpoint.requests[0]
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        assert request.headers["accept"] == "application/sparql-results+json"
        assert parse_qs(request.content.decode("utf-8")) == {"query": [query]}

    def test_returns_body_bytes_verbatim(self) -> None:
        body = b'{"head": {}, "boolean": false}  \n'
        endpoint = RecordingEndpoint(body=body)
        assert _transport(endpoint).execute("ASK {}") == body

    def test_one_request_per_call(self) -> None:
        endpoint = RecordingEndpoint()
        transport = _transport(endpoint)
        transport.execute("ASK {}")
        transport.execute("ASK {}")
        assert endpoint.calls == 2


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrors:
    @pytest.mark.parametrize("status", [400, 404, 500, 503])
    def test_non_success_status(self, status: int) -> None:
        endpoint = RecordingEndpoint(body=b"Virtuoso 37000 Error SP030", status_code=status)
        with pytest.raises(EndpointResponseError) as exc_info:
            _transport(endpoint).execute("SELECT nonsense")

        exc = exc_info.value
        assert exc.status_code == status
        assert "SP030" in exc.body
        assert f"HTTP {status}" in str(exc)
        assert endpoint.calls == 1

    def test_no_retry_on_server_error(self) -> None:
        endpoint = RecordingEndpoint(body=b"", status_code=502)
        with pytest.raises(TransportError):
            _transport(endpoint).execute("ASK {}")
        assert endpoint.calls == 1

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
            httpx.RemoteProtocolError("server disconnected"),
            httpx.DecodingError("malformed gzip body"),
        ],
    )
    def test_network_failure(self, error: Exception) -> None:
        endpoint = RecordingEndpoint(error=error)
        with pytest.raises(EndpointUnreachableError) as exc_info:
            _transport(endpoint).execute("ASK {}")
        assert exc_info.value.__cause__ is error
        assert endpoint.calls == 1

    def test_redirect_loop(self) -> None:
        def _redirect_to_self(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"location": ENDPOINT})

        client = httpx.Client(
            transport=httpx.MockTransport(_redirect_to_self), follow_redirects=True
        )
        with pytest.raises(EndpointUnreachableError) as exc_info:
            SparqlTransport(ENDPOINT, client=client).execute("ASK {}")
        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)

    def test_rejected_and_unreachable_share_a_base(self) -> None:
        assert issubclass(EndpointResponseError, TransportError)
        assert issubclass(EndpointUnreachableError, TransportError)


# ---------------------------------------------------------------------------
# Client ownership
# ---------------------------------------------------------------------------


class TestClientOwnership:
    def test_injected_client_is_not_closed(self) -> None:
        client = RecordingEndpoint().client()
        with SparqlTransport(ENDPOINT, client=client) as transport:
            assert transport.client is client
        assert not client.is_closed

    def test_own_client_is_closed(self) -> None:
        transport = SparqlTransport(ENDPOINT, request_config=RequestConfig(timeout=5))
        client = transport.client
        assert client.timeout.read == 5
        transport.close()
        assert client.is_closed
