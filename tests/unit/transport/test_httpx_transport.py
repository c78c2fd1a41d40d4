"""
Unit tests for HttpxTransport.

Uses httpx.MockTransport so no network access is needed.
"""

import json

import httpx
import pytest

from cloud_service_client.exceptions import TransportError, TransportTimeoutError
from cloud_service_client.session.request_state import RequestState
from cloud_service_client.transport.base_transport import BaseTransport
from cloud_service_client.transport.httpx_transport import HttpxResponseEnvelope, HttpxTransport

URL = "https://api.example.com/items"


def make_transport(handler) -> tuple[HttpxTransport, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(client=client), client


def config(**overrides) -> dict:
    return {"url": URL, "method": "GET", "headers": {}, "timeout_ms": 1000, **overrides}


# ============================================================================
# submit Tests
# ============================================================================


@pytest.mark.asyncio
async def test_submit_sends_request():
    """Test method, headers and pass-through options reach httpx."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["header"] = request.headers.get("x-trace")
        seen["body"] = json.loads(request.content)
        seen["query"] = request.url.params.get("page")
        return httpx.Response(201, json={"id": 1})

    transport, client = make_transport(handler)

    response = await transport.submit(
        config(method="POST", headers={"x-trace": "t-1"}, json={"name": "item"}, params={"page": "2"})
    )

    assert response.status_code == 201
    assert seen == {"method": "POST", "header": "t-1", "body": {"name": "item"}, "query": "2"}
    await client.aclose()


@pytest.mark.asyncio
async def test_submit_returns_error_statuses():
    """Test HTTP error statuses are responses, not exceptions."""
    transport, client = make_transport(lambda request: httpx.Response(503))

    response = await transport.submit(config())

    assert response.status_code == 503
    await client.aclose()


@pytest.mark.asyncio
async def test_submit_timeout():
    """Test httpx timeouts become TransportTimeoutError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    transport, client = make_transport(handler)

    with pytest.raises(TransportTimeoutError) as exc_info:
        await transport.submit(config(timeout_ms=250))

    assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)
    assert exc_info.value.details["timeout_ms"] == 250
    await client.aclose()


@pytest.mark.asyncio
async def test_submit_connection_error():
    """Test other httpx transport failures become TransportError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    transport, client = make_transport(handler)

    with pytest.raises(TransportError) as exc_info:
        await transport.submit(config())

    assert not isinstance(exc_info.value, TransportTimeoutError)
    assert exc_info.value.details["error_type"] == "ConnectError"
    await client.aclose()


# ============================================================================
# Response Helpers Tests
# ============================================================================


@pytest.mark.asyncio
async def test_get_set_cookies_multi_value():
    """Test repeated and folded Set-Cookie headers are all returned."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers=[
                ("set-cookie", "a=1; Path=/"),
                ("set-cookie", "b=2; Expires=Wed, 21 Oct 2015 07:28:00 GMT, c=3"),
            ],
        )

    transport, client = make_transport(handler)
    response = await transport.submit(config())

    assert transport.get_set_cookies(response) == [
        "a=1; Path=/",
        "b=2; Expires=Wed, 21 Oct 2015 07:28:00 GMT",
        "c=3",
    ]
    await client.aclose()


@pytest.mark.asyncio
async def test_envelope_and_response_url():
    """Test the httpx envelope reads status, reason and joined headers."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers=[("x-a", "1"), ("x-a", "2"), ("etag", '"v1"')])

    transport, client = make_transport(handler)
    response = await transport.submit(config())

    envelope = transport.create_envelope(response)

    assert isinstance(envelope, HttpxResponseEnvelope)
    assert envelope.status == 200
    assert envelope.status_text == "OK"
    assert envelope.header("X-A") == "1, 2"
    assert envelope.header("ETag") == '"v1"'
    assert transport.get_response_url(response, RequestState(URL)) == URL
    await client.aclose()


def test_envelope_without_response():
    envelope = HttpxResponseEnvelope(None, TransportError("down"))

    assert envelope.status is None
    assert envelope.status_text is None
    assert envelope.headers is None


def test_error_response_default():
    """Test errors without a response attribute yield None."""
    transport = HttpxTransport()

    assert transport.get_error_response(RequestState(URL), TransportError("down")) is None


# ============================================================================
# Lifecycle Tests
# ============================================================================


@pytest.mark.asyncio
async def test_close_leaves_external_client_open():
    """Test a caller-provided client is not closed by the transport."""
    transport, client = make_transport(lambda request: httpx.Response(200))

    await transport.close()

    assert client.is_closed is False
    await client.aclose()


@pytest.mark.asyncio
async def test_close_owned_client():
    """Test a client created by the transport is closed with it."""
    async with HttpxTransport() as transport:
        client = await transport._get_client()

    assert client.is_closed is True


def test_base_transport_set_cookies_from_mapping():
    """Test the default Set-Cookie extraction on mapping responses."""

    class MappingTransport(BaseTransport):
        async def submit(self, config):
            return {}

    transport = MappingTransport()
    raw = {"headers": {"Set-Cookie": ["a=1", "b=2, c=3"], "content-type": "text/plain"}}

    assert transport.get_set_cookies(raw) == ["a=1", "b=2", "c=3"]
    assert transport.get_set_cookies({}) == []
