"""Integration test fixtures.

Wires a real HttpClient + HttpxTransport to an in-process httpx.MockTransport,
so the whole stack (options, strategies, cookies, httpx) runs without network.
"""

import httpx
import pytest

from cloud_service_client.client import HttpClient
from cloud_service_client.transport.httpx_transport import HttpxTransport


@pytest.fixture
def client_factory(test_settings):
    """Factory fixture building an HttpClient around a request handler.

    Usage:
        def test_something(client_factory):
            client = client_factory(lambda request: httpx.Response(200))
    """
    def build(handler, **client_kwargs) -> HttpClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpClient(HttpxTransport(client=http), settings=test_settings, **client_kwargs)

    return build
