"""
httpx-based transport.

Sends attempts through a persistent ``httpx.AsyncClient``. Supports:
- Per-attempt timeouts from the ``cloud_client`` options
- Connection pooling via a lazily created client
- Multi-value and folded Set-Cookie extraction
- Effective URL reporting after redirects

httpx transport errors are translated into TransportError subclasses; HTTP
error statuses are returned as responses for the strategy chain to judge.
"""

from typing import TYPE_CHECKING, Any, Optional

import httpx
import structlog

from cloud_service_client.cookies.parsing import split_set_cookie_header
from cloud_service_client.exceptions import TransportError, TransportTimeoutError
from cloud_service_client.session.response import ResponseEnvelope
from cloud_service_client.transport.base_transport import BaseTransport

if TYPE_CHECKING:
    from cloud_service_client.session.request_state import RequestState

logger = structlog.get_logger(__name__)

# Keys of the request config consumed here rather than passed to httpx
_RESERVED_KEYS = frozenset({"url", "method", "headers", "timeout_ms"})


class HttpxResponseEnvelope(ResponseEnvelope):
    """ResponseEnvelope reading ``httpx.Response`` attributes."""

    @property
    def status(self) -> Optional[int]:
        if self.raw_response is None:
            return None
        return self.raw_response.status_code

    @property
    def status_text(self) -> Optional[str]:
        if self.raw_response is None:
            return None
        return self.raw_response.reason_phrase

    @property
    def headers(self) -> Optional[dict[str, str]]:
        if self.raw_response is None:
            return None
        headers: dict[str, str] = {}
        for name, value in self.raw_response.headers.multi_items():
            headers[name] = f"{headers[name]}, {value}" if name in headers else value
        return headers


class HttpxTransport(BaseTransport):
    """
    Transport using httpx for async HTTP communication.

    Redirects are not followed unless ``follow_redirects=True`` is passed.
    When they are, Set-Cookie values of intermediate hops are not stored.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        connection_limits: Optional[httpx.Limits] = None,
        follow_redirects: bool = False,
        **client_kwargs: Any,
    ):
        """
        Initialize the transport.

        Args:
            client: Pre-built AsyncClient (e.g. with a MockTransport); owned by the caller
            connection_limits: httpx connection pool limits (default: 10 max connections)
            follow_redirects: Follow redirects inside httpx
            **client_kwargs: Extra AsyncClient arguments
        """
        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0,
            )

        self._client = client
        self._owns_client = client is None
        self._connection_limits = connection_limits
        self._follow_redirects = follow_redirects
        self._client_kwargs = client_kwargs

        logger.debug(
            "httpx transport initialized",
            external_client=not self._owns_client,
            follow_redirects=follow_redirects,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                limits=self._connection_limits,
                follow_redirects=self._follow_redirects,
                **self._client_kwargs,
            )
            self._owns_client = True
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def submit(self, config: dict[str, Any]) -> httpx.Response:
        """
        Send one attempt with httpx.

        Raises:
            TransportTimeoutError: httpx timed out
            TransportError: Any other httpx transport failure
        """
        client = await self._get_client()
        timeout_ms = config.get("timeout_ms")
        extra = {key: value for key, value in config.items() if key not in _RESERVED_KEYS}

        try:
            return await client.request(
                config.get("method", "GET"),
                config["url"],
                headers=config.get("headers") or None,
                timeout=httpx.Timeout(timeout_ms / 1000) if timeout_ms else httpx.USE_CLIENT_DEFAULT,
                **extra,
            )
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(
                f"Request timeout after {timeout_ms}ms",
                details={"timeout_ms": timeout_ms, "error_type": type(e).__name__},
            ) from e
        except httpx.TransportError as e:
            raise TransportError(
                f"Network error: {e}",
                details={"error_type": type(e).__name__},
            ) from e

    def get_set_cookies(self, raw_response: httpx.Response) -> list[str]:
        values: list[str] = []
        for value in raw_response.headers.get_list("set-cookie"):
            values.extend(split_set_cookie_header(value))
        return values

    def create_envelope(
        self, raw_response: Optional[httpx.Response] = None, error: Optional[BaseException] = None
    ) -> ResponseEnvelope:
        return HttpxResponseEnvelope(raw_response, error)

    def get_response_url(self, raw_response: httpx.Response, state: "RequestState") -> str:
        return str(raw_response.url)

    async def close(self) -> None:
        """Close the AsyncClient if this transport created it."""
        if self._client is not None and self._owns_client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed httpx AsyncClient")

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
