"""
Abstract transport for the cloud service client.

Defines the interface every HTTP backend must adhere to. The retry
coordinator and the cookie bridge only talk to this interface, so backends
can be swapped without touching retry or cookie logic.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from cloud_service_client.cookies.parsing import split_set_cookie_header
from cloud_service_client.session.response import ResponseEnvelope

if TYPE_CHECKING:
    from cloud_service_client.session.request_state import RequestState


class BaseTransport(ABC):
    """
    Abstract base class for HTTP transports.

    Responsibilities:
    - Send one attempt and return the raw response (or raise)
    - Expose Set-Cookie values and the effective URL of a raw response
    - Recover a response carried by an error, if the backend does that
    - Wrap raw results in a ResponseEnvelope

    Does NOT handle:
    - Retries or backoff (that's RetryCoordinator's job)
    - Cookie storage or merging (that's the client jar and RequestState)

    Implementations must raise on failures with no HTTP response and must
    not raise for HTTP error statuses; status handling belongs to the
    strategy chain.
    """

    @abstractmethod
    async def submit(self, config: dict[str, Any]) -> Any:
        """
        Send one attempt.

        Args:
            config: ``url``, ``method``, ``headers``, ``timeout_ms`` and any
                pass-through options of the request

        Returns:
            Raw response of the backend

        Raises:
            TransportError: No response could be obtained
            TransportTimeoutError: The attempt exceeded ``timeout_ms``
        """

    def get_set_cookies(self, raw_response: Any) -> list[str]:
        """
        Set-Cookie values of a raw response, one cookie per item.

        The default reads a ``headers`` mapping and splits folded values.
        """
        headers = getattr(raw_response, "headers", None)
        if headers is None and isinstance(raw_response, dict):
            headers = raw_response.get("headers")
        if not headers:
            return []

        values: list[str] = []
        for name, value in dict(headers).items():
            if str(name).lower() != "set-cookie" or not value:
                continue
            items = value if isinstance(value, (list, tuple)) else [value]
            for item in items:
                values.extend(split_set_cookie_header(str(item)))
        return values

    def get_error_response(self, state: "RequestState", error: BaseException) -> Optional[Any]:
        """Response carried by ``error``, if any. Default: ``error.response``."""
        return getattr(error, "response", None)

    def create_envelope(
        self, raw_response: Any = None, error: Optional[BaseException] = None
    ) -> ResponseEnvelope:
        return ResponseEnvelope(raw_response, error)

    def get_response_url(self, raw_response: Any, state: "RequestState") -> str:
        """
        URL a response was ultimately served from (after redirects).

        Set-Cookie values are scoped against this URL. Defaults to the
        request URL.
        """
        return state.url

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
        return None
