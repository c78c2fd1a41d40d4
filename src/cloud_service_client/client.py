"""
HTTP client facade.

HttpClient ties together a transport, client-wide default options and the
client-lifetime cookie jar. Each call builds a RequestState and hands it to
the RetryCoordinator; concurrent calls share nothing but the jar.

Usage:
    async with HttpClient(handle_cookies=True) as client:
        response = await client.get(
            "https://api.example.com/items/1",
            cloud_client={"eventually_consistent_create": True},
        )
        response.cloud_client["options"]["cloud_client"]["retries"]
"""

from typing import Any, Iterable, Mapping, Optional, Union

import structlog

from cloud_service_client.config import Settings, get_settings
from cloud_service_client.cookies.store import CookieStore
from cloud_service_client.exceptions import CloudClientError
from cloud_service_client.models.options import CloudClientOptions
from cloud_service_client.retry.engine import RetryCoordinator
from cloud_service_client.session.request_state import RequestState
from cloud_service_client.transport.base_transport import BaseTransport
from cloud_service_client.transport.httpx_transport import HttpxTransport

logger = structlog.get_logger(__name__)


class HttpClient:
    """
    Retrying, cookie-aware HTTP client.

    Attributes:
        transport: Backend performing the I/O
        settings: Settings the client-wide defaults were seeded from
    """

    def __init__(
        self,
        transport: Optional[BaseTransport] = None,
        settings: Optional[Settings] = None,
        handle_cookies: Optional[bool] = None,
        request_logger: Any = None,
    ):
        """
        Initialize the client.

        Args:
            transport: Transport to send attempts with (default: HttpxTransport)
            settings: Settings seeding the defaults (default: cached environment settings)
            handle_cookies: Keep a client-lifetime cookie jar (default: settings.HANDLE_COOKIES)
            request_logger: Logger for request-scoped lines (default: structlog logger)
        """
        self.settings = settings or get_settings()
        self.transport = transport or HttpxTransport()
        self._logger = request_logger or structlog.get_logger(__name__)

        if handle_cookies is None:
            handle_cookies = self.settings.HANDLE_COOKIES
        self._cookie_jar: Optional[CookieStore] = CookieStore() if handle_cookies else None

        self._global_options = self.settings.to_client_options()
        self._coordinator = RetryCoordinator(self.transport, self._cookie_jar)

        logger.debug(
            "HttpClient initialized",
            transport=self.transport.__class__.__name__,
            handle_cookies=bool(handle_cookies),
        )

    @property
    def handles_cookies(self) -> bool:
        return self._cookie_jar is not None

    # ------------------------------------------------------------------
    # Global options
    # ------------------------------------------------------------------

    def set_global_options(self, options: Union[CloudClientOptions, Mapping[str, Any]]) -> None:
        """
        Replace the client-wide defaults.

        Values not given fall back to the settings; per-request options
        still win over everything set here.

        Raises:
            pydantic.ValidationError: Invalid option values
        """
        if not isinstance(options, CloudClientOptions):
            options = CloudClientOptions.model_validate(dict(options))
        self._global_options = options.merged_with(self.settings.to_client_options())

    def get_global_options(self) -> CloudClientOptions:
        """Copy of the client-wide defaults."""
        return self._global_options.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        cloud_client: Union[CloudClientOptions, Mapping[str, Any], None] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Send a request, retrying as the options dictate.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Request headers (never mutated)
            cloud_client: Per-request options block
            **kwargs: Passed through to the transport (json, params, content, ...)

        Returns:
            The final transport response, with ``cloud_client`` provenance

        Raises:
            The final transport error (e.g. TransportError), with ``cloud_client`` provenance
            CloudClientError: ``timeout``/``timeout_ms`` passed as a transport option
        """
        state = RequestState(
            url,
            method=method,
            headers=headers,
            cloud_client=cloud_client,
            logger=self._logger,
            **kwargs,
        )
        state.merge_client_options(self._global_options)
        return await self._coordinator.execute(state)

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)

    async def head(self, url: str, **kwargs: Any) -> Any:
        return await self.request("HEAD", url, **kwargs)

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    def set_cookies(self, url: str, cookies: Union[str, Iterable[str]]) -> int:
        """
        Store Set-Cookie values as if ``url`` had sent them.

        Returns:
            Number of cookies kept

        Raises:
            CloudClientError: Cookie handling is disabled
        """
        if self._cookie_jar is None:
            raise CloudClientError(
                "Cookie handling is disabled for this client",
                details={"url": url},
            )
        if isinstance(cookies, str):
            cookies = [cookies]
        return self._cookie_jar.set_cookies(cookies, url)

    def get_cookies(self, url: str) -> list[str]:
        """Set-Cookie strings of the jar cookies applicable to ``url``."""
        if self._cookie_jar is None:
            return []
        return [str(record) for record in self._cookie_jar.get_cookies(url)]

    def clear_cookies(self) -> None:
        """Empty the client-lifetime jar."""
        if self._cookie_jar is not None:
            self._cookie_jar.remove_all()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
