"""
Cloud service client: retry and cookie-session layer for async HTTP transports.

Wraps any transport that can send a request and expose status/headers with:
- Ordered, pluggable retry strategies with exponential backoff
- Retry-After handling and eventual-consistency polling
- A client-lifetime cookie jar fed by Set-Cookie responses
- Redacted, JSON-safe retry provenance attached to every result

Logging is structlog; call ``configure_logging()`` once to wire it to stdlib
logging with the level and renderer from Settings.

Architecture: HttpClient facade + RetryCoordinator + strategy chain + transport adapter
"""

__version__ = "0.1.0"

from cloud_service_client.client import HttpClient
from cloud_service_client.exceptions import (
    CloudClientError,
    TransportError,
    TransportTimeoutError,
)
from cloud_service_client.logging_config import configure_logging
from cloud_service_client.models.options import CloudClientOptions, RetryOptions
from cloud_service_client.retry.strategies import CustomRetryStrategy, RetryStrategy
from cloud_service_client.transport.base_transport import BaseTransport
from cloud_service_client.transport.httpx_transport import HttpxTransport

__all__ = [
    "HttpClient",
    "HttpxTransport",
    "BaseTransport",
    "CloudClientOptions",
    "RetryOptions",
    "RetryStrategy",
    "CustomRetryStrategy",
    "CloudClientError",
    "TransportError",
    "TransportTimeoutError",
    "configure_logging",
]
