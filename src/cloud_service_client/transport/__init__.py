"""
HTTP transports.

The client never performs I/O itself; it delegates every attempt to a
BaseTransport implementation.
"""

from cloud_service_client.transport.base_transport import BaseTransport
from cloud_service_client.transport.httpx_transport import HttpxResponseEnvelope, HttpxTransport

__all__ = [
    "BaseTransport",
    "HttpxResponseEnvelope",
    "HttpxTransport",
]
