"""
Response envelope: one normalized view over a transport response or error.

Transports hand back very different objects (httpx responses, plain dicts in
tests, exceptions that still carry a response). The envelope gives the retry
chain and the coordinator a single set of accessors and produces the
redacted summary kept in retry history.
"""

from collections.abc import Mapping, MutableMapping
from typing import Any, Optional

from cloud_service_client.models.response_models import ErrorSummary, ResponseSummary
from cloud_service_client.session.redactor import redact_headers

CLIENT_INFO_KEY = "cloud_client"


class ResponseEnvelope:
    """
    Wraps a raw response and/or a raw error from a transport.

    The base implementation reads ``status``, ``status_text`` and ``headers``
    from mappings or plain attributes. Transport-specific subclasses override
    the accessors (see ``HttpxResponseEnvelope``).

    Attributes:
        raw_response: Response as produced by the transport, or None
        error: Error raised by the transport, or None
    """

    def __init__(self, raw_response: Any = None, error: Optional[BaseException] = None):
        self.raw_response = raw_response
        self.error = error
        self._request_time: Optional[int] = None

    def _read(self, name: str) -> Any:
        raw = self.raw_response
        if raw is None:
            return None
        if isinstance(raw, Mapping):
            return raw.get(name)
        return getattr(raw, name, None)

    @property
    def status(self) -> Optional[int]:
        """HTTP status, None when no HTTP response was obtained."""
        return self._read("status")

    @property
    def status_text(self) -> Optional[str]:
        return self._read("status_text")

    @property
    def headers(self) -> Optional[dict[str, str]]:
        headers = self._read("headers")
        if headers is None:
            return None
        return dict(headers)

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in (self.headers or {}).items():
            if str(key).lower() == wanted:
                return value
        return None

    @property
    def request_time(self) -> Optional[int]:
        return self._request_time

    def set_request_time(self, request_time: int) -> None:
        """Record how long the transport took for the attempt, in ms."""
        self._request_time = request_time

    def summary(self) -> ResponseSummary:
        """Redacted, body-free summary of the envelope."""
        headers = self.headers
        error = None
        if self.error is not None:
            error = ErrorSummary(
                name=type(self.error).__name__,
                message=str(self.error) or None,
            )
        return ResponseSummary(
            status=self.status or None,
            status_text=self.status_text or None,
            headers=redact_headers(headers) if headers is not None else None,
            request_time=self._request_time,
            error=error,
        )

    def to_json(self) -> dict[str, Any]:
        return self.summary().to_json()

    def to_client_result(self, extra: Mapping[str, Any]) -> Any:
        """
        Attach provenance to the raw objects and hand back the final result.

        ``{**extra, **summary}`` is attached as ``cloud_client`` to the raw
        response (attribute, or key for mutable mappings) and to the error.

        Returns:
            The raw response when no error is present

        Raises:
            The raw error, enriched, when one is present
        """
        info = {**extra, **self.to_json()}
        if self.raw_response is not None:
            _attach(self.raw_response, info)

        if self.error is not None:
            _attach(self.error, info)
            raise self.error

        return self.raw_response

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status={self.status}, error={type(self.error).__name__ if self.error else None})"


def _attach(target: Any, info: dict[str, Any]) -> None:
    if isinstance(target, MutableMapping):
        target[CLIENT_INFO_KEY] = info
    else:
        setattr(target, CLIENT_INFO_KEY, info)
