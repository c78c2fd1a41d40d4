"""
Mutable state of one logical request across all of its attempts.

A RequestState is created once per call to the client and passed explicitly
through the retry coordinator. It owns the request options, the resolved
``cloud_client`` options, the retry record and the per-request cookie jar,
and it is the only place that logs with the request prefix.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

import structlog

from cloud_service_client.cookies.parsing import parse_cookie_header
from cloud_service_client.cookies.record import CookieRecord
from cloud_service_client.cookies.store import CookieStore
from cloud_service_client.exceptions import CloudClientError
from cloud_service_client.models.options import CloudClientOptions
from cloud_service_client.models.response_models import ResponseSummary
from cloud_service_client.session.redactor import object_to_json, redact_headers

REQUEST_ID_HEADER = "x-request-id"
CLIENT_OPTIONS_KEY = "cloud_client"
# Set per attempt from cloud_client.timeout; not accepted as pass-through options
TIMEOUT_OPTION_KEYS = frozenset({"timeout", "timeout_ms"})


def now_ms() -> int:
    """Wall clock in milliseconds."""
    return int(time.time() * 1000)


@dataclass
class RetryRecord:
    """
    Retry bookkeeping of one logical request.

    Only ``RequestState.add_retry`` mutates ``retries``, ``retry_wait_ms`` and
    ``retry_responses``, keeping ``retries == len(retry_responses)``.
    """

    retries: int = 0
    retry_wait_ms: int = 0
    retry_responses: list[dict[str, Any]] = field(default_factory=list)
    start_time: int = 0
    end_time: int = 0

    def to_json(self) -> dict[str, Any]:
        return {
            "retries": self.retries,
            "retry_wait_ms": self.retry_wait_ms,
            "retry_responses": list(self.retry_responses),
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


class RequestState:
    """
    State of a logical request: options, retry record and cookies.

    Args:
        url: Target URL
        method: HTTP method (upper-cased)
        headers: Request headers; never mutated by the client
        cloud_client: Per-request options block (dict or CloudClientOptions)
        logger: Object with debug/info/warning/error(msg, *args)
        **transport_options: Passed through to the transport untouched
    """

    def __init__(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        cloud_client: Any = None,
        logger: Any = None,
        **transport_options: Any,
    ):
        _check_transport_options(transport_options)
        self._options: dict[str, Any] = {
            **transport_options,
            "url": url,
            "method": (method or "GET").upper(),
            "headers": dict(headers or {}),
        }
        self.client_options = _coerce_options(cloud_client)
        self.retry = RetryRecord()
        self._logger = logger or structlog.get_logger(__name__)
        self._request_id: Optional[str] = None
        self._request_cookies: Optional[CookieStore] = None
        self._additional_cookies: list[CookieRecord] = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def url(self) -> str:
        return self._options["url"]

    @property
    def method(self) -> str:
        return self._options["method"]

    @property
    def headers(self) -> dict[str, str]:
        return self._options["headers"]

    @property
    def options(self) -> dict[str, Any]:
        """Shallow copy of the current request options."""
        return dict(self._options)

    @property
    def request_id(self) -> str:
        """Value of the ``x-request-id`` header, or a generated id fixed for the request."""
        if self._request_id is None:
            self._request_id = self.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        return self._request_id

    @property
    def request_time(self) -> int:
        if self.retry.start_time and self.retry.end_time:
            return self.retry.end_time - self.retry.start_time
        return 0

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive request header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def set_start_time(self, timestamp: Optional[int] = None) -> None:
        """Mark the start of an attempt; clears the previous end time."""
        self.retry.start_time = now_ms() if timestamp is None else timestamp
        self.retry.end_time = 0

    def set_end_time(self, timestamp: Optional[int] = None) -> None:
        self.retry.end_time = now_ms() if timestamp is None else timestamp

    def add_retry(self, summary: ResponseSummary | Mapping[str, Any], delay_ms: int) -> None:
        """Record one retried attempt and the wait that precedes the next one."""
        if isinstance(summary, ResponseSummary):
            summary = summary.to_json()
        self.retry.retry_responses.append(dict(summary))
        self.retry.retries += 1
        self.retry.retry_wait_ms += delay_ms

    def set_request_options(self, overrides: Mapping[str, Any]) -> None:
        """
        Shallow-merge options for the next attempt.

        A ``cloud_client`` entry is validated and overlaid on the current
        client options instead of being passed to the transport.
        """
        overrides = dict(overrides or {})
        _check_transport_options(overrides)
        if CLIENT_OPTIONS_KEY in overrides:
            self.client_options = _coerce_options(overrides.pop(CLIENT_OPTIONS_KEY)).merged_with(
                self.client_options
            )
        if "headers" in overrides:
            overrides["headers"] = dict(overrides["headers"] or {})
            self._request_cookies = None
        if "method" in overrides:
            overrides["method"] = str(overrides["method"]).upper()
        self._options.update(overrides)

    def merge_client_options(self, defaults: CloudClientOptions) -> None:
        """Fill unset client options from client-wide defaults."""
        self.client_options = self.client_options.merged_with(defaults)

    def set_additional_cookies(self, cookies: Iterable[CookieRecord]) -> None:
        """Client-jar cookies to merge into the next attempt."""
        self._additional_cookies = list(cookies)

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    def request_cookie_store(self) -> CookieStore:
        """Per-request jar holding the cookies of the request's own Cookie header."""
        if self._request_cookies is None:
            store = CookieStore()
            for name, value in parse_cookie_header(self.header("cookie") or ""):
                store.set_cookie(CookieRecord(key=name, value=value), self.url)
            self._request_cookies = store
        return self._request_cookies

    def _merged_cookie_header(self) -> Optional[str]:
        if not self._additional_cookies:
            return None
        explicit = self.request_cookie_store().get_cookies(self.url)
        names = {record.key for record in explicit}
        pairs = [record.to_pair() for record in explicit]
        for record in self._additional_cookies:
            if record.key not in names:
                names.add(record.key)
                pairs.append(record.to_pair())
        return "; ".join(pairs)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_request_config(self) -> dict[str, Any]:
        """
        Config handed to the transport for the next attempt.

        Returns a fresh dict: the stored headers are copied, and merged
        cookies replace any Cookie header under a single ``cookie`` key.
        """
        config = dict(self._options)
        headers = dict(self.headers)
        cookie_header = self._merged_cookie_header()
        if cookie_header:
            headers = {key: value for key, value in headers.items() if key.lower() != "cookie"}
            headers["cookie"] = cookie_header
        config["headers"] = headers
        config["timeout_ms"] = self.client_options.timeout
        return config

    def to_json(self) -> dict[str, Any]:
        """Redacted snapshot of the request attached to the final result."""
        headers = {**self.headers, REQUEST_ID_HEADER: self.request_id}
        snapshot = {
            **self._options,
            "headers": redact_headers(headers),
            CLIENT_OPTIONS_KEY: {
                **self.client_options.to_json(),
                **self.retry.to_json(),
                "request_time": self.request_time,
            },
        }
        return object_to_json(snapshot)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _prefixed(self, message: str, args: tuple) -> str:
        prefix = f"[{self.request_id}] [{self.method}] [{self.url}] "
        if args:
            prefix = prefix.replace("%", "%%")
        return prefix + message

    def log_debug(self, message: str, *args: Any) -> None:
        self._logger.debug(self._prefixed(message, args), *args)

    def log_info(self, message: str, *args: Any) -> None:
        self._logger.info(self._prefixed(message, args), *args)

    def log_warning(self, message: str, *args: Any) -> None:
        self._logger.warning(self._prefixed(message, args), *args)

    def log_error(self, message: str, *args: Any) -> None:
        self._logger.error(self._prefixed(message, args), *args)

    def __repr__(self) -> str:
        return f"RequestState(method={self.method!r}, url={self.url!r}, retries={self.retry.retries})"


def _coerce_options(value: Any) -> CloudClientOptions:
    if value is None:
        return CloudClientOptions()
    if isinstance(value, CloudClientOptions):
        return value
    return CloudClientOptions.model_validate(value)


def _check_transport_options(options: Mapping[str, Any]) -> None:
    """Reject pass-through options that would clash with the per-attempt timeout."""
    clashing = sorted(TIMEOUT_OPTION_KEYS.intersection(options))
    if clashing:
        raise CloudClientError(
            "Attempt timeouts are set through cloud_client={'timeout': <ms>}",
            details={"keys": clashing},
        )
