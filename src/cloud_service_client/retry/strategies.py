"""
Retry strategies for handling transport failures and eventual consistency.

This module implements the Strategy Pattern for retry decisions. Each
strategy answers one question about a completed attempt ("should this be
retried?") and may refine how: base delay, delay multiple, attempt cap and
option overrides for the next attempt. Anything a strategy does not refine
falls back to the ambient values carried by the AttemptContext.

Built-in strategies:
    1. ErrorStatusCodeStrategy: Server errors (status >= 500)
    2. NetworkErrorStrategy: Failures without any HTTP status
    3. EventuallyConsistentCreateStrategy: Resource not yet visible (404)
    4. EventuallyConsistentUpdateStrategy: 200 whose ETag misses If-Match
    5. EventuallyConsistentDeleteStrategy: Resource still visible (anything but 404)

User-supplied behaviour goes through CustomRetryStrategy.
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Optional

from cloud_service_client.exceptions import CloudClientError
from cloud_service_client.models.enums import StrategyKind
from cloud_service_client.models.retry_models import AttemptContext


class RetryStrategy(ABC):
    """
    Base class for retry strategies.

    Subclasses implement ``should_retry``; the remaining hooks default to
    the ambient values of the context.
    """

    kind: StrategyKind = StrategyKind.CUSTOM

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    async def should_retry(self, context: AttemptContext) -> bool:
        """Whether the attempt described by ``context`` should be retried."""

    async def get_delay(self, context: AttemptContext) -> float:
        """Base delay in ms before the multiple is applied."""
        return context.delay

    async def get_delay_multiple(self, context: AttemptContext) -> float:
        return context.delay_multiple

    async def get_max_retries(self, context: AttemptContext) -> int:
        """Attempt cap; negative means unbounded."""
        return context.max_attempts

    async def get_request_options(self, context: AttemptContext) -> dict[str, Any]:
        """Shallow overrides applied to the options of the next attempt."""
        return {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class ErrorStatusCodeStrategy(RetryStrategy):
    """
    Retries responses with a server error status (>= 500).

    Use case: Overloaded or restarting backends
    """

    kind = StrategyKind.ERROR_STATUS_CODE

    async def should_retry(self, context: AttemptContext) -> bool:
        status = context.status
        return bool(status) and status >= 500


class NetworkErrorStrategy(RetryStrategy):
    """
    Retries attempts that produced no HTTP status at all.

    Covers connection failures, DNS failures and timeouts, i.e. every
    TransportError that carries no response.
    """

    kind = StrategyKind.NETWORK_ERROR

    async def should_retry(self, context: AttemptContext) -> bool:
        return not context.status


class EventuallyConsistentCreateStrategy(RetryStrategy):
    """Retries while a freshly created resource still answers 404."""

    kind = StrategyKind.EVENTUALLY_CONSISTENT_CREATE

    async def should_retry(self, context: AttemptContext) -> bool:
        return context.status == 404


class EventuallyConsistentUpdateStrategy(RetryStrategy):
    """
    Retries while a read does not yet reflect an update.

    Only a 200 for a request carrying ``If-Match`` (other than ``*``) counts:
    it is retried while the response ``ETag`` is none of the requested entity
    tags under weak comparison. Any other status, or a 200 without an ETag,
    is accepted.
    """

    kind = StrategyKind.EVENTUALLY_CONSISTENT_UPDATE

    async def should_retry(self, context: AttemptContext) -> bool:
        if context.status != 200:
            return False

        if_match = context.request_header("if-match")
        etag = context.header("etag")
        if not if_match or not etag or if_match.strip() == "*":
            return False

        expected = {_normalize_etag(tag) for tag in if_match.split(",") if tag.strip()}
        return _normalize_etag(etag) not in expected


class EventuallyConsistentDeleteStrategy(RetryStrategy):
    """Retries while a deleted resource still answers with a status other than 404."""

    kind = StrategyKind.EVENTUALLY_CONSISTENT_DELETE

    async def should_retry(self, context: AttemptContext) -> bool:
        status = context.status
        return bool(status) and status != 404


class CustomRetryStrategy(RetryStrategy):
    """
    Strategy assembled from optional user callables.

    Each callable receives the AttemptContext and may be sync or async.
    Missing callables (or callables returning None) fall back to the
    context defaults: no retry, ambient delay, ambient multiple, ambient
    cap and no option overrides.

    Examples:
        >>> CustomRetryStrategy(should_retry=lambda ctx: ctx.status == 429)
    """

    kind = StrategyKind.CUSTOM

    HOOKS = (
        "should_retry",
        "get_delay",
        "get_delay_multiple",
        "get_max_retries",
        "get_request_options",
    )

    def __init__(
        self,
        should_retry: Optional[Callable[[AttemptContext], Any]] = None,
        get_delay: Optional[Callable[[AttemptContext], Any]] = None,
        get_delay_multiple: Optional[Callable[[AttemptContext], Any]] = None,
        get_max_retries: Optional[Callable[[AttemptContext], Any]] = None,
        get_request_options: Optional[Callable[[AttemptContext], Any]] = None,
        name: Optional[str] = None,
    ):
        self._hooks: dict[str, Optional[Callable[[AttemptContext], Any]]] = {
            "should_retry": should_retry,
            "get_delay": get_delay,
            "get_delay_multiple": get_delay_multiple,
            "get_max_retries": get_max_retries,
            "get_request_options": get_request_options,
        }
        self._name = name

    @property
    def name(self) -> str:
        return self._name or self.kind.value

    @classmethod
    def from_descriptor(cls, descriptor: Mapping[str, Any]) -> "CustomRetryStrategy":
        """
        Build a strategy from a plain mapping of hook names to callables.

        Raises:
            CloudClientError: Unknown keys or non-callable hooks
        """
        unknown = set(descriptor) - set(cls.HOOKS) - {"name"}
        if unknown:
            raise CloudClientError(
                "Unknown keys in retry strategy descriptor",
                details={"keys": sorted(unknown)},
            )
        for hook in cls.HOOKS:
            value = descriptor.get(hook)
            if value is not None and not callable(value):
                raise CloudClientError(
                    f"Retry strategy hook '{hook}' must be callable",
                    details={"hook": hook, "type": type(value).__name__},
                )
        return cls(**dict(descriptor))

    async def _call(self, hook: str, context: AttemptContext, default: Any) -> Any:
        func = self._hooks[hook]
        if func is None:
            return default
        result = func(context)
        if inspect.isawaitable(result):
            result = await result
        return default if result is None else result

    async def should_retry(self, context: AttemptContext) -> bool:
        return bool(await self._call("should_retry", context, False))

    async def get_delay(self, context: AttemptContext) -> float:
        return await self._call("get_delay", context, context.delay)

    async def get_delay_multiple(self, context: AttemptContext) -> float:
        return await self._call("get_delay_multiple", context, context.delay_multiple)

    async def get_max_retries(self, context: AttemptContext) -> int:
        return await self._call("get_max_retries", context, context.max_attempts)

    async def get_request_options(self, context: AttemptContext) -> dict[str, Any]:
        return dict(await self._call("get_request_options", context, {}))

    def __repr__(self) -> str:
        hooks = [hook for hook, func in self._hooks.items() if func is not None]
        return f"CustomRetryStrategy(name={self.name!r}, hooks={hooks})"


def coerce_strategy(value: Any) -> RetryStrategy:
    """
    Turn a user-supplied strategy into a RetryStrategy.

    Accepts RetryStrategy instances, descriptor mappings, and bare callables
    (used as ``should_retry``).
    """
    if isinstance(value, RetryStrategy):
        return value
    if isinstance(value, Mapping):
        return CustomRetryStrategy.from_descriptor(value)
    if callable(value):
        return CustomRetryStrategy(should_retry=value)
    raise CloudClientError(
        "Unsupported retry strategy",
        details={"type": type(value).__name__},
    )


def _normalize_etag(tag: str) -> str:
    tag = tag.strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    return tag.strip('"')
