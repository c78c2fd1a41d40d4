"""
Ordered strategy chain turning one attempt into a RetryDecision.

Order is fixed: error status, network error, custom strategies (in the order
given), then the enabled eventually consistent strategies. The first
strategy that asks for a retry wins; the attempt cap and backoff are then
resolved from that strategy alone.
"""

import math
from dataclasses import replace
from typing import TYPE_CHECKING, Iterable, Optional

import structlog

from cloud_service_client.models.enums import RetryOutcome
from cloud_service_client.models.options import CloudClientOptions
from cloud_service_client.models.retry_models import AttemptContext, RetryDecision
from cloud_service_client.retry.strategies import (
    ErrorStatusCodeStrategy,
    EventuallyConsistentCreateStrategy,
    EventuallyConsistentDeleteStrategy,
    EventuallyConsistentUpdateStrategy,
    NetworkErrorStrategy,
    RetryStrategy,
    coerce_strategy,
)
from cloud_service_client.session.response import ResponseEnvelope

if TYPE_CHECKING:
    from cloud_service_client.session.request_state import RequestState

logger = structlog.get_logger(__name__)

# Longest single backoff wait (about 24.8 days)
MAX_DELAY_MS = 2**31 - 1


def get_retry_after_ms(envelope: ResponseEnvelope) -> Optional[int]:
    """
    Delay requested by a ``Retry-After`` header, in ms.

    Only integer seconds are honoured; HTTP-dates, zero and negative values
    are ignored.
    """
    value = envelope.header("retry-after")
    if value is None:
        return None
    try:
        seconds = int(str(value).strip())
    except ValueError:
        return None
    if seconds <= 0:
        return None
    return seconds * 1000


def backoff_delay_ms(base_delay: float, multiple: float, attempts: int) -> int:
    """
    ``base_delay * multiple ** (attempts - 1)`` rounded to whole ms.

    Capped at MAX_DELAY_MS, so unbounded retry counts keep producing a finite
    wait once the exponent outgrows a float.
    """
    try:
        delay = float(base_delay * multiple ** (attempts - 1))
    except OverflowError:
        delay = math.inf if base_delay > 0 else 0.0
    if math.isnan(delay):
        return 0
    return int(round(min(max(delay, 0.0), MAX_DELAY_MS)))


class RetryStrategyChain:
    """
    Evaluates strategies in order for one completed attempt.

    Attributes:
        strategies: Strategies in evaluation order
    """

    def __init__(self, strategies: Iterable[RetryStrategy]):
        self.strategies = list(strategies)

    @classmethod
    def from_options(cls, options: CloudClientOptions) -> "RetryStrategyChain":
        """Build the chain for the given (already merged) client options."""
        strategies: list[RetryStrategy] = [ErrorStatusCodeStrategy(), NetworkErrorStrategy()]
        strategies.extend(coerce_strategy(strategy) for strategy in options.retry.strategies)
        if options.eventually_consistent_create:
            strategies.append(EventuallyConsistentCreateStrategy())
        if options.eventually_consistent_update:
            strategies.append(EventuallyConsistentUpdateStrategy())
        if options.eventually_consistent_delete:
            strategies.append(EventuallyConsistentDeleteStrategy())
        return cls(strategies)

    async def evaluate(
        self,
        envelope: ResponseEnvelope,
        context: AttemptContext,
        state: Optional["RequestState"] = None,
    ) -> RetryDecision:
        """
        Decide whether and how to retry the attempt described by ``context``.

        Args:
            envelope: Normalized response/error of the attempt
            context: Attempt number and ambient retry values
            state: Request state used for prefixed logging, if any

        Returns:
            RetryDecision; ``outcome`` tells a retry from a non-match and from
            an exhausted cap

        Raises:
            Whatever a strategy hook raises; user errors are not masked
        """
        log_debug = state.log_debug if state is not None else logger.debug

        if context.envelope is None:
            context = replace(context, envelope=envelope)

        retry_after = get_retry_after_ms(envelope)
        if retry_after is not None:
            log_debug("Retry-After header requests a delay of %dms", retry_after)
            context = replace(context, delay=retry_after, delay_multiple=1)

        for strategy in self.strategies:
            matched = await strategy.should_retry(context)
            log_debug("retry strategy %s answered %s", strategy.name, matched)
            if not matched:
                continue

            # Every hook is resolved before the gate, even when the cap is reached
            multiple = await strategy.get_delay_multiple(context)
            max_retries = int(await strategy.get_max_retries(context))
            base_delay = await strategy.get_delay(context)
            extra_options = await strategy.get_request_options(context)

            if max_retries >= 0 and context.attempts >= max_retries:
                return RetryDecision.final(RetryOutcome.EXHAUSTED, strategy.kind)

            return RetryDecision(
                should_retry=True,
                delay_ms=backoff_delay_ms(base_delay, multiple, context.attempts),
                extra_request_options=dict(extra_options or {}),
                outcome=RetryOutcome.RETRY,
                strategy=strategy.kind,
            )

        return RetryDecision.final(RetryOutcome.NO_MATCH)

    def __len__(self) -> int:
        return len(self.strategies)
