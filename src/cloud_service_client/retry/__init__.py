"""
Retry policy evaluation.

Given the outcome of an attempt, the strategy chain decides whether to
resubmit, how long to wait and which options to change; the coordinator
runs the attempt loop around it.

Main Components:
    - RetryCoordinator: Attempt loop of one logical request
    - RetryStrategyChain: Ordered, first-match-wins strategy evaluation
    - RetryStrategy: Base class of all strategies
    - CustomRetryStrategy: Strategy built from user callables

Usage:
    >>> from cloud_service_client.retry import RetryCoordinator
    >>> coordinator = RetryCoordinator(transport, cookie_jar)
    >>> response = await coordinator.execute(state)
"""

from cloud_service_client.retry.chain import RetryStrategyChain, get_retry_after_ms
from cloud_service_client.retry.engine import RetryCoordinator
from cloud_service_client.retry.strategies import (
    CustomRetryStrategy,
    ErrorStatusCodeStrategy,
    EventuallyConsistentCreateStrategy,
    EventuallyConsistentDeleteStrategy,
    EventuallyConsistentUpdateStrategy,
    NetworkErrorStrategy,
    RetryStrategy,
    coerce_strategy,
)

__all__ = [
    "RetryCoordinator",
    "RetryStrategyChain",
    "get_retry_after_ms",
    "RetryStrategy",
    "CustomRetryStrategy",
    "ErrorStatusCodeStrategy",
    "NetworkErrorStrategy",
    "EventuallyConsistentCreateStrategy",
    "EventuallyConsistentUpdateStrategy",
    "EventuallyConsistentDeleteStrategy",
    "coerce_strategy",
]
