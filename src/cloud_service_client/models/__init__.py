"""
Data models for the cloud service client.

Includes:
- Enums (StrategyKind, RetryOutcome, SameSite)
- Option models (CloudClientOptions, RetryOptions)
- Retry models (AttemptContext, RetryDecision)
- Response summaries (ResponseSummary, ErrorSummary)
"""

from cloud_service_client.models.enums import RetryOutcome, SameSite, StrategyKind
from cloud_service_client.models.options import (
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_RETRY_DELAY_MULTIPLE,
    DEFAULT_TIMEOUT,
    CloudClientOptions,
    RetryOptions,
)
from cloud_service_client.models.response_models import ErrorSummary, ResponseSummary
from cloud_service_client.models.retry_models import AttemptContext, RetryDecision

__all__ = [
    # Enums
    "StrategyKind",
    "RetryOutcome",
    "SameSite",
    # Options
    "CloudClientOptions",
    "RetryOptions",
    "DEFAULT_RETRY_COUNT",
    "DEFAULT_RETRY_DELAY",
    "DEFAULT_RETRY_DELAY_MULTIPLE",
    "DEFAULT_TIMEOUT",
    # Retry models
    "AttemptContext",
    "RetryDecision",
    # Response summaries
    "ResponseSummary",
    "ErrorSummary",
]
