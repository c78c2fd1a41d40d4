"""
Option models for the ``cloud_client`` block of a request.

The same models describe per-request options and client-wide defaults.
Merging follows one rule: values explicitly set on the request win over the
defaults, and custom retry strategies from both sides are concatenated
(request strategies first).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_DELAY = 1000
DEFAULT_RETRY_DELAY_MULTIPLE = 2.0
DEFAULT_TIMEOUT = 60000


class RetryOptions(BaseModel):
    """
    Ambient retry configuration handed to every strategy as its defaults.

    Strategies may override delay, multiple and cap through their own
    callables; these values are only what they fall back to.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    count: int = Field(
        default=DEFAULT_RETRY_COUNT,
        ge=-1,
        description="Default max attempts before giving up (-1 = unbounded)"
    )
    delay: int = Field(
        default=DEFAULT_RETRY_DELAY,
        ge=0,
        description="Base delay in milliseconds before the first retry"
    )
    delay_multiple: float = Field(
        default=DEFAULT_RETRY_DELAY_MULTIPLE,
        ge=0,
        description="Factor applied to the delay for each further attempt"
    )
    strategies: list[Any] = Field(
        default_factory=list,
        description="Custom strategies (CustomRetryStrategy or descriptor dicts)"
    )

    def merged_with(self, defaults: "RetryOptions") -> "RetryOptions":
        """Overlay explicitly set values on ``defaults``, concatenating strategies."""
        values = {name: getattr(defaults, name) for name in defaults.model_fields_set}
        values.update({name: getattr(self, name) for name in self.model_fields_set})
        values["strategies"] = [*self.strategies, *defaults.strategies]
        return RetryOptions(**values)


class CloudClientOptions(BaseModel):
    """
    Namespaced client options, supplied per request or as client-wide defaults.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    timeout: int = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Milliseconds before the transport aborts an attempt"
    )
    retry: RetryOptions = Field(default_factory=RetryOptions)
    eventually_consistent_create: bool = Field(
        default=False,
        description="Poll while a freshly created resource still answers 404"
    )
    eventually_consistent_update: bool = Field(
        default=False,
        description="Poll while an updated resource does not reflect the new entity tag"
    )
    eventually_consistent_delete: bool = Field(
        default=False,
        description="Poll while a deleted resource still answers with anything but 404"
    )

    def merged_with(self, defaults: "CloudClientOptions") -> "CloudClientOptions":
        """Overlay explicitly set values on ``defaults``."""
        values = {name: getattr(defaults, name) for name in defaults.model_fields_set}
        values.update({name: getattr(self, name) for name in self.model_fields_set})
        values["retry"] = self.retry.merged_with(defaults.retry)
        return CloudClientOptions(**values)

    def to_json(self) -> dict[str, Any]:
        """Serializable form; strategies are intent, not outcome, and are dropped."""
        return self.model_dump(exclude={"retry": {"strategies"}})
