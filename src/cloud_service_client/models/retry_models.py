"""
Per-attempt inputs and outputs of the retry strategy chain.

These are frozen dataclasses rather than pydantic models: they carry raw
transport objects and are rebuilt for every attempt, never serialized.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from cloud_service_client.models.enums import RetryOutcome, StrategyKind

if TYPE_CHECKING:
    from cloud_service_client.session.response import ResponseEnvelope


@dataclass(frozen=True)
class AttemptContext:
    """
    Everything a strategy may look at when deciding about one attempt.

    Attributes:
        attempts: 1-based number of the attempt that just completed
        max_attempts: Ambient default cap (RetryOptions.count)
        delay: Ambient base delay in ms (possibly replaced by Retry-After)
        delay_multiple: Ambient multiple (forced to 1 by Retry-After)
        response: Raw transport response, None for pure transport failures
        url: URL the attempt was sent to
        options: Request config used for the attempt
        envelope: Normalized view of response/error backing the accessors
    """

    attempts: int
    max_attempts: int
    delay: float
    delay_multiple: float
    response: Any
    url: str
    options: dict[str, Any] = field(default_factory=dict)
    envelope: Optional["ResponseEnvelope"] = field(default=None, repr=False, compare=False)

    @property
    def status(self) -> Optional[int]:
        """HTTP status of the attempt, None when no response was obtained."""
        if self.envelope is None:
            return None
        return self.envelope.status

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive response header lookup."""
        if self.envelope is None:
            return None
        return self.envelope.header(name)

    def request_header(self, name: str) -> Optional[str]:
        """Case-insensitive lookup in the headers the attempt was sent with."""
        headers = self.options.get("headers") or {}
        wanted = name.lower()
        for key, value in headers.items():
            if str(key).lower() == wanted:
                return value
        return None


@dataclass(frozen=True)
class RetryDecision:
    """
    Final answer of the chain for one attempt.

    Attributes:
        should_retry: Whether the coordinator resubmits
        delay_ms: Wait before the next attempt (0 when not retrying)
        extra_request_options: Shallow overrides for the next attempt's options
        outcome: Why the chain answered the way it did
        strategy: Kind of the strategy that matched, if any
    """

    should_retry: bool
    delay_ms: int = 0
    extra_request_options: dict[str, Any] = field(default_factory=dict)
    outcome: RetryOutcome = RetryOutcome.NO_MATCH
    strategy: Optional[StrategyKind] = None

    @classmethod
    def final(
        cls, outcome: RetryOutcome = RetryOutcome.NO_MATCH, strategy: Optional[StrategyKind] = None
    ) -> "RetryDecision":
        """A decision that stops the attempt loop."""
        return cls(should_retry=False, outcome=outcome, strategy=strategy)
