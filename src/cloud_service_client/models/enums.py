"""
Enumerations for cloud service client data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class StrategyKind(str, Enum):
    """
    Variant tag of a retry strategy.

    Built-in kinds are evaluated in a fixed order around the CUSTOM ones:
    error status and network error first, then custom strategies, then the
    opt-in eventually consistent kinds.
    """

    ERROR_STATUS_CODE = "error_status_code"
    NETWORK_ERROR = "network_error"
    CUSTOM = "custom"
    EVENTUALLY_CONSISTENT_CREATE = "eventually_consistent_create"
    EVENTUALLY_CONSISTENT_UPDATE = "eventually_consistent_update"
    EVENTUALLY_CONSISTENT_DELETE = "eventually_consistent_delete"


class RetryOutcome(str, Enum):
    """
    Result of evaluating the strategy chain for one attempt.

    RETRY means a strategy matched and the cap allows another attempt.
    NO_MATCH means no strategy asked for a retry (terminal).
    EXHAUSTED means a strategy matched but the max-retry cap was reached (terminal).
    """

    RETRY = "retry"
    NO_MATCH = "no_match"
    EXHAUSTED = "exhausted"


class SameSite(str, Enum):
    """SameSite attribute of a cookie. Stored for fidelity, never enforced."""

    STRICT = "strict"
    LAX = "lax"
    NONE = "none"
    UNSET = "unset"

    @classmethod
    def parse(cls, value: str | None) -> "SameSite":
        """Map a raw attribute value to a member, UNSET when unrecognized."""
        if not value:
            return cls.UNSET
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNSET
