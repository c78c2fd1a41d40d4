"""
Redacted, body-free summaries of responses.

Summaries are what the client keeps in retry history and attaches to the
final result, so they must stay small and must never leak credentials.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorSummary(BaseModel):
    """Name and message of a transport error, nothing else."""

    name: Optional[str] = Field(default=None, description="Exception class name")
    message: Optional[str] = Field(default=None, description="Exception message")


class ResponseSummary(BaseModel):
    """
    JSON form of a ResponseEnvelope.

    Every field is optional: a pure transport failure has no status or
    headers, and request_time is only known once the attempt finished.
    """

    status: Optional[int] = Field(default=None, description="HTTP status code")
    status_text: Optional[str] = Field(default=None, description="HTTP reason phrase")
    headers: Optional[dict[str, str]] = Field(
        default=None,
        description="Response headers with Authorization/Cookie redacted"
    )
    request_time: Optional[int] = Field(
        default=None,
        ge=0,
        description="Milliseconds the transport took for the attempt"
    )
    error: Optional[ErrorSummary] = Field(default=None)

    def to_json(self) -> dict[str, Any]:
        """Drop absent fields so snapshots only carry what was observed."""
        return self.model_dump(exclude_none=True)
