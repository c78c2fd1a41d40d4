"""Unit test fixtures (contexts and envelopes).

Provides builders for the per-attempt objects the strategy chain works on.
"""

from typing import Any, Optional

import pytest

from cloud_service_client.models.retry_models import AttemptContext
from cloud_service_client.session.response import ResponseEnvelope


def build_context(
    status: Optional[int] = None,
    headers: Optional[dict[str, str]] = None,
    request_headers: Optional[dict[str, str]] = None,
    attempts: int = 1,
    max_attempts: int = 3,
    delay: float = 1000,
    delay_multiple: float = 2,
    error: Optional[BaseException] = None,
    with_envelope: bool = True,
) -> AttemptContext:
    raw: Any = None
    if status is not None:
        raw = {"status": status, "headers": headers or {}}
    return AttemptContext(
        attempts=attempts,
        max_attempts=max_attempts,
        delay=delay,
        delay_multiple=delay_multiple,
        response=raw,
        url="https://api.example.com/resources/1",
        options={"method": "GET", "headers": request_headers or {}},
        envelope=ResponseEnvelope(raw, error) if with_envelope else None,
    )


@pytest.fixture
def context_factory():
    """Factory fixture for AttemptContext.

    Usage:
        def test_something(context_factory):
            context = context_factory(status=503, attempts=2)
    """
    return build_context
