"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from typing import Any, Iterable, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from cloud_service_client.config import Settings
from cloud_service_client.transport.base_transport import BaseTransport


class ScriptedTransport(BaseTransport):
    """Transport replaying a fixed script of response dicts and exceptions.

    Each attempt consumes the next entry; the last entry repeats once the
    script runs out. Every config handed to ``submit`` is recorded.
    """

    def __init__(self, script: Iterable[Any]):
        self.script = list(script)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    async def submit(self, config: dict[str, Any]) -> Any:
        self.requests.append(config)
        outcome = self.script[min(len(self.requests), len(self.script)) - 1]
        if isinstance(outcome, BaseException):
            raise outcome
        # Fresh dict per attempt so attached provenance never leaks into the script
        return {**outcome, "headers": dict(outcome.get("headers") or {})}

    def get_response_url(self, raw_response: Any, state) -> str:
        return raw_response.get("url") or state.url

    async def close(self) -> None:
        self.closed = True


def make_response(status: int = 200, headers: Optional[dict] = None, **extra: Any) -> dict[str, Any]:
    """Response dict as understood by the default ResponseEnvelope."""
    return {
        "status": status,
        "status_text": httpx.codes.get_reason_phrase(status),
        "headers": headers or {},
        **extra,
    }


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults, independent of the environment.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.RETRY_COUNT = 5
    """
    return Settings(
        _env_file=None,
        # === Application ===
        APP_NAME="cloud-service-client (test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        # === Transport ===
        TIMEOUT_MS=5000,
        # === Retry & Backoff ===
        RETRY_COUNT=3,
        RETRY_DELAY_MS=1000,
        RETRY_DELAY_MULTIPLE=2.0,
        # === Eventual consistency ===
        EVENTUALLY_CONSISTENT_CREATE=False,
        EVENTUALLY_CONSISTENT_UPDATE=False,
        EVENTUALLY_CONSISTENT_DELETE=False,
        # === Cookies ===
        HANDLE_COOKIES=False,
    )


@pytest.fixture
def scripted_transport():
    """Factory fixture building a ScriptedTransport.

    Usage:
        def test_something(scripted_transport, response_factory):
            transport = scripted_transport([response_factory(503), response_factory(200)])
    """
    return ScriptedTransport


@pytest.fixture
def response_factory():
    """Factory fixture building response dicts (status, status_text, headers)."""
    return make_response


@pytest.fixture
def request_logger() -> MagicMock:
    """Logger double with the debug/info/warning/error(msg, *args) interface."""
    return MagicMock(spec=["debug", "info", "warning", "error"])


@pytest.fixture
def mock_sleep():
    """Patch asyncio.sleep in the retry coordinator so backoff never waits."""
    with patch("cloud_service_client.retry.engine.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep
