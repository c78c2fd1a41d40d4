"""
Unit tests for structlog configuration.
"""

import json
import logging

import pytest
import structlog

from cloud_service_client import __version__, configure_logging
from cloud_service_client.session.request_state import RequestState


@pytest.fixture
def restore_logging():
    """Undo global logging configuration after each test."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    structlog.reset_defaults()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def json_lines(out: str) -> list[dict]:
    return [json.loads(line) for line in out.splitlines() if line.strip()]


def test_production_renders_json(restore_logging, capsys, test_settings):
    """Test production output is one JSON object per line with app context."""
    configure_logging("INFO", "production", settings=test_settings)

    structlog.get_logger("tests").info("retrying after %dms", 1000)

    event = json_lines(capsys.readouterr().out)[-1]
    assert event["event"] == "retrying after 1000ms"
    assert event["level"] == "info"
    assert event["app"] == "cloud-service-client (test)"
    assert event["client_version"] == __version__
    assert "timestamp" in event


def test_level_and_environment_from_settings(restore_logging, capsys, test_settings):
    """Test LOG_LEVEL, ENVIRONMENT and APP_NAME drive the configuration."""
    test_settings.LOG_LEVEL = "WARNING"
    test_settings.ENVIRONMENT = "production"
    test_settings.APP_NAME = "inventory-sync"

    configure_logging(settings=test_settings)
    structlog.get_logger("tests").info("not shown")
    structlog.get_logger("tests").warning("retries exhausted")

    events = json_lines(capsys.readouterr().out)
    assert [event["event"] for event in events] == ["retries exhausted"]
    assert events[0]["app"] == "inventory-sync"
    assert logging.getLogger().level == logging.WARNING


def test_explicit_arguments_override_settings(restore_logging, capsys, test_settings):
    """Test explicit level and environment win over Settings."""
    test_settings.LOG_LEVEL = "ERROR"

    configure_logging("DEBUG", "production", settings=test_settings)
    structlog.get_logger("tests").debug("attempt submitted")

    assert json_lines(capsys.readouterr().out)[-1]["event"] == "attempt submitted"


def test_transport_loggers_quieted(restore_logging, test_settings):
    """Test httpx and httpcore stay at WARNING even when the client logs at DEBUG."""
    configure_logging("DEBUG", "development", settings=test_settings)

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING


def test_request_prefix_through_configured_logging(restore_logging, capsys, test_settings):
    """Test request-scoped messages keep their prefix and positional arguments."""
    configure_logging("DEBUG", "production", settings=test_settings)
    state = RequestState("https://cloud.example.com/items", headers={"x-request-id": "req-1"})

    state.log_info("< %s finished request", 200)

    event = json_lines(capsys.readouterr().out)[-1]
    assert event["event"] == "[req-1] [GET] [https://cloud.example.com/items] < 200 finished request"


def test_console_renderer_in_development(restore_logging, capsys, test_settings):
    """Test development output is human readable rather than JSON."""
    configure_logging("DEBUG", "development", settings=test_settings)

    structlog.get_logger("tests").info("< %s finished request", 404)

    out = capsys.readouterr().out
    assert "< 404 finished request" in out
    with pytest.raises(json.JSONDecodeError):
        json.loads(out.splitlines()[-1])
