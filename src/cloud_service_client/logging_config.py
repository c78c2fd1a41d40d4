"""Structured logging configuration using structlog.

The client never gates log levels itself: RequestState hands every line to
its logger and verbosity is decided here, once per process, from Settings
(``CLOUD_CLIENT_LOG_LEVEL``, ``CLOUD_CLIENT_ENVIRONMENT``) or explicit
arguments. Production renders one JSON object per line; development renders
readable console output.

Usage:
    from cloud_service_client import configure_logging

    configure_logging()                      # from environment settings
    configure_logging("DEBUG", "production")  # explicit
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from cloud_service_client import __version__
from cloud_service_client.config import Settings, get_settings

# Loggers of the transport stack; their per-connection chatter stays at WARNING
TRANSPORT_LOGGERS = ("httpx", "httpcore", "asyncio")


def app_context(app_name: str) -> Processor:
    """Processor adding the application name and client version to every event."""

    def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app_name)
        event_dict.setdefault("client_version", __version__)
        return event_dict

    return add_app_context


def configure_logging(
    log_level: Optional[str] = None,
    environment: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Configure structlog for the client and the application embedding it.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: settings.LOG_LEVEL)
        environment: ``production`` selects JSON output (default: settings.ENVIRONMENT)
        settings: Settings to read defaults and APP_NAME from (default: get_settings())
    """
    settings = settings or get_settings()
    log_level = log_level or settings.LOG_LEVEL
    environment = environment or settings.ENVIRONMENT
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"

    # Request-scoped lines pass printf-style arguments ("< %s finished request", 200)
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        app_context(settings.APP_NAME),
    ]

    renderer: Processor
    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )
    handler.setLevel(log_level_int)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level_int, logging.WARNING))

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if is_production else "console",
    )
