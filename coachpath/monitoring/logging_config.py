"""Logging configuration.

structlog events and plain ``logging.getLogger`` records go through one
stdout handler whose ``ProcessorFormatter`` renders both the same way:
JSON lines when ``json_logs`` is set, console output otherwise.
"""

import logging
import sys
from typing import Optional

import structlog

from ..config.settings import Settings

NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")

_handler: Optional[logging.Handler] = None


def setup_logging(settings: Settings) -> logging.Handler:
    """Setup structured logging from application settings.

    Safe to call more than once; the previously installed handler is replaced.
    """
    global _handler

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Applied to structlog events and to foreign (stdlib) records alike
    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _service_context(settings),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if settings.json_logs:
        render_processors = [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer formats exc_info itself
        render_processors = [structlog.dev.ConsoleRenderer()]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *render_processors,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    if _handler is not None:
        root_logger.removeHandler(_handler)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    _handler = handler

    # Set specific logger levels
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler


def _service_context(settings: Settings):
    """Processor stamping every record with the service name and environment."""

    def add_service_context(logger, method_name, event_dict):
        event_dict.setdefault("service", settings.app_name)
        event_dict.setdefault("environment", settings.environment)
        return event_dict

    return add_service_context
