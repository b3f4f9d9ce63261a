"""Structured logging for the emulator using structlog.

Every log line written while a request is being served carries that
request's ``activity_id``, bound by the request logging middleware.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict

SERVICE_NAME = "docdb-emulator"


def add_service(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def bind_request_context(activity_id: str, method: str, path: str) -> None:
    """Start a fresh logging context for the request being served."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(activity_id=activity_id, method=method, path=path)


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Configure structured logging for the emulator.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: 'json' for one object per line, 'console' for a terminal
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger("emulator").setLevel(level)

    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_service,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # The request logging middleware already covers what uvicorn's access log says.
    if level > logging.DEBUG:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
