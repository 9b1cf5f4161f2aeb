"""structlog setup for the ``scratch_org`` package.

The library only emits events. Nothing is installed until an application (the
``scratch-org`` CLI, or a caller embedding the package) asks for it with
``setup_logging``, and then only on the ``scratch_org`` logger, so a host
application's root logging is left alone.
"""

import logging
import os
import sys
from typing import Literal, TextIO

import structlog
from structlog.types import Processor

PACKAGE_LOGGER = "scratch_org"
_HANDLER_NAME = "scratch_org.console"


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(sort_keys=False)
    return structlog.dev.ConsoleRenderer(
        colors=False, exception_formatter=structlog.dev.plain_traceback
    )


def setup_logging(
    service_name: str | None = None,
    log_format: Literal["json", "console"] | None = None,
    log_level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route ``scratch_org.*`` events to ``stream`` (stderr by default).

    Unset arguments fall back to ``SERVICE_NAME``, ``LOG_FORMAT`` and
    ``LOG_LEVEL``. Calling it again replaces the previous handler.
    """
    service_name = service_name or os.getenv("SERVICE_NAME", "scratch-org")
    log_format = log_format or os.getenv("LOG_FORMAT", "console")
    log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in package_logger.handlers[:]:
        if existing.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, log_level, logging.INFO))
    package_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=False),
            structlog.contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(log_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)

    get_logger(__name__).debug(
        "logging_initialized", log_format=log_format, log_level=log_level
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_id(request_id: str) -> None:
    """Attach a request ID to every event logged in the current context."""
    structlog.contextvars.bind_contextvars(request_id=request_id)


def get_request_id() -> str | None:
    """Request ID bound by the caller, if any."""
    return structlog.contextvars.get_contextvars().get("request_id")


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
