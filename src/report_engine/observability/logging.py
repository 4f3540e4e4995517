"""Structured logging configuration.

Features:
- JSON and text format support
- Export and zone correlation through structlog context variables
- Timed logging of external collaborator calls
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from report_engine.config import LogFormat, LogLevel, get_settings

EXPORT_CONTEXT_KEYS = ("export_id", "zone_id")

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("weasyprint", "fontTools")


def add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add service name, version and environment to log events."""
    settings = get_settings()
    event_dict["service"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment.value
    return event_dict


def _renderers(fmt: LogFormat) -> list[Processor]:
    if fmt == LogFormat.JSON:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


def setup_logging(
    log_level: LogLevel | str | None = None,
    log_format: LogFormat | str | None = None,
) -> None:
    """Configure structlog on top of the standard library.

    Args:
        log_level: Override log level (defaults to settings.log_level)
        log_format: Override log format (defaults to settings.log_format)
    """
    settings = get_settings()
    level = LogLevel(log_level or settings.log_level)
    fmt = LogFormat(log_format or settings.log_format)

    logging.basicConfig(
        level=getattr(logging, level.value),
        stream=sys.stdout,
        format="%(message)s",
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            add_service_context,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderers(fmt),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def current_export_context() -> dict[str, Any]:
    """Export correlation ids bound in the current context."""
    bound = structlog.contextvars.get_contextvars()
    return {key: bound[key] for key in EXPORT_CONTEXT_KEYS if key in bound}


class ExportLogContext:
    """Binds export and zone ids to every log line inside the block.

    Usage:
        async with ExportLogContext(export_id="abc123", zone_id="zone-1"):
            logger.info("Fetching data")  # Includes export_id and zone_id

    Previous bindings are restored on exit, so contexts nest.
    """

    def __init__(self, export_id: str | None = None, zone_id: str | None = None):
        self.bindings = {
            key: value
            for key, value in (("export_id", export_id), ("zone_id", zone_id))
            if value
        }
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "ExportLogContext":
        self._tokens = dict(structlog.contextvars.bind_contextvars(**self.bindings))
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
        self._tokens = {}

    async def __aenter__(self) -> "ExportLogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


@contextmanager
def external_call(
    logger: structlog.stdlib.BoundLogger,
    service: str,
    operation: str,
) -> Iterator[None]:
    """Log start, outcome and duration of one collaborator call.

    Exceptions are logged by type only and re-raised unchanged.
    """
    fields = {"external_service": service, "external_operation": operation}
    logger.debug("External call started", **fields)
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        logger.warning(
            "External call failed",
            **fields,
            error=type(e).__name__,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        raise
    logger.debug(
        "External call completed",
        **fields,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
