"""Structured logging configuration for paperless-ngx-client.

Library modules log through ``structlog.get_logger(__name__)`` and never
configure output themselves. Applications (including the bundled CLI) call
:func:`configure_logging` once at startup. Supported output:

- JSON lines, for log shippers
- Colorized console output when attached to a TTY
- logfmt otherwise

All formats carry an ISO 8601 UTC timestamp and any context bound with
:func:`bind_context`.
"""

from __future__ import annotations

import logging
import sys
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    merge_contextvars,
)
from structlog.processors import TimeStamper, add_log_level


if TYPE_CHECKING:
    from structlog.typing import Processor


__all__ = [
    "LogFormat",
    "LogLevel",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
]


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_stdlib_level(self) -> int:
        """Convert to stdlib logging level."""
        level: int = getattr(logging, self.name)
        return level


class LogFormat(StrEnum):
    """Log output format.

    Attributes:
        JSON: One JSON object per line (for machine parsing).
        CONSOLE: Human-readable output; colorized on a TTY, logfmt otherwise.
    """

    JSON = "json"
    CONSOLE = "console"


def bind_context(**values: object) -> None:
    """Bind key-value pairs to every log line in the current context.

    Example:
        >>> bind_context(command="upload")
    """
    bind_contextvars(**values)


def clear_context() -> None:
    """Remove all context bound with :func:`bind_context`."""
    clear_contextvars()


def _create_renderer(log_format: LogFormat, *, colors: bool) -> Processor:
    """Pick the final renderer for the processor chain."""
    if log_format is LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    if colors:
        return structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.LogfmtRenderer(
        key_order=["timestamp", "level", "event"],
        drop_missing=True,
        bool_as_flag=False,
    )


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    *,
    log_format: LogFormat | str = LogFormat.CONSOLE,
    force_colors: bool | None = None,
) -> None:
    """Configure structured logging for an application using this client.

    Args:
        level: Minimum log level, as a LogLevel or its name in any case.
        log_format: Output format.
        force_colors: Force color output on/off for the console format.
            If None, auto-detect from TTY.

    Example:
        >>> configure_logging(level="debug", log_format="json")
    """
    if isinstance(level, str):
        level = LogLevel(level.lower())
    if isinstance(log_format, str):
        log_format = LogFormat(log_format.lower())

    if force_colors is not None:
        use_colors = force_colors
    else:
        use_colors = (
            sys.stderr is not None
            and hasattr(sys.stderr, "isatty")
            and sys.stderr.isatty()
        )

    processors: list[Processor] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
    ]
    # JSON needs the traceback as a string; the console renderer formats it
    if log_format is LogFormat.JSON:
        processors.append(structlog.processors.format_exc_info)
    else:
        processors.append(structlog.dev.set_exc_info)
    processors.append(_create_renderer(log_format, colors=use_colors))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level.to_stdlib_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    # httpx and httpcore log through stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level.to_stdlib_level(),
        force=True,
    )


def get_logger(
    name: str | None = None,
    **initial_context: object,
) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, optionally with bound context.

    Example:
        >>> logger = get_logger(__name__, component="cli")
        >>> logger.info("starting")
    """
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    if initial_context:
        log = log.bind(**initial_context)
    return log
