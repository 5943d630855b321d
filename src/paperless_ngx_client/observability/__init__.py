"""Observability module (structured logging)."""

from __future__ import annotations

from paperless_ngx_client.observability.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "LogFormat",
    "LogLevel",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
]
