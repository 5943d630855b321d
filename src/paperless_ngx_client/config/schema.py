"""Configuration schema models for paperless-ngx-client.

This module defines Pydantic models for the configuration sections.
These models are used by the Settings class to validate and type-check
configuration loaded from YAML files and environment variables.
"""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - needed at runtime for Pydantic
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from paperless_ngx_client.observability.logging import LogFormat, LogLevel


__all__ = [
    "ConfigBaseModel",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PaperlessConfig",
]


class ConfigBaseModel(BaseModel):
    """Base model for all configuration sections.

    Uses stricter settings than API models to catch configuration typos:
    - extra="forbid" raises errors for unknown fields
    - validate_default=True ensures defaults are validated
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_default=True,
    )


# ---------------------------------------------------------------------------
# Paperless-ngx Connection
# ---------------------------------------------------------------------------


class PaperlessConfig(ConfigBaseModel):
    """Paperless-ngx connection configuration.

    ``url`` and a token (``token`` or ``token_file``) are required to build
    a client, but may be left unset here: the client reports what is
    missing when it is constructed.

    Attributes:
        url: Base URL of the Paperless-ngx instance.
        token: API authentication token (supports ${VAR} interpolation).
        token_file: Path to a file containing the API token.
        dry_run: Build mutating requests without sending them.
        timeout: Request timeout in seconds.
        max_pages: Page cap for paginated listings (None disables the cap).
        next_url_scheme: Force this scheme on pagination ``next`` URLs.
    """

    url: str | None = Field(
        default=None,
        description="Base URL of the Paperless-ngx instance",
    )
    token: str | None = Field(
        default=None,
        description="API authentication token (supports ${VAR} interpolation)",
    )
    token_file: Path | None = Field(
        default=None,
        description="Path to file containing the API token",
    )
    dry_run: bool = Field(
        default=False,
        description="Build uploads, edits and deletes without sending them",
    )
    timeout: Annotated[
        float,
        Field(gt=0, description="Request timeout in seconds"),
    ] = 30.0
    max_pages: Annotated[
        int | None,
        Field(ge=1, description="Maximum pages fetched per listing"),
    ] = 1000
    next_url_scheme: str | None = Field(
        default=None,
        description="Rewrite pagination cursors to this scheme (e.g. https)",
    )

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Remove trailing slash from URL to avoid double slashes."""
        return v.rstrip("/") if v else v

    @field_validator("next_url_scheme")
    @classmethod
    def validate_scheme(cls, v: str | None) -> str | None:
        """Allow only http and https."""
        if v is None:
            return v
        scheme = v.lower()
        if scheme not in {"http", "https"}:
            msg = f"next_url_scheme must be 'http' or 'https', got {v!r}"
            raise ValueError(msg)
        return scheme


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class LoggingConfig(ConfigBaseModel):
    """Logging configuration.

    Attributes:
        level: Log verbosity level.
        format: Log output format (json or console).
    """

    level: LogLevel = Field(default=LogLevel.INFO)
    format: LogFormat = Field(default=LogFormat.CONSOLE)

    @field_validator("level", "format", mode="before")
    @classmethod
    def lowercase(cls, v: object) -> object:
        """Accept values in any case (e.g. ``INFO``)."""
        return v.lower() if isinstance(v, str) else v
