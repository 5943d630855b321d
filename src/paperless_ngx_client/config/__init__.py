"""Configuration module for paperless-ngx-client.

Configuration is managed with Pydantic settings and can come from a YAML
file, environment variables, or both. YAML values support ${VAR} and
${VAR:-default} syntax for environment variable interpolation.

Example:
    >>> from paperless_ngx_client.config import load_settings
    >>> from paperless_ngx_client.api import PaperlessClient
    >>>
    >>> settings = load_settings()
    >>> client = PaperlessClient.from_settings(settings.paperless)
"""

from __future__ import annotations

from paperless_ngx_client.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
)
from paperless_ngx_client.config.schema import (
    ConfigBaseModel,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PaperlessConfig,
)
from paperless_ngx_client.config.settings import (
    Settings,
    clear_settings_cache,
    find_config_file,
    get_settings,
    load_settings,
)


__all__ = [
    "ConfigBaseModel",
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PaperlessConfig",
    "Settings",
    "clear_settings_cache",
    "find_config_file",
    "get_settings",
    "load_settings",
]
