"""Settings management for paperless-ngx-client.

This module provides the Settings class and functions for loading
configuration from YAML files and environment variables.

Example:
    >>> from paperless_ngx_client.config import load_settings
    >>> settings = load_settings()
    >>> print(settings.paperless.url)
    http://localhost:8000
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from paperless_ngx_client.config.exceptions import (
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
)
from paperless_ngx_client.config.schema import LoggingConfig, PaperlessConfig


if TYPE_CHECKING:
    from collections.abc import Sequence


__all__ = [
    "Settings",
    "clear_settings_cache",
    "find_config_file",
    "get_settings",
    "load_settings",
]


# Pattern for ${VAR} and ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _interpolate_env_vars(value: object) -> object:
    """Recursively interpolate ${VAR} and ${VAR:-default} in strings.

    Unset variables without a default become empty strings. Dicts and lists
    are processed recursively; other values are returned unchanged.

    Example:
        >>> os.environ["MY_TOKEN"] = "secret123"
        >>> _interpolate_env_vars("Token ${MY_TOKEN}")
        'Token secret123'
        >>> _interpolate_env_vars("${MISSING:-default_value}")
        'default_value'
    """
    if isinstance(value, str):

        def replace(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            return match.group(2) or ""

        return _ENV_VAR_PATTERN.sub(replace, value)

    if isinstance(value, dict):
        return {k: _interpolate_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [_interpolate_env_vars(item) for item in value]

    return value


class _InterpolatingYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML settings source with ${VAR} interpolation support."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | str | None = None,
    ) -> None:
        # Only pass yaml_file if explicitly provided, otherwise let parent
        # use the value from model_config['yaml_file']
        if yaml_file is not None:
            super().__init__(settings_cls, yaml_file=yaml_file)
        else:
            super().__init__(settings_cls)

    def _read_files(
        self,
        files: Path | str | Sequence[Path | str] | None,
        **kwargs: Any,  # noqa: ANN401
    ) -> dict[str, Any]:
        # Newer pydantic-settings releases pass deep_merge=...
        raw_data = super()._read_files(files, **kwargs)
        interpolated = _interpolate_env_vars(raw_data)
        if not isinstance(interpolated, dict):  # pragma: no cover
            return {}
        return interpolated


class Settings(BaseSettings):
    """Client settings loaded from a YAML file and environment variables.

    Settings are loaded in priority order (highest to lowest):
    1. Constructor arguments
    2. Environment variables (PAPERLESS_CLIENT_*, nested with ``__``)
    3. YAML configuration file
    4. Default values

    Attributes:
        paperless: Paperless-ngx connection settings.
        logging: Logging settings.
    """

    model_config = SettingsConfigDict(
        yaml_file=None,  # No default file - search paths used instead
        yaml_file_encoding="utf-8",
        env_prefix="PAPERLESS_CLIENT_",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    CONFIG_SEARCH_PATHS: ClassVar[list[Path]] = [
        Path("paperless-client.yaml"),
        Path("paperless-client.yml"),
        Path.home() / ".config" / "paperless-client" / "config.yaml",
        Path("/etc/paperless-client/config.yaml"),
    ]

    # Override for yaml_file path (set by load_settings before instantiation)
    _yaml_file_override: ClassVar[Path | str | None] = None

    paperless: PaperlessConfig = Field(default_factory=PaperlessConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def resolve_paperless_credentials(self) -> Settings:
        """Resolve the Paperless URL and token from their possible sources.

        The URL falls back to the PAPERLESS_URL environment variable.

        Token resolution order:
        1. Direct token value (if set)
        2. Token file (if token_file is set)
        3. PAPERLESS_TOKEN environment variable

        Raises:
            ValueError: If token_file is specified but the file doesn't exist.
        """
        if not self.paperless.url:
            env_url = os.environ.get("PAPERLESS_URL")
            if env_url:
                self.paperless.url = env_url.rstrip("/")

        if self.paperless.token:
            return self

        if self.paperless.token_file:
            token_path = self.paperless.token_file
            if not token_path.is_file():
                msg = f"Token file not found: {token_path}"
                raise ValueError(msg)
            self.paperless.token = token_path.read_text().strip()
            return self

        env_token = os.environ.get("PAPERLESS_TOKEN")
        if env_token:
            self.paperless.token = env_token

        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings source priority.

        dotenv is excluded; YAML files are used instead.
        """
        return (
            init_settings,
            env_settings,
            _InterpolatingYamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._yaml_file_override,
            ),
            file_secret_settings,
        )


_cached_settings: Settings | None = None


def find_config_file(config_path: Path | str | None = None) -> Path | None:
    """Find the configuration file.

    Args:
        config_path: Explicit path to config file, or None to search
            default locations.

    Returns:
        Path to config file if found, None otherwise.
    """
    if config_path is not None:
        path = Path(config_path)
        return path if path.is_file() else None

    for search_path in Settings.CONFIG_SEARCH_PATHS:
        if search_path.is_file():
            return search_path

    return None


def load_settings(
    config_path: Path | str | None = None,
    *,
    require_config_file: bool = False,
) -> Settings:
    """Load and validate client settings.

    The loaded settings are cached for subsequent calls to get_settings().

    Args:
        config_path: Path to YAML config file. If None, searches standard
            locations (./paperless-client.yaml, ./paperless-client.yml,
            ~/.config/paperless-client/config.yaml,
            /etc/paperless-client/config.yaml).
        require_config_file: If True, raise error when no config file found.
            An explicit ``config_path`` that does not exist is always an error.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationFileNotFoundError: When the config file cannot be found.
        ConfigurationValidationError: When configuration validation fails.
    """
    global _cached_settings  # noqa: PLW0603

    config_file = find_config_file(config_path)

    if config_file is None and (require_config_file or config_path is not None):
        raise ConfigurationFileNotFoundError(
            path=str(config_path) if config_path else None,
            searched_paths=[str(p) for p in Settings.CONFIG_SEARCH_PATHS],
        )

    Settings._yaml_file_override = config_file  # noqa: SLF001
    try:
        settings = Settings()
    except ValidationError as exc:
        msg = f"Failed to load configuration: {exc}"
        raise ConfigurationValidationError(
            msg,
            errors=[dict(error) for error in exc.errors()],
        ) from exc
    except Exception as exc:
        # Unreadable or malformed YAML
        msg = f"Failed to load configuration: {exc}"
        raise ConfigurationValidationError(msg) from exc
    finally:
        # Reset override to avoid affecting future calls
        Settings._yaml_file_override = None  # noqa: SLF001

    _cached_settings = settings
    return settings


def get_settings() -> Settings:
    """Get the cached settings instance, loading if necessary."""
    global _cached_settings  # noqa: PLW0603

    if _cached_settings is None:
        _cached_settings = load_settings()

    return _cached_settings


def clear_settings_cache() -> None:
    """Clear the cached settings instance (mainly for tests)."""
    global _cached_settings  # noqa: PLW0603
    _cached_settings = None
