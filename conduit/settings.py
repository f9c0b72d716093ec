"""
conduit.settings - Configuration Resolver

Single source of truth for adapter configuration.
Loads from a .env file and environment variables using pydantic-settings.

Settings precedence (highest wins):
    process environment (CONDUIT_* variables)
        |
    .env file in the working directory (local override file)
        |
    field defaults (optional tunables only)

There is no cached module-level instance. The process entry
point calls resolve() once and passes the result down; calling resolve()
again is the only way to pick up a changed environment.

Usage:
    >>> from conduit.settings import resolve
    >>> settings = resolve()
    >>> settings.api_url
    'https://tasks.example.com/api'
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_core import PydanticCustomError
from pydantic_settings import BaseSettings, SettingsConfigDict

from conduit import __version__
from conduit.errors import ConfigurationError

ENV_PREFIX = "CONDUIT_"

# Error types that mean "the operator did not supply this value"
_MISSING_ERROR_TYPES = frozenset({"missing", "empty_value"})

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConduitSettings(BaseSettings):
    """Adapter configuration loaded from .env / environment variables.

    All CONDUIT_* prefixed env vars are loaded automatically. Instances are
    frozen: once constructed they are fully valid and never change.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix=ENV_PREFIX,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    # -- Required --------------------------------------------------------------
    api_url: str
    api_token: SecretStr

    # -- HTTP ------------------------------------------------------------------
    timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = f"conduit/{__version__}"

    # -- Retry (idempotent reads only) -----------------------------------------
    max_attempts: int = Field(default=3, ge=1)
    backoff_base_ms: int = Field(default=200, ge=0)
    backoff_max_ms: int = Field(default=5000, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)

    # -- Pagination ------------------------------------------------------------
    page_size: int = Field(default=100, ge=1, le=1000)
    max_pages: int = Field(default=50, ge=1)

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Validators ------------------------------------------------------------

    @field_validator("api_url", "api_token", mode="before")
    @classmethod
    def _reject_empty(cls, value: Any) -> Any:
        """Treat empty and whitespace-only values the same as absent ones."""
        if isinstance(value, str) and not value.strip():
            raise PydanticCustomError("empty_value", "value is empty")
        return value.strip() if isinstance(value, str) else value

    @field_validator("api_url")
    @classmethod
    def _canonical_url(cls, value: str) -> str:
        """Require an http(s) URL and drop trailing slashes."""
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise PydanticCustomError("invalid_url", "must be an http(s) URL")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise PydanticCustomError(
                "invalid_log_level", "must be one of {levels}", {"levels": ", ".join(_LOG_LEVELS)}
            )
        return level

    # -- Helpers ---------------------------------------------------------------

    def backoff_delay(self, attempt: int) -> float:
        """Return the backoff delay in seconds before retry number *attempt* (0-based)."""
        delay_ms = min(
            self.backoff_base_ms * (self.backoff_multiplier**attempt),
            self.backoff_max_ms,
        )
        return delay_ms / 1000


def env_name(field_name: str) -> str:
    """Return the environment variable that feeds *field_name*."""
    return f"{ENV_PREFIX}{field_name.upper()}"


def _describe(error: dict[str, Any]) -> tuple[str, str]:
    """Turn one pydantic error into (env var name, operator-facing message)."""
    loc = error.get("loc") or ("?",)
    name = env_name(str(loc[0]))
    if error.get("type") in _MISSING_ERROR_TYPES:
        return name, f"{name} is required"
    return name, f"{name} is invalid: {error.get('msg', 'invalid value')}"


def resolve(env_file: str | None = ".env", **overrides: Any) -> ConduitSettings:
    """
    Load and validate the adapter configuration.

    Args:
        env_file: Local override file read in addition to the environment
            (None disables it). Environment variables take precedence.
        **overrides: Explicit field values, mainly for tests and embedding.

    Returns:
        A fully valid, frozen ConduitSettings.

    Raises:
        ConfigurationError: Naming every missing or invalid parameter.

    Example:
        >>> resolve(env_file=None)
        Traceback (most recent call last):
        ...
        conduit.errors.ConfigurationError: CONDUIT_API_URL is required; CONDUIT_API_TOKEN is required
    """
    try:
        return ConduitSettings(_env_file=env_file, **overrides)
    except ValidationError as e:
        problems = [_describe(error) for error in e.errors()]
        parameters = tuple(dict.fromkeys(name for name, _ in problems))
        message = "; ".join(message for _, message in problems)
        raise ConfigurationError(message, parameters=parameters) from e


__all__ = ["ENV_PREFIX", "ConduitSettings", "env_name", "resolve"]
