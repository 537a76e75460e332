"""Configuration management with pydantic-settings for the Snyk issues client.

Loads, in order of precedence:
1. Environment variables (highest priority)
2. .env file in the working directory
3. Default values (lowest priority)

The API token is held as SecretStr so it never shows up in reprs or logs.

References:
- Pydantic Settings: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "DEFAULT_BASE_URL",
    "SnykConfig",
    "get_config",
    "reset_config",
]

DEFAULT_BASE_URL = "https://api.snyk.io"


class SnykConfig(BaseSettings):
    """Configuration for the Snyk issues client.

    Attributes:
        snyk_api_token: Snyk API token (stored as SecretStr for security)
        snyk_base_url: REST API root, without the /rest prefix
        snyk_read_timeout: Read timeout in seconds for a single page request
        snyk_log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        snyk_log_format: Log format (json for production, text for development)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,  # Use defaults instead of empty strings
        case_sensitive=False,  # SNYK_API_TOKEN = snyk_api_token
        validate_default=True,
        frozen=True,  # Immutable after creation
        extra="ignore",
    )

    snyk_api_token: SecretStr = Field(
        ...,
        description="Snyk API token, sent as 'authorization: TOKEN <value>'",
    )

    snyk_base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Snyk API base URL (e.g., https://api.snyk.io or https://api.eu.snyk.io)",
    )

    snyk_read_timeout: float = Field(
        default=30.0,
        ge=5.0,
        le=300.0,
        description="Read timeout in seconds for one page request",
    )

    snyk_log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    snyk_log_format: str = Field(
        default="json",
        pattern="^(json|text)$",
        description="Log format: json (production), text (development)",
    )

    @field_validator("snyk_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and strip the trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"SNYK_BASE_URL must start with http:// or https://: {v}")
        return v.rstrip("/")

    @field_validator("snyk_log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


@lru_cache(maxsize=1)
def get_config() -> SnykConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        ValidationError: If SNYK_API_TOKEN is missing or a value is invalid.
    """
    return SnykConfig()


def reset_config() -> None:
    """Reset configuration singleton for testing.

    Warning:
        Only use in test code. Production code should not reset config.
    """
    get_config.cache_clear()
