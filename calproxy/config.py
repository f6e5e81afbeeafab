from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices, ValidationError, field_validator
from typing import Optional, List, Union, Any

from urllib.parse import urlparse

from .constants import (
    ALLOWED_UPSTREAM_SCHEMES,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_CORS_ALLOW_HEADERS,
    DEFAULT_CORS_ALLOW_METHODS,
    DEFAULT_CORS_ALLOW_ORIGINS,
    DEFAULT_HOST,
    DEFAULT_POOL_KEEPALIVE_EXPIRY,
    DEFAULT_POOL_MAX_CONNECTIONS,
    DEFAULT_POOL_MAX_KEEPALIVE_CONNECTIONS,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_KEEP_ALIVE,
    DEFAULT_UPSTREAM_BASE_URL,
    DEFAULT_UPSTREAM_TIMEOUT_SECONDS,
)
from .domain.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
        populate_by_name=True,
    )

    upstream_base_url: str = Field(
        default=DEFAULT_UPSTREAM_BASE_URL,
        validation_alias=AliasChoices("UPSTREAM_BASE_URL"),
    )
    app_name: str = "CalProxy"
    app_version: str = "1.0.0"
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL"))
    log_file_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LOG_FILE_PATH")
    )
    error_log_file_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ERROR_LOG_FILE_PATH")
    )
    log_pretty_console: bool = Field(
        default=False, validation_alias=AliasChoices("LOG_PRETTY_CONSOLE")
    )
    host: str = Field(default=DEFAULT_HOST, validation_alias=AliasChoices("HOST"))
    port: int = Field(default=DEFAULT_PORT, validation_alias=AliasChoices("PORT"))
    reload: bool = Field(default=False, validation_alias=AliasChoices("RELOAD"))
    timeout_keep_alive: int = Field(
        default=DEFAULT_TIMEOUT_KEEP_ALIVE,
        validation_alias=AliasChoices("TIMEOUT_KEEP_ALIVE"),
    )

    # Read-through cache. Both values apply process-wide, never per resource.
    cache_ttl_seconds: float = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        validation_alias=AliasChoices("CACHE_TTL_SECONDS"),
    )
    upstream_timeout_seconds: float = Field(
        default=DEFAULT_UPSTREAM_TIMEOUT_SECONDS,
        validation_alias=AliasChoices("UPSTREAM_TIMEOUT_SECONDS"),
    )

    # Connection pool configuration
    pool_max_connections: int = Field(
        default=DEFAULT_POOL_MAX_CONNECTIONS,
        validation_alias=AliasChoices("POOL_MAX_CONNECTIONS"),
    )
    pool_max_keepalive_connections: int = Field(
        default=DEFAULT_POOL_MAX_KEEPALIVE_CONNECTIONS,
        validation_alias=AliasChoices("POOL_MAX_KEEPALIVE_CONNECTIONS"),
    )
    pool_keepalive_expiry: float = Field(
        default=DEFAULT_POOL_KEEPALIVE_EXPIRY,
        validation_alias=AliasChoices("POOL_KEEPALIVE_EXPIRY"),
    )

    cors_allow_origins: Union[List[str], str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ALLOW_ORIGINS),
        validation_alias=AliasChoices("CORS_ALLOW_ORIGINS"),
    )
    cors_allow_methods: Union[List[str], str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ALLOW_METHODS),
        validation_alias=AliasChoices("CORS_ALLOW_METHODS"),
    )
    cors_allow_headers: Union[List[str], str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ALLOW_HEADERS),
        validation_alias=AliasChoices("CORS_ALLOW_HEADERS"),
    )

    redact_log_fields: Union[List[str], str] = Field(
        default_factory=lambda: ["authorization", "cookie"],
        validation_alias=AliasChoices("REDACT_LOG_FIELDS"),
    )

    @field_validator(
        "cors_allow_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        "redact_log_fields",
    )
    @classmethod
    def parse_comma_separated(cls, v: Union[List[str], str]) -> List[str]:
        """Parse comma-separated string values into lists for configuration fields.

        Handles both string inputs (splitting by commas) and already-list inputs.
        Empty strings are converted to empty lists.

        Args:
            v: Input value which can be a string or list

        Returns:
            List of stripped, non-empty items
        """
        if isinstance(v, str):
            if v.strip() == "":
                return []
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("upstream_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    def __init__(self, **kwargs: Any) -> None:
        """Initialize settings object and perform validation.

        Raises:
            ConfigurationError: If a value cannot be parsed, or the upstream URL or
                numeric limits are invalid
        """
        try:
            super().__init__(**kwargs)
        except ValidationError as e:
            first = e.errors()[0]
            config_key = str(first["loc"][0]).upper() if first["loc"] else None
            raise ConfigurationError(
                f"Invalid value for {config_key}: {first['msg']}",
                config_key=config_key,
                details={"errors": e.error_count()},
            ) from e
        self._validate_upstream()
        self._validate_limits()

    def _validate_upstream(self) -> None:
        """Checks that UPSTREAM_BASE_URL is an absolute http(s) URL."""
        parsed = urlparse(self.upstream_base_url)
        if parsed.scheme.lower() not in ALLOWED_UPSTREAM_SCHEMES or not parsed.hostname:
            raise ConfigurationError(
                "UPSTREAM_BASE_URL must be an absolute http(s) URL.",
                config_key="UPSTREAM_BASE_URL",
                details={"value": self.upstream_base_url},
            )

    def _validate_limits(self) -> None:
        errors = []
        if self.cache_ttl_seconds <= 0:
            errors.append("CACHE_TTL_SECONDS must be positive.")
        if self.upstream_timeout_seconds <= 0:
            errors.append("UPSTREAM_TIMEOUT_SECONDS must be positive.")
        if self.pool_max_connections < 1:
            errors.append("POOL_MAX_CONNECTIONS must be at least 1.")
        if errors:
            raise ConfigurationError("\n".join(errors))
