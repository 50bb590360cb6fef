"""Environment-aware configuration with validation.

This module provides centralized configuration management using Pydantic Settings.
All environment variables are validated at startup to fail fast on misconfigurations,
before any call to the Bitmovin API is made.

The settings object is immutable. Load it once with ``load_settings()`` and pass it
to the pipeline explicitly.
"""

from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

REQUIRED_ENV_VARS = (
    "BITMOVIN_API_KEY",
    "BITMOVIN_S3_BUCKET_NAME",
    "BITMOVIN_S3_ACCESS_KEY",
    "BITMOVIN_S3_SECRET_KEY",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The API key and the S3 output credentials are required; everything else
    has a default matching the behaviour of the original exercises.

    Example:
        >>> settings = load_settings()
        >>> settings.poll_interval_seconds
        5.0
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Bitmovin API
    api_key: str = Field(
        alias="BITMOVIN_API_KEY",
        description="Bitmovin API key",
    )
    tenant_org_id: str | None = Field(
        default=None,
        alias="BITMOVIN_TENANT_ORG_ID",
        description="Organisation id for multi-tenant accounts",
    )
    api_debug: bool = Field(
        default=False,
        alias="BITMOVIN_API_DEBUG",
        description="Log every SDK request and response",
    )

    # S3 Output
    s3_bucket_name: str = Field(
        alias="BITMOVIN_S3_BUCKET_NAME",
        description="S3 bucket receiving the encoded assets",
    )
    s3_access_key: str = Field(
        alias="BITMOVIN_S3_ACCESS_KEY",
        description="Access key for the output bucket",
    )
    s3_secret_key: str = Field(
        alias="BITMOVIN_S3_SECRET_KEY",
        description="Secret key for the output bucket",
    )

    # Polling
    poll_interval_seconds: float = Field(
        default=5.0,
        ge=0.0,
        le=300.0,
        alias="POLL_INTERVAL_SECONDS",
        description="Delay before each status check",
    )
    poll_backoff_multiplier: float = Field(
        default=1.0,
        ge=1.0,
        le=10.0,
        alias="POLL_BACKOFF_MULTIPLIER",
        description="Growth factor of the poll delay (1.0 = fixed interval)",
    )
    poll_max_interval_seconds: float = Field(
        default=60.0,
        ge=0.0,
        alias="POLL_MAX_INTERVAL_SECONDS",
        description="Upper bound for the poll delay",
    )
    wait_timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        alias="WAIT_TIMEOUT_SECONDS",
        description="Give up waiting after this many seconds (unset = wait forever)",
    )

    # Feature Flags
    enable_sprites: bool = Field(
        default=False,
        alias="ENABLE_SPRITES",
        description="Run the sprite generation stage for variants that define one",
    )
    wait_for_manifest: bool = Field(
        default=False,
        alias="WAIT_FOR_MANIFEST",
        description="Wait for the DASH manifest to finish after starting it",
    )
    cleanup_on_failure: bool = Field(
        default=False,
        alias="CLEANUP_ON_FAILURE",
        description="Delete already created resources when assembly fails",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )

    @field_validator("api_key", "s3_bucket_name", "s3_access_key", "s3_secret_key", mode="before")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only credentials."""
        if v is None or not str(v).strip():
            raise ValueError("must not be empty")
        return str(v).strip()

    @field_validator("tenant_org_id", mode="before")
    @classmethod
    def blank_tenant_is_none(cls, v: str | None) -> str | None:
        """Treat an empty tenant id as unset."""
        if v is not None and not str(v).strip():
            return None
        return v


def load_settings(**overrides: object) -> Settings:
    """Load and validate settings from the environment.

    Args:
        **overrides: Values keyed by environment variable name, taking
            precedence over the environment (mainly for tests)

    Returns:
        Validated, immutable Settings instance

    Raises:
        ConfigurationError: If a required variable is missing or a value is invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            problems.append(f"{location}: {error['msg']}")
        raise ConfigurationError(
            f"Invalid configuration: {'; '.join(problems)}",
            details={"errors": problems, "required": list(REQUIRED_ENV_VARS)},
        ) from e
