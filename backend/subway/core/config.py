"""Application configuration."""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_SPLIT_POLICIES = ("overwrite", "subtract")


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "subway-path"
    DEBUG: bool = False

    # Auth Settings (rider tokens carry an "age" claim)
    AUTH_JWT_SECRET: str | None = Field(default=None, validation_alias="SECRET_AUTH_JWT")
    AUTH_JWT_ALGORITHMS: str = "HS256"
    AUTH_JWT_AUDIENCE: str | None = None

    @field_validator("AUTH_JWT_ALGORITHMS", mode="after")
    @classmethod
    def parse_jwt_algorithms(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated JWT algorithms or pass through list."""
        return v if isinstance(v, list) else [algo.strip() for algo in v.split(",") if algo.strip()]

    # Path Settings
    # "overwrite" replaces a split segment's distance/duration with the new segment's values,
    # "subtract" keeps the remainder (old - new)
    SEGMENT_SPLIT_POLICY: str = "overwrite"

    @field_validator("SEGMENT_SPLIT_POLICY", mode="after")
    @classmethod
    def validate_split_policy(cls, v: str) -> str:
        """Validate and normalize the segment split policy."""
        normalized = v.strip().lower()
        if normalized not in VALID_SPLIT_POLICIES:
            msg = f"Invalid SEGMENT_SPLIT_POLICY '{v}'. Must be one of: {', '.join(VALID_SPLIT_POLICIES)}"
            raise ValueError(msg)
        return normalized

    # OpenTelemetry Settings
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = "subway-path"
    OTEL_ENVIRONMENT: str = "production"
    OTEL_EXPORTER_OTLP_TRACES_ENDPOINT: str | None = None
    OTEL_EXPORTER_OTLP_HEADERS: str | None = Field(default=None, validation_alias="SECRET_OTEL_HEADERS")

    # Logging Settings
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        normalized = v.upper()
        valid_levels = logging.getLevelNamesMapping()
        if normalized not in valid_levels:
            msg = f"Invalid LOG_LEVEL '{v}'. Must be one of: {', '.join(sorted(valid_levels.keys()))}"
            raise ValueError(msg)
        return normalized


settings = Settings()


def require_config(*field_names: str) -> None:
    """
    Validate that required configuration fields are set.

    Args:
        *field_names: Names of required configuration fields

    Raises:
        ValueError: If any required field is missing or None

    Example:
        from subway.core.config import require_config
        require_config("AUTH_JWT_SECRET")
    """
    missing = []
    for field in field_names:
        value = getattr(settings, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)

    if missing:
        msg = f"Required configuration missing: {', '.join(missing)}"
        raise ValueError(msg)
