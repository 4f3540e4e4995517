"""Report engine settings.

Values come from the process environment, then an optional .env file, then the
defaults below. Export options use the EXPORT_ prefix.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Logging format."""

    JSON = "json"
    TEXT = "text"


class ExportSettings(BaseSettings):
    """Report export configuration."""

    model_config = SettingsConfigDict(env_prefix="EXPORT_")

    file_prefix: str = Field(
        default="cloudflare-analytics",
        description="Product prefix used in generated file names",
    )
    file_extension: str = Field(default="pdf", description="Output file extension")
    report_title: str = Field(
        default="Cloudflare Analytics Report",
        description="Title shown in the document header and footer",
    )
    storage_estimate_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Free space required before an export starts",
    )
    slow_warning_seconds: float = Field(
        default=30.0,
        description="Delay before the one-shot 'taking longer' notification",
    )
    max_distribution_items: int = Field(
        default=50, description="Cap for distribution (pie) charts"
    )
    max_timeseries_points: int = Field(
        default=100, description="Cap for time-series (line) charts"
    )
    output_dir: Path = Field(
        default=Path("./reports"),
        description="Directory used by the local file renderers",
    )

    @field_validator("max_distribution_items", "max_timeseries_points")
    @classmethod
    def validate_caps(cls, v: int) -> int:
        """Ensure reduction caps are at least 1."""
        return max(1, v)

    @field_validator("slow_warning_seconds")
    @classmethod
    def validate_warning_delay(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("slow_warning_seconds must be positive")
        return v

    @field_validator("file_extension")
    @classmethod
    def strip_extension_dot(cls, v: str) -> str:
        return v.lstrip(".").lower()


class Settings(BaseSettings):
    """Process-wide settings: identity, logging and export options."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="report-engine", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        alias="ENV",
        description="Deployment environment",
    )

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.JSON, description="Logging format")

    export: ExportSettings = Field(default_factory=ExportSettings)

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def output_dir(self) -> Path:
        """Resolved directory for locally rendered reports."""
        return self.export.output_dir.expanduser().resolve()


@lru_cache
def get_settings() -> Settings:
    """Settings read once per process; tests clear the cache to re-read."""
    return Settings()
