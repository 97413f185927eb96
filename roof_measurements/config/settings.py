"""
Application settings using Pydantic Settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults for the roof measurement extraction pipeline.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import AnyHttpUrl, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment enumeration."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output format enumeration."""

    JSON = "json"
    CONSOLE = "console"


class ImageDetail(str, Enum):
    """Image detail level requested from the vision model."""

    LOW = "low"
    HIGH = "high"
    AUTO = "auto"


class VisionSettings(BaseSettings):
    """Vision inference service configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="VISION_",
        extra="ignore",
    )

    base_url: AnyHttpUrl = Field(
        default="https://api.openai.com/v1",
        description="OpenAI-compatible API base URL",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="API key for the inference service",
    )
    model: str = Field(
        default="gpt-4o",
        description="Model identifier for vision requests",
    )
    max_tokens: Annotated[int, Field(ge=1, le=32768)] = Field(
        default=2048,
        description="Maximum tokens in the model response",
    )
    temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.1,
        description="Sampling temperature (lower = more deterministic)",
    )
    timeout: Annotated[float, Field(gt=0.0, le=600.0)] = Field(
        default=90.0,
        description="Request timeout in seconds",
    )
    image_detail: ImageDetail = Field(
        default=ImageDetail.HIGH,
        description="Detail level for submitted page images",
    )

    @property
    def base_url_str(self) -> str:
        """Base URL without a trailing slash."""
        return str(self.base_url).rstrip("/")


class RasterizerSettings(BaseSettings):
    """PDF page rendering configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="PDF_",
        extra="ignore",
    )

    scale: Annotated[float, Field(ge=0.5, le=6.0)] = Field(
        default=2.0,
        description="Render scale relative to 72 DPI",
    )
    pages: list[int] = Field(
        default=[1, 9, 10],
        description="One-indexed report pages submitted to the vision model",
    )
    max_file_size_mb: Annotated[int, Field(ge=1, le=200)] = Field(
        default=25,
        description="Maximum PDF file size in megabytes",
    )

    @field_validator("pages")
    @classmethod
    def validate_pages(cls, v: list[int]) -> list[int]:
        """Page numbers are one-indexed."""
        if any(page < 1 for page in v):
            raise ValueError("Page numbers must be 1 or greater")
        return v

    @property
    def max_file_size_bytes(self) -> int:
        """Get maximum file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


class ExtractionSettings(BaseSettings):
    """Extraction pipeline configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="EXTRACTION_",
        extra="ignore",
    )

    prefer_vision: bool = Field(
        default=False,
        description="Render pages and use the vision path by default",
    )
    placeholder_zero_ratio: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.9,
        description="Share of zero numeric fields that flags a vision record as placeholder-like",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        extra="ignore",
    )

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    format: LogFormat = Field(
        default=LogFormat.JSON,
        description="Log output format",
    )
    file_path: Path | None = Field(
        default=None,
        description="Optional rotating log file path",
    )
    file_max_size_mb: Annotated[int, Field(ge=1, le=1000)] = Field(
        default=50,
        description="Maximum log file size in MB",
    )
    file_backup_count: Annotated[int, Field(ge=1, le=20)] = Field(
        default=5,
        description="Number of backup log files to keep",
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def create_log_dir(cls, v: Any) -> Path | None:
        """Ensure the log directory exists when file logging is enabled."""
        if v in (None, ""):
            return None
        path = Path(v) if isinstance(v, str) else v
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

class Settings(BaseSettings):
    """
    Settings for the extraction pipeline, grouped by concern.

    Each section reads its own prefixed variables (VISION_, PDF_,
    EXTRACTION_, LOG_). Top-level values use the APP_ prefix, and a .env
    file in the working directory is honoured.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    name: str = "roof-measurement-extraction"
    version: str = "1.0.0"
    env: Environment = Environment.DEVELOPMENT

    vision: VisionSettings = Field(default_factory=VisionSettings)
    pdf: RasterizerSettings = Field(default_factory=RasterizerSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_production(self) -> bool:
        return self.env == Environment.PRODUCTION


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings()
