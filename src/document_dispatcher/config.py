"""Configuration settings for the document dispatcher."""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TARGET_URL = "https://ismp.crpt.ru/api/v3/lk/documents/create"


class DispatchConfig(BaseModel):
    """Rate limit for the release scheduler.

    At most ``limit`` deliveries are started per ``window_seconds``.
    Fixed for the lifetime of a dispatcher.
    """

    model_config = ConfigDict(frozen=True)

    limit: int = Field(
        default=50,
        gt=0,
        description="Maximum deliveries released per window",
    )
    window_seconds: float = Field(
        default=1.0,
        gt=0.0,
        description="Length of the release window in seconds",
    )

    @property
    def window(self) -> timedelta:
        """Get the window as a timedelta."""
        return timedelta(seconds=self.window_seconds)


class TransportConfig(BaseModel):
    """Configuration for the HTTP delivery transport."""

    url: str = Field(
        default=DEFAULT_TARGET_URL,
        description="Endpoint every document is POSTed to",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Per-request timeout (connect and read)",
    )
    content_type: str = Field(
        default="application/json",
        description="Content-Type header sent with each payload",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers sent with each request",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Nested values use a double underscore, e.g. ``DISPATCH__LIMIT=10``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Dispatch & Transport
    # --------------------------------------------------------------------------
    dispatch: DispatchConfig = Field(
        default_factory=DispatchConfig,
        description="Release rate configuration",
    )
    transport: TransportConfig = Field(
        default_factory=TransportConfig,
        description="Delivery endpoint configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
