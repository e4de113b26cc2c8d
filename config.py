"""Configuration management for goto."""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Storage settings
    db_path: Optional[str] = Field(
        default=None,
        description="Persistence log path (in-memory only if not specified)"
    )

    persist_updates: bool = Field(
        default=True,
        description="Append overwrites to the log too, not only first registrations"
    )

    fsync: bool = Field(
        default=False,
        description="fsync the log after every append"
    )

    # Server settings
    host: str = Field(
        default="127.0.0.1",
        description="Host to bind to"
    )

    port: int = Field(
        default=8080,
        description="Port to listen on"
    )

    cors_origins: List[str] = Field(
        default=["*"],
        description="Origins allowed to call the API from a browser"
    )

    # Shortener settings
    id_length: int = Field(
        default=5,
        ge=1,
        le=64,
        description="Length of identifiers derived from target URLs"
    )

    max_payload_bytes: int = Field(
        default=256,
        ge=1,
        description="Maximum size of a target URL request body"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
