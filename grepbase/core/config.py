"""
Configuration management for grepbase.

This module centralizes environment-driven configuration using Pydantic's
`BaseSettings`. The HTTP service and the console entry point consume the shared
`settings` instance; library callers pass explicit arguments to
`Grepbase.create` instead.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from pydantic import AnyUrl, Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GREPBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # General application settings
    API_TITLE: str = "grepbase API"
    API_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = Field("INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    HOST: str = "127.0.0.1"
    PORT: int = 8080

    # Storage / processing
    BASE_DIR: Path = Field(default_factory=lambda: Path("data"))
    TOPIC: str = "general knowledge"
    WORKERS: PositiveInt = 1
    IDLE_SLEEP_SECONDS: float = Field(0.75, ge=0.05)
    TAG_SCHEMA_PATH: Optional[Path] = None
    TAG_SCHEMA_OVERRIDE: bool = False
    CUSTOM_PROCESSING_PROMPTS: Dict[str, str] = Field(default_factory=dict)

    # LLM provider configuration
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[AnyUrl] = None
    ANTHROPIC_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    CLAUDE_MODEL: str = "claude-3-5-sonnet-latest"
    MAX_TOKENS: int = 8192
    TEMPERATURE: float = 0.2

    # Monitoring / tracing
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[AnyUrl] = None
    OTEL_EXPORTER_OTLP_HEADERS: Optional[str] = None
    ENABLE_METRICS_ENDPOINT: bool = True

    @field_validator("LOG_LEVEL", mode="before")
    def _upper_level(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("CUSTOM_PROCESSING_PROMPTS", mode="before")
    def _empty_prompts(cls, value: Optional[Dict[str, str]]) -> Dict[str, str]:
        return value or {}


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()


# Singleton-style settings instance for modules that prefer direct access.
settings = get_settings()
