"""Configuration management for the memory engine."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseModel):
    """Query engine behaviour."""

    strict_predicates: bool = Field(
        default=False,
        description="Raise on unknown predicate operators instead of excluding the row",
    )


class SeedConfig(BaseModel):
    """Where seed tables are loaded from at startup."""

    source_dir: Path | None = Field(
        default=None, description="Directory holding schema.json and data/<Table>.json"
    )
    source_url: str | None = Field(
        default=None, description="Base URL serving schema.json and data/<Table>.json"
    )
    request_timeout_seconds: float = Field(
        default=30.0, gt=0, description="HTTP timeout when fetching seed tables"
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="REST API port")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="memory_engine", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the memory engine."""

    model_config = SettingsConfigDict(
        env_prefix="MEMORY_ENGINE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    engine: EngineConfig = Field(default_factory=EngineConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
