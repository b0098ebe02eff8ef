"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with sensible defaults.
"""

import os
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from msgrelay.constants import (
    DEFAULT_DEQUEUE_BACKOFF_SECONDS,
    DEFAULT_ENQUEUE_TIMEOUT_SECONDS,
    DEFAULT_HEALTH_TIMEOUT_SECONDS,
    DEFAULT_MAX_BODY_BYTES,
    DEFAULT_POP_TIMEOUT_SECONDS,
    DEFAULT_QUEUE_NAME,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    http_addr: str = ":8080"
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    enqueue_timeout_seconds: float = DEFAULT_ENQUEUE_TIMEOUT_SECONDS
    health_timeout_seconds: float = DEFAULT_HEALTH_TIMEOUT_SECONDS

    # Queue Store
    redis_addr: str = "redis:6379"
    redis_db: int = 0
    queue_name: str = DEFAULT_QUEUE_NAME

    # Worker Configuration
    worker_id: str | None = None
    output_path: str = "/data/processed.log"
    processing_delay_ms: int = 0
    pop_timeout_seconds: int = DEFAULT_POP_TIMEOUT_SECONDS
    dequeue_backoff_seconds: float = DEFAULT_DEQUEUE_BACKOFF_SECONDS
    worker_metrics_port: int = 0

    # Observability
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"
    otel_service_name: str = "msgrelay"
    tracing_enabled: bool = False
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    @property
    def api_host(self) -> str:
        """Host part of HTTP_ADDR; an empty host binds all interfaces."""
        host, _, _ = self.http_addr.rpartition(":")
        return host or "0.0.0.0"

    @property
    def api_port(self) -> int:
        """Port part of HTTP_ADDR."""
        _, _, port = self.http_addr.rpartition(":")
        return int(port)

    @property
    def redis_host(self) -> str:
        host, _, _ = self.redis_addr.rpartition(":")
        return host or "localhost"

    @property
    def redis_port(self) -> int:
        _, sep, port = self.redis_addr.rpartition(":")
        return int(port) if sep else 6379

    @property
    def processing_delay_seconds(self) -> float:
        """Artificial processing delay; non-positive values disable it."""
        return max(0, self.processing_delay_ms) / 1000.0

    @property
    def resolved_worker_id(self) -> str:
        """Worker identifier. Defaults to hostname + PID."""
        return self.worker_id or f"{os.uname().nodename}-{os.getpid()}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
