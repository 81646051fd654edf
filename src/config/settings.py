# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for cache locations, TTLs, HTTP behaviour, enabled
sources and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

KNOWN_SOURCES: tuple[str, ...] = ("sundell", "vanderlee", "nilcoalescing")


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache ===
    cache_root: Path = Path("~/.swift-patterns/cache")
    cache_memory_max_entries: int = 500
    intent_memory_max_entries: int = 200
    cache_default_ttl: int = 86400
    rss_cache_ttl: int = 3600
    article_cache_ttl: int = 86400
    intent_cache_ttl: int = 43200
    cache_sweep_interval: int = 600

    # === HTTP ===
    http_timeout: float = 10.0
    http_user_agent: str = "swift-patterns/1.0 (RSS Reader)"
    fetch_concurrency: int = 5

    # === Sources ===
    enabled_sources: str = ",".join(KNOWN_SOURCES)
    fetch_full_articles: bool = False

    # === Tools ===
    default_min_quality: int = 60
    max_results: int = 10

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("default_min_quality")
    @classmethod
    def validate_min_quality(cls, v: int) -> int:  # noqa: N805
        if not 0 <= v <= 100:
            raise ValueError("default_min_quality must be within 0..100")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Reject non-positive sizes/TTLs and unknown source ids."""
        errors: list[str] = []

        positive = {
            "CACHE_MEMORY_MAX_ENTRIES": self.cache_memory_max_entries,
            "INTENT_MEMORY_MAX_ENTRIES": self.intent_memory_max_entries,
            "CACHE_DEFAULT_TTL": self.cache_default_ttl,
            "RSS_CACHE_TTL": self.rss_cache_ttl,
            "ARTICLE_CACHE_TTL": self.article_cache_ttl,
            "INTENT_CACHE_TTL": self.intent_cache_ttl,
            "FETCH_CONCURRENCY": self.fetch_concurrency,
            "MAX_RESULTS": self.max_results,
        }
        for name, value in positive.items():
            if value <= 0:
                errors.append(f"{name} must be > 0")

        if self.cache_sweep_interval < 0:
            errors.append("CACHE_SWEEP_INTERVAL must be >= 0 (0 disables)")

        if self.http_timeout <= 0:
            errors.append("HTTP_TIMEOUT must be > 0")

        unknown = [s for s in self.enabled_sources_list if s not in KNOWN_SOURCES]
        if unknown:
            errors.append(f"ENABLED_SOURCES contains unknown ids: {', '.join(unknown)}")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def enabled_sources_list(self) -> list[str]:
        """Parse comma-separated enabled source ids."""
        return [s.strip() for s in self.enabled_sources.split(",") if s.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
