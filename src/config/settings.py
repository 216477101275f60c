# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDER ===
    llm_provider: str = "google"
    llm_model: str = "gemini-2.5-pro"
    llm_temperature: float = 0.4
    llm_top_k: int = 32
    llm_top_p: float = 0.9
    llm_max_tokens: int = 8192
    google_api_key: str = ""

    # Language the analysis is written in (prompt hint only)
    analysis_language: str = "en"

    # === Frame extraction ===
    frame_count: int | None = None  # None = adaptive from duration
    frame_max_dimension: int = 600
    frame_time_epsilon: float = 0.1
    decoder_backend: str = "opencv"

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["memory", "json", "sqlite"] = "json"
    cache_root: Path = Path("~/.clipsight/cache")
    cache_ttl_days: int = 30
    cache_pressure_retention_days: int = 7
    cache_expiring_window_days: int = 7
    cache_quota_bytes: int | None = None

    # === Projects ===
    projects_enabled: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("frame_count")
    @classmethod
    def validate_frame_count(cls, v: int | None) -> int | None:  # noqa: N805
        if v is not None and v <= 0:
            raise ValueError("frame_count must be > 0 (or unset for adaptive)")
        return v

    @field_validator("frame_max_dimension", "cache_ttl_days")
    @classmethod
    def validate_positive(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("value must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_pressure_retention_days >= self.cache_ttl_days:
            errors.append(
                "CACHE_PRESSURE_RETENTION_DAYS must be < CACHE_TTL_DAYS"
            )

        if self.cache_pressure_retention_days < 0:
            errors.append("CACHE_PRESSURE_RETENTION_DAYS must be >= 0")

        if not 0.0 <= self.llm_top_p <= 1.0:
            errors.append("LLM_TOP_P must be within [0, 1]")

        if self.frame_time_epsilon < 0:
            errors.append("FRAME_TIME_EPSILON must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-request config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
