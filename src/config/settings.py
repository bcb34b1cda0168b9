# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings. CLI flags are
applied on top as overrides through load_settings().
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from codereview.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDER ===
    llm_default_provider: str = "ollama"
    llm_default_model: str = "llama3.2"
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.2

    ollama_base_url: str = "http://localhost:11434"
    openai_api_key: str = ""
    openai_base_url: str = ""

    # === Gateway ===
    gateway_timeout_s: float | None = 120.0

    # === Review input ===
    review_file_pattern: str = "*.cs"
    review_excluded_dirs: str = "bin,obj"
    review_max_files: int = 3
    review_recursive: bool = True

    # === Batch ===
    batch_concurrency: int = 1
    batch_deadline_s: float | None = None

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # === Telemetry ===
    telemetry_service_name: str = "CodeReviewAssistant"
    telemetry_console: bool = False
    telemetry_spans_path: Path | None = None
    telemetry_metrics_path: Path | None = None

    @field_validator("llm_default_provider")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.gateway_timeout_s is not None and self.gateway_timeout_s <= 0:
            errors.append("GATEWAY_TIMEOUT_S must be > 0")

        if self.batch_concurrency < 1:
            errors.append("BATCH_CONCURRENCY must be >= 1")

        if self.batch_deadline_s is not None and self.batch_deadline_s <= 0:
            errors.append("BATCH_DEADLINE_S must be > 0")

        if self.review_max_files < 1:
            errors.append("REVIEW_MAX_FILES must be >= 1")

        if not self.review_file_pattern.strip():
            errors.append("REVIEW_FILE_PATTERN must not be empty")

        if self.llm_max_tokens < 1:
            errors.append("LLM_MAX_TOKENS must be >= 1")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def review_excluded_dirs_list(self) -> list[str]:
        """Parse comma-separated excluded directory names."""
        return [d.strip() for d in self.review_excluded_dirs.split(",") if d.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Overrides whose value is None are ignored so that unset CLI flags fall
    back to the environment.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    return Settings(**values)  # type: ignore[arg-type]
