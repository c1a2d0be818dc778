"""
Centralized settings for bulkops.

One validated, cached settings object holds the values the pipeline reads
from the environment: logging, the token selector labels and the default
descriptor file used by the CLI.

Tags:
    bulkops, configuration, settings, pydantic, caching

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BulkOpsSettings(BaseSettings):
    """bulkops configuration.

    All fields can be set via ``BULKOPS_*`` environment variables (e.g.
    ``BULKOPS_LOG_LEVEL=DEBUG``) or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="BULKOPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    # ── Token selector ───────────────────────────────────────────
    token_none_label: str = Field(default="None", description="Label of the empty token option")
    argument_label_template: str = Field(
        default="{argument} input",
        description="Label of a positional token option; {argument} is the argument name",
    )

    # ── Descriptors ──────────────────────────────────────────────
    descriptor_file: str | None = Field(default=None, description="YAML file loaded by the CLI")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level

    @field_validator("log_format")
    @classmethod
    def _normalize_format(cls, value: str) -> str:
        fmt = value.lower()
        if fmt not in {"json", "console"}:
            raise ValueError(f"Unsupported log format: {value}")
        return fmt


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, BulkOpsSettings] = {}


def get_settings(*, _force_reload: bool = False) -> BulkOpsSettings:
    """Load, validate, and cache a :class:`BulkOpsSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = BulkOpsSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
