"""
Settings for the execution spec layer.

Manifesto:
    The layer itself is pure and stateless, but the process embedding it
    needs a few knobs: how to log, and whether parameter overrides must be
    verified before they are applied. These are read once from the
    environment and cached.

Features:
    - **ExecSpecSettings:** ``EXECSPEC_*`` environment variables and ``.env``
    - **get_settings():** cached instance
    - **clear_settings_cache():** reset between tests

Examples:
    >>> from execspec.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.strict_parameters
    False

Tags:
    settings, configuration, pydantic, environment, execspec

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExecSpecSettings(BaseSettings):
    """Process-wide configuration.

    Fields
    ──────
    log_level          : structlog level
    log_json           : JSON logs (True), console (False), auto (None)
    service_name       : ``service.name`` stamped on every log event
    strict_parameters  : verify override names before applying them
    """

    model_config = SettingsConfigDict(
        env_prefix="EXECSPEC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "execspec"

    # ── Submission ───────────────────────────────────────────────
    strict_parameters: bool = Field(
        default=False,
        description="Reject overrides naming undeclared parameters instead of ignoring them",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v!r}")
        return level


_settings_cache: dict[str, ExecSpecSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ExecSpecSettings:
    """Load, validate, and cache an :class:`ExecSpecSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = ExecSpecSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
