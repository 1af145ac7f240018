"""
Core primitives shared by every execution spec adapter.

- errors: typed, prefix-tagged error kinds
- constants: well-known api groups, kinds, and label keys
- logging: structlog configuration
- settings: environment-driven configuration
- hashing: deterministic content hashes
"""

from execspec.core.errors import (
    ErrorCategory,
    ErrorContext,
    ExecSpecError,
    InternalServerError,
    InvalidInputError,
    ValidationError,
)
from execspec.core.logging import configure_logging, get_logger
from execspec.core.settings import ExecSpecSettings, clear_settings_cache, get_settings

__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ExecSpecError",
    "InternalServerError",
    "InvalidInputError",
    "ValidationError",
    "configure_logging",
    "get_logger",
    "ExecSpecSettings",
    "clear_settings_cache",
    "get_settings",
]
