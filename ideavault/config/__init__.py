"""
Configuration module.

Handles environment variables, backend credentials, and application settings.
"""

from ideavault.config.config import (
    APP_ENV,
    DEBUG,
    LOG_LEVEL,
    SECRET_KEY,
    SUPABASE_URL,
    SUPABASE_ANON_KEY,
    SUPABASE_IDEAS_TABLE,
    SUPABASE_IMAGE_BUCKET,
    REQUEST_TIMEOUT,
    MAX_IMAGE_BYTES,
    WEEK_NUMBERING,
    is_production,
    is_development,
    is_backend_configured,
    validate_config,
    print_config_summary,
)
from ideavault.config.log_config import setup_logging

__all__ = [
    "APP_ENV",
    "DEBUG",
    "LOG_LEVEL",
    "SECRET_KEY",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_IDEAS_TABLE",
    "SUPABASE_IMAGE_BUCKET",
    "REQUEST_TIMEOUT",
    "MAX_IMAGE_BYTES",
    "WEEK_NUMBERING",
    "is_production",
    "is_development",
    "is_backend_configured",
    "validate_config",
    "print_config_summary",
    "setup_logging",
]
