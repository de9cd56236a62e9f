"""
Configuration module for IdeaVault.

Loads environment variables from .env file and exposes them as typed configuration values.
Uses python-dotenv for loading and provides safe defaults where appropriate.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root
# The .env file should be in the root directory (parent of ideavault/)
_project_root = Path(__file__).parent.parent.parent
_env_path = _project_root / ".env"
load_dotenv(_env_path)


# =============================================================================
# Application Environment
# =============================================================================

# Application environment: "development", "staging", or "production"
# Default: "development" for safe local testing
APP_ENV: str = os.getenv("APP_ENV", "development")

# Enable debug mode for verbose logging (only in development)
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Root log level (DEBUG, INFO, WARNING, ERROR)
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")

# Flask session signing key
# Required for production; a fixed development key otherwise
SECRET_KEY: str = os.getenv("SECRET_KEY", "")


# =============================================================================
# Supabase Configuration
# =============================================================================

# Project URL, e.g. https://abcd1234.supabase.co
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "").rstrip("/")

# Public anon key sent as the "apikey" header on every request
SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")

# Table holding idea rows
SUPABASE_IDEAS_TABLE: str = os.getenv("SUPABASE_IDEAS_TABLE", "ideas")

# Public storage bucket for attached images
SUPABASE_IMAGE_BUCKET: str = os.getenv("SUPABASE_IMAGE_BUCKET", "idea-images")


# =============================================================================
# Request / Upload Limits
# =============================================================================

# HTTP request timeout in seconds
# Default: 30 seconds - generous timeout for slow APIs
REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))

# Largest accepted image attachment in bytes
# Default: 5 MB
MAX_IMAGE_BYTES: int = int(os.getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))


# =============================================================================
# Analytics
# =============================================================================

# Week labels on the dashboard: "legacy" keeps the historical week formula,
# "iso" switches to strict ISO-8601 weeks (labels shift around year boundaries)
WEEK_NUMBERING: str = os.getenv("WEEK_NUMBERING", "legacy").lower()


# =============================================================================
# Helper Functions
# =============================================================================

def is_production() -> bool:
    """Check if running in production environment."""
    return APP_ENV == "production"


def is_development() -> bool:
    """Check if running in development environment."""
    return APP_ENV == "development"


def is_backend_configured() -> bool:
    """Check if the Supabase backend has both URL and key."""
    return bool(SUPABASE_URL and SUPABASE_ANON_KEY)


def validate_config() -> list[str]:
    """
    Validate that required configuration is present for production.
    
    Returns:
        List of missing or invalid configuration keys (empty if all valid).
    """
    errors = []
    
    if is_production():
        if not SUPABASE_URL:
            errors.append("SUPABASE_URL is required in production")
        if not SUPABASE_ANON_KEY:
            errors.append("SUPABASE_ANON_KEY is required in production")
        if not SECRET_KEY:
            errors.append("SECRET_KEY is required in production")
    
    if SUPABASE_URL and not SUPABASE_URL.startswith(("http://", "https://")):
        errors.append("SUPABASE_URL must start with http:// or https://")
    
    if REQUEST_TIMEOUT < 1:
        errors.append("REQUEST_TIMEOUT must be at least 1 second")
    
    if MAX_IMAGE_BYTES < 1:
        errors.append("MAX_IMAGE_BYTES must be at least 1 byte")
    
    if WEEK_NUMBERING not in ("legacy", "iso"):
        errors.append("WEEK_NUMBERING must be 'legacy' or 'iso'")
    
    return errors


def print_config_summary() -> None:
    """Print a summary of current configuration (safe for logs, no secrets)."""
    print(f"  APP_ENV: {APP_ENV}")
    print(f"  DEBUG: {DEBUG}")
    print(f"  LOG_LEVEL: {LOG_LEVEL}")
    print(f"  SECRET_KEY: {'***' if SECRET_KEY else '(not set)'}")
    print(f"  SUPABASE_URL: {SUPABASE_URL or '(not set)'}")
    print(f"  SUPABASE_ANON_KEY: {'***' if SUPABASE_ANON_KEY else '(not set)'}")
    print(f"  SUPABASE_IDEAS_TABLE: {SUPABASE_IDEAS_TABLE}")
    print(f"  SUPABASE_IMAGE_BUCKET: {SUPABASE_IMAGE_BUCKET}")
    print(f"  REQUEST_TIMEOUT: {REQUEST_TIMEOUT}s")
    print(f"  MAX_IMAGE_BYTES: {MAX_IMAGE_BYTES}")
    print(f"  WEEK_NUMBERING: {WEEK_NUMBERING}")
