"""
Studio configuration: all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


def _csv(value: str) -> list[str]:
    return [part.strip().lower() for part in value.split(",") if part.strip()]


class Settings:
    """Application settings from environment variables."""

    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    DB_POOL_MIN_SIZE: int = int(os.environ.get("DB_POOL_MIN_SIZE", "2"))
    DB_POOL_MAX_SIZE: int = int(os.environ.get("DB_POOL_MAX_SIZE", "20"))
    DB_COMMAND_TIMEOUT_SECONDS: float = float(os.environ.get("DB_COMMAND_TIMEOUT_SECONDS", "60"))

    # Auth
    JWT_SECRET: str = os.environ.get("JWT_SECRET", "")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_HOURS: int = 24
    LOGIN_URL: str = os.environ.get("LOGIN_URL", "/auth/login")

    # Only these email domains may use the app (comma-separated)
    ALLOWED_EMAIL_DOMAINS: list[str] = _csv(
        os.environ.get(
            "ALLOWED_EMAIL_DOMAINS",
            "humanrestorationproject.org,orchardview.org,reeths-puffer.org,muskegonisd.org",
        )
    )

    # Generation
    ANTHROPIC_API_KEY: str = os.environ.get("ANTHROPIC_API_KEY", "")
    GENERATION_MODEL: str = os.environ.get("GENERATION_MODEL", "claude-sonnet-4-5-20250929")
    LLM_TIMEOUT_SECONDS: float = float(os.environ.get("LLM_TIMEOUT_SECONDS", "120"))
    LLM_MAX_TOKENS: int = int(os.environ.get("LLM_MAX_TOKENS", "8192"))

    # Editing
    SAVE_DEBOUNCE_SECONDS: float = float(os.environ.get("SAVE_DEBOUNCE_SECONDS", "1.0"))
    HISTORY_MAX_DEPTH: int = int(os.environ.get("HISTORY_MAX_DEPTH", "50"))
    HISTORY_COALESCE_SECONDS: float = float(os.environ.get("HISTORY_COALESCE_SECONDS", "1.0"))

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


# Singleton instance
settings = Settings()

# Validate required settings (skip in test mode)
_testing = os.environ.get("TESTING", "").lower() == "true"

if not _testing:
    if not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL environment variable is required")
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET environment variable is required")
    if not settings.ANTHROPIC_API_KEY:
        raise RuntimeError("ANTHROPIC_API_KEY environment variable is required")
