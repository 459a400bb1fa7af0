"""Application configuration helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Type


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    PROJECT_ROOT = Path(__file__).resolve().parent.parent
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-secret-change-me")
    DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{PROJECT_ROOT / 'meeting_rooms.db'}"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Credentials
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret-change-me-before-deploying")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", "24"))
    OTP_TTL_MINUTES = int(os.getenv("OTP_TTL_MINUTES", "10"))

    # Admission control for the public booking endpoint
    RATELIMIT_ENABLED = _env_flag("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    BOOKING_RATE_LIMIT = os.getenv("BOOKING_RATE_LIMIT", "5 per minute")

    # Expiry sweep
    SWEEPER_ENABLED = _env_flag("SWEEPER_ENABLED", True)
    SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "300"))
    SWEEP_RETENTION_HOURS = int(os.getenv("SWEEP_RETENTION_HOURS", "2"))

    # Checkout links embedded in QR codes
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000")

    # Outbound email
    EMAIL_PROVIDER = os.getenv("EMAIL_PROVIDER", "console")
    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY", "")
    FROM_EMAIL = os.getenv("FROM_EMAIL", "no-reply@meeting-rooms.local")
    FROM_NAME = os.getenv("FROM_NAME", "Meeting Room System")
    ADMIN_EMAILS = [email.strip() for email in os.getenv("ADMIN_EMAILS", "").split(",") if email.strip()]
    NOTIFICATIONS_ASYNC = _env_flag("NOTIFICATIONS_ASYNC", True)
    NOTIFICATION_WORKERS = int(os.getenv("NOTIFICATION_WORKERS", "2"))

    DEFAULT_PAGE_SIZE = 10


class DevelopmentConfig(BaseConfig):
    """Configuration tweaks for local development."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Temp-file database configuration for pytest."""

    DEBUG = False
    TESTING = True
    DATABASE_URL = f"sqlite:///{Path(tempfile.gettempdir()) / 'meeting_rooms_test.db'}"
    JWT_SECRET_KEY = "testing-jwt-secret-at-least-32-bytes-long"
    SWEEPER_ENABLED = False
    NOTIFICATIONS_ASYNC = False
    EMAIL_PROVIDER = "console"
    ADMIN_EMAILS = ["facilities@example.com"]
    PUBLIC_BASE_URL = "http://rooms.test"


class ProductionConfig(BaseConfig):
    """Production hardened configuration."""

    DEBUG = False
    TESTING = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


def get_config() -> Type[BaseConfig]:
    """Return the configuration class based on FLASK_ENV."""

    env = os.getenv("FLASK_ENV", "development").lower()
    if env == "production":
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
