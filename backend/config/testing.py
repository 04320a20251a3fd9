"""Testing configuration."""
from datetime import timedelta

from .base import BaseConfig


class TestingConfig(BaseConfig):
    """Testing configuration class."""

    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'

    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # JWT Configuration
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-bytes'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)

    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False

    # Pinned so tests do not depend on the environment
    OTP_VALID_WINDOW = 1
    ATTENDANCE_TIMEZONE = 'UTC'

    LOG_LEVEL = 'WARNING'
