"""Development configuration."""
import os

from .base import BaseConfig


class DevelopmentConfig(BaseConfig):
    """Development configuration class."""

    DEBUG = True
    TESTING = False

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL') or 'sqlite:///attendance_otp_dev.db'
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO') == '1'

    # Relaxed limits so a projector can poll the code endpoint
    RATELIMIT_DEFAULT = "1000 per hour"

    LOG_LEVEL = 'DEBUG'
