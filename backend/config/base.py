"""Base configuration shared by every environment."""
import os
from datetime import timedelta


class BaseConfig:
    """Base configuration."""

    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_ALGORITHM = 'HS256'

    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"

    # One-time codes
    OTP_STEP_SECONDS = 30
    OTP_DIGITS = 6
    OTP_VALID_WINDOW = int(os.getenv('OTP_VALID_WINDOW', 1))  # steps either side of now
    OTP_SECRET_BYTES = 20

    # Attendance sessions
    ATTENDANCE_SESSION_LIFETIME = timedelta(hours=2)
    ATTENDANCE_TIMEZONE = os.getenv('ATTENDANCE_TIMEZONE', 'UTC')

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
