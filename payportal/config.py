# payportal/config.py
"""Configuration for the PayPortal credential security service
Secure defaults for the client portal; secrets come from the environment
"""
import os
from datetime import timedelta


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration with secure defaults"""
    # Security settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()

    # Session configuration
    SESSION_COOKIE_SECURE = True  # HTTPS only
    SESSION_COOKIE_HTTPONLY = True  # No JS access
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = timedelta(days=1)

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///payportal.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # Credential hashing
    PASSWORD_PEPPER = os.environ.get('PASSWORD_PEPPER')
    PEPPER_REQUIRED = _env_flag('PEPPER_REQUIRED')
    BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', '10'))

    # Password policy
    PASSWORD_MIN_LENGTH = 8
    PASSWORD_MAX_LENGTH = 128
    PASSWORD_HISTORY_COUNT = 5

    # Password recovery
    RECOVERY_CODE_TTL_MINUTES = 15
    RECOVERY_CODE_IN_RESPONSE = False


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    # Allow HTTP in dev
    SESSION_COOKIE_SECURE = False
    # Recovery codes are echoed back while no mail transport exists
    RECOVERY_CODE_IN_RESPONSE = True


class ProductionConfig(Config):
    """Production configuration with enhanced security"""
    DEBUG = False
    TESTING = False

    # Checked by create_app so that importing this module never fails
    SECRET_KEY = os.environ.get('SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True

    SECRET_KEY = 'testing-secret-key'
    SESSION_COOKIE_SECURE = False

    # Use in-memory database for tests
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    PASSWORD_PEPPER = 'testing-pepper'
    PEPPER_REQUIRED = False

    # Faster hashing for tests (bcrypt minimum)
    BCRYPT_ROUNDS = 4

    RECOVERY_CODE_IN_RESPONSE = True


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
