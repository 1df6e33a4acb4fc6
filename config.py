"""
Centralized configuration for Liquid Law.

This module provides a single source of truth for all configuration settings,
with environment variable support and validation.
"""

import os
from pathlib import Path
from typing import Optional


class Config:
    """Base configuration class with common settings."""

    # Application
    APP_NAME = "Liquid Law"
    APP_VERSION = "1.0.0"

    # Flask
    TESTING = os.environ.get('TESTING', 'false').lower() == 'true'
    DEBUG = os.environ.get('DEBUG', 'false').lower() == 'true'

    # Database
    DATABASE_URL = os.environ.get('DATABASE_URL', 'sqlite:///liquid_law.db')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Recount
    # Move a law back to `open` when a recount fails after taking the latch.
    RECOUNT_COMPENSATE_ON_FAILURE = os.environ.get('RECOUNT_COMPENSATE_ON_FAILURE', 'true').lower() == 'true'

    # Notifications (Mandrill)
    MANDRILL_API_KEY = os.environ.get('MANDRILL_API_KEY', '')
    MANDRILL_API_URL = os.environ.get('MANDRILL_API_URL', 'https://mandrillapp.com/api/1.0')
    MANDRILL_FROM_EMAIL = os.environ.get('MANDRILL_FROM_EMAIL', 'no-reply@liquidlaw.org')
    MANDRILL_FROM_NAME = os.environ.get('MANDRILL_FROM_NAME', 'Liquid Law')
    MANDRILL_TIMEOUT = int(os.environ.get('MANDRILL_TIMEOUT', 30))  # seconds

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'json')  # 'json' or 'text'
    LOG_FILE = os.environ.get('LOG_FILE', None)  # None = stdout only
    AUDIT_LOG_FILE = os.environ.get('AUDIT_LOG_FILE', None)

    @classmethod
    def validate(cls):
        """Validate configuration values."""
        errors = []

        if cls.LOG_FORMAT not in ('json', 'text'):
            errors.append("LOG_FORMAT must be 'json' or 'text'")

        if cls.MANDRILL_TIMEOUT < 1:
            errors.append("MANDRILL_TIMEOUT must be >= 1")

        if not cls.MANDRILL_API_URL.startswith(('http://', 'https://')):
            errors.append("MANDRILL_API_URL must be an http(s) URL")

        if errors:
            raise ValueError(f"Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

        return True

    @classmethod
    def ensure_directories(cls):
        """Ensure required directories exist."""
        if cls.LOG_FILE:
            Path(cls.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        if cls.AUDIT_LOG_FILE:
            Path(cls.AUDIT_LOG_FILE).parent.mkdir(parents=True, exist_ok=True)


class DevelopmentConfig(Config):
    """Development environment configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing environment configuration."""
    TESTING = True
    DATABASE_URL = 'sqlite:///:memory:'  # In-memory database for tests
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ENGINE_OPTIONS = {}
    MANDRILL_API_KEY = 'test-mandrill-key'


class ProductionConfig(Config):
    """Production environment configuration."""
    DEBUG = False
    TESTING = False

    @classmethod
    def validate(cls):
        """Additional validation for production."""
        super().validate()
        if not cls.MANDRILL_API_KEY:
            raise ValueError("MANDRILL_API_KEY environment variable must be set in production")
        if cls.DATABASE_URL.startswith('sqlite:///'):
            import warnings
            warnings.warn("SQLite is not recommended for production. Use PostgreSQL or MySQL.")
        return True


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(env: Optional[str] = None) -> type[Config]:
    """
    Get configuration class for specified environment.

    Args:
        env: Environment name ('development', 'testing', 'production')
             If None, uses FLASK_ENV environment variable

    Returns:
        Configuration class for the environment
    """
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')

    config_class = config.get(env, config['default'])
    config_class.validate()
    config_class.ensure_directories()

    return config_class
