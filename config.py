"""
Flask Configuration Management

This module provides environment-specific configuration classes for development, testing,
and production deployments of the university records application. It defines the database
connection string, security keys, logging settings and the request pipeline layout.

The configuration system supports:
- SQLite by default, any SQLAlchemy URI through DATABASE_URL
- Environment variable management through python-dotenv (loaded by the app factory)
- Ordered pipeline behavior selection (PIPELINE_BEHAVIORS)
- Page-level transaction management toggle (PAGE_TRANSACTIONS_ENABLED)
"""

import os
import logging
from typing import Optional


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


class Config:
    """
    Base configuration class containing common settings for all environments.

    Environment-specific classes inherit from this class and override only what
    differs for their deployment target.
    """

    # Flask Core Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-in-production'

    # Database Configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///contoso_university.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_RECORD_QUERIES = False
    SQLALCHEMY_ECHO = _env_flag('SQLALCHEMY_ECHO')

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    LOG_JSON = _env_flag('LOG_JSON')

    # Request pipeline, outermost behavior first
    PIPELINE_BEHAVIORS = ('transaction', 'logging')

    # Wrap every page handler in a request-scoped transaction
    PAGE_TRANSACTIONS_ENABLED = True

    @staticmethod
    def init_app(app):
        """
        Initialize application with configuration-specific settings.

        Called after the Flask application is created and configured. Subclasses
        override this to perform environment-specific initialization.

        Args:
            app: Flask application instance
        """
        pass

    @classmethod
    def validate_required_config(cls) -> bool:
        """
        Validate that all required configuration variables are set.

        Returns:
            bool: True if all required configuration is valid, False otherwise
        """
        required_vars = ['SECRET_KEY', 'SQLALCHEMY_DATABASE_URI']

        for var in required_vars:
            value = getattr(cls, var)
            if not value or (isinstance(value, str) and value == 'dev-key-change-in-production'):
                logging.warning(f"Configuration warning: {var} not properly set")
                return False

        return True


class DevelopmentConfig(Config):
    """
    Development environment configuration.

    Enables debug mode and verbose logging for local development.
    """

    DEBUG = True
    TESTING = False

    SQLALCHEMY_RECORD_QUERIES = True

    LOG_LEVEL = 'DEBUG'

    @staticmethod
    def init_app(app):
        """Initialize development-specific settings."""
        Config.init_app(app)

        app.logger.info("Development configuration loaded")
        if not DevelopmentConfig.validate_required_config():
            app.logger.warning("Some configuration values are using defaults")


class TestingConfig(Config):
    """
    Testing environment configuration.

    Uses an in-memory SQLite database so every test session starts from an
    empty schema.
    """

    TESTING = True
    DEBUG = False

    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite://'

    SECRET_KEY = 'test-secret-key-for-testing-only'

    # Reduce log noise during testing
    LOG_LEVEL = 'WARNING'

    @staticmethod
    def init_app(app):
        """Initialize testing-specific settings."""
        Config.init_app(app)
        app.logger.info("Testing configuration loaded")


class ProductionConfig(Config):
    """
    Production environment configuration.

    Emits JSON log records and refuses to start with the development secret key.
    """

    DEBUG = False
    TESTING = False

    LOG_LEVEL = 'INFO'
    LOG_JSON = _env_flag('LOG_JSON', 'true')

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 3600,
    }

    @staticmethod
    def init_app(app):
        """Initialize production-specific settings."""
        Config.init_app(app)

        if app.config['SECRET_KEY'] == 'dev-key-change-in-production':
            app.logger.error("Production SECRET_KEY not configured properly")
            raise RuntimeError("Production SECRET_KEY must be set")


# Configuration mapping for environment-based selection
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: Optional[str] = None) -> type:
    """
    Get configuration class based on environment name.

    Args:
        config_name: Name of the configuration environment

    Returns:
        Configuration class for the specified environment
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_CONFIG', 'default')

    return config.get(config_name, DevelopmentConfig)


__all__ = [
    'Config',
    'DevelopmentConfig',
    'TestingConfig',
    'ProductionConfig',
    'config',
    'get_config',
]
