"""
Flask Application Factory - Main Entry Point

Builds the university records application: configuration, logging, database,
service layer (request pipeline and unit of work), error handlers, request
context, blueprints and the page transaction filter.

Key Features:
- Environment-specific configuration classes with python-dotenv loading
- Flask-SQLAlchemy database initialization
- Request pipeline with configurable behaviors (PIPELINE_BEHAVIORS)
- Page handlers wrapped in a request-scoped transaction (PAGE_TRANSACTIONS_ENABLED)
- structlog over stdlib logging, with a per-request ``request_id`` context variable
- ``flask --app app init-db [--seed]`` command

Example:
    from app import create_app
    app = create_app('development')
    app.run(debug=True)
"""

import os
import sys
import logging
import traceback
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

import click
import structlog
from dotenv import load_dotenv
from flask import Flask, g, jsonify, render_template, request
from flask.logging import default_handler
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from blueprints import BlueprintRegistrationError, get_html_blueprints, register_blueprints
from config import get_config
from models import DatabaseError, create_schema, db, init_database
from models.seed import seed_database
from services import NotFoundError, ServiceError, ValidationError, init_services

# Configure module-level logging
logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = 'X-Request-ID'


class FlaskApplicationError(Exception):
    """Custom exception for Flask application initialization errors."""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


def load_environment_variables() -> None:
    """
    Load environment variables from .env files using python-dotenv.

    Environment Search Order:
        1. .env (default environment settings)
        2. .env.{FLASK_ENV} (environment-specific settings)
        3. .env.local (local development overrides)
    Variables already present in the process environment always win.
    """
    flask_env = os.environ.get('FLASK_ENV', 'development')
    env_files = ['.env', f'.env.{flask_env}', '.env.local']

    loaded_files = []
    for env_file in env_files:
        if Path(env_file).exists():
            load_dotenv(env_file, override=False)
            loaded_files.append(env_file)

    if loaded_files:
        logger.info(f"Environment variables loaded from: {', '.join(loaded_files)}")
    else:
        logger.debug("No .env files found, using system environment variables only")


def configure_logging(app: Flask) -> None:
    """
    Configure stdlib logging and structlog for the application.

    structlog records are routed through the stdlib logger tree, so both share
    the handler and level configured here. LOG_JSON selects the JSON renderer;
    otherwise records are rendered for the console.

    Args:
        app: Flask application instance
    """
    app.logger.removeHandler(default_handler)

    log_level_str = app.config.get('LOG_LEVEL', 'INFO')
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        app.config.get('LOG_FORMAT', '%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    ))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, '_contoso_handler', False):
            root.removeHandler(existing)
    handler._contoso_handler = True
    root.addHandler(handler)
    root.setLevel(log_level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if app.config.get('LOG_JSON', False):
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests reconfigure processors (capture_logs), so loggers must not be cached
        cache_logger_on_first_use=not app.testing,
    )

    logger.info(f"Logging configured (level: {log_level_str}, json: {bool(app.config.get('LOG_JSON'))})")


def configure_extensions(app: Flask) -> None:
    """
    Initialize the database and the service layer.

    Raises:
        FlaskApplicationError: If the database cannot be initialized
    """
    try:
        init_database(app)
    except DatabaseError as e:
        raise FlaskApplicationError(
            f"Failed to configure Flask extensions: {e}",
            error_code="EXTENSION_CONFIG_ERROR"
        ) from e

    # Registered after db.init_app so the unit of work closes before the session is removed
    init_services(app)


def _error_response(error: str, message: str, status_code: int, **extra):
    if request.blueprint in get_html_blueprints():
        page = render_template('error.html', error=error, message=message, status_code=status_code)
        return page, status_code
    body = {'error': error, 'message': message, 'status_code': status_code}
    body.update(extra)
    return jsonify(body), status_code


def register_error_handlers(app: Flask) -> None:
    """
    Register error handlers.

    Errors raised under the HTML page blueprints render the error page; all
    other requests get a JSON body.

    NotFoundError maps to 404, ValidationError to 400 with the field errors,
    HTTPException keeps its status, anything else is a 500 whose details are
    only exposed in debug mode.
    """

    @app.errorhandler(NotFoundError)
    def not_found_error(error):
        logger.debug(f"Not found: {request.url} - {error.message}")
        return _error_response('Not Found', error.message, 404, error_code=error.error_code)

    @app.errorhandler(ValidationError)
    def validation_error(error):
        logger.info(f"Validation failed: {request.url} - {error.errors}")
        return _error_response('Validation Failed', error.message, 400, errors=error.errors)

    @app.errorhandler(HTTPException)
    def http_error(error):
        return _error_response(error.name, error.description, error.code)

    @app.errorhandler(BlueprintRegistrationError)
    def blueprint_error(error):
        logger.error(f"Blueprint registration error: {error.message}")
        return _error_response(
            'Blueprint Registration Error',
            'Application module registration failed',
            500,
            error_code=error.error_code
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.error(f"Unexpected error: {error}", exc_info=True)
        extra = {}
        if isinstance(error, ServiceError) and error.error_code:
            extra['error_code'] = error.error_code
        if app.debug:
            extra['debug_info'] = str(error)
        return _error_response('Internal Server Error', 'An unexpected error occurred', 500, **extra)


def configure_request_context(app: Flask) -> None:
    """
    Bind a request id into structlog's context variables for every request.

    The id comes from the X-Request-ID header when present, otherwise a fresh
    uuid4; it is echoed back on the response.
    """

    @app.before_request
    def bind_request_id():
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        g.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        logger.debug(f"Request started: {request.method} {request.path}")

    @app.after_request
    def add_request_id_header(response):
        request_id = g.get('request_id')
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.teardown_request
    def clear_request_context(error):
        structlog.contextvars.clear_contextvars()


def register_commands(app: Flask) -> None:
    """Register the database CLI commands."""

    @app.cli.command('init-db')
    @click.option('--seed', is_flag=True, help='Load the sample data set.')
    def init_db_command(seed: bool):
        """Create the database tables."""
        create_schema()
        if seed:
            seed_database(db.session)
            db.session.commit()
            click.echo('Initialized and seeded the database.')
        else:
            click.echo('Initialized the database.')


def create_app(config_name: Optional[str] = None) -> Flask:
    """
    Flask application factory.

    Args:
        config_name: 'development', 'testing' or 'production'. If None, determined
            from the FLASK_CONFIG environment variable

    Returns:
        Flask: Configured application instance

    Raises:
        FlaskApplicationError: If application initialization fails
    """
    load_environment_variables()

    try:
        app = Flask(__name__)
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

        config_class = get_config(config_name)
        app.config.from_object(config_class)
        config_class.init_app(app)

        configure_logging(app)
        logger.info(f"Flask application created with {config_class.__name__} configuration")

        configure_extensions(app)
        register_error_handlers(app)
        configure_request_context(app)
        register_commands(app)

        try:
            register_blueprints(app)
        except BlueprintRegistrationError as e:
            raise FlaskApplicationError(
                f"Critical blueprint registration failed: {e.message}",
                error_code="BLUEPRINT_REGISTRATION_FAILED",
                details={'blueprint_error': e.error_code, 'blueprint_name': e.blueprint_name}
            ) from e

        logger.info(f"Flask application factory initialization completed (Debug: {app.debug}, Testing: {app.testing})")
        return app

    except FlaskApplicationError as e:
        logger.error(f"Flask application factory failed: {e.message}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error during application factory initialization: {e}")
        raise FlaskApplicationError(
            f"Application factory initialization failed: {str(e)}",
            error_code="FACTORY_INIT_ERROR",
            details={'error': str(e), 'traceback': traceback.format_exc()}
        ) from e


# Development Server Entry Point
if __name__ == '__main__':
    try:
        dev_app = create_app()
        dev_app.run(
            host=os.environ.get('FLASK_HOST', '127.0.0.1'),
            port=int(os.environ.get('FLASK_PORT', 5000)),
            debug=dev_app.debug,
        )
    except FlaskApplicationError as e:
        logger.error(f"Development server startup failed: {e.message}")
        sys.exit(1)
