"""
Flask Blueprint Package Initialization

Centralized blueprint registration for the application factory.

Blueprint Organization:
- main_bp: Site root
- health_bp: Health check endpoints
- instructors_bp: Instructors index page
- courses_bp: Course index, details and edit pages

Blueprints flagged ``transactional`` are page blueprints: after registration their
view functions are wrapped by the page transaction filter (when
PAGE_TRANSACTIONS_ENABLED is set), so each page handler runs in one unit of work.
Errors raised under blueprints flagged ``renders_html`` are rendered as HTML pages
rather than JSON bodies.
"""

import logging
from dataclasses import dataclass
from importlib import import_module
from typing import List, Optional

from flask import Blueprint, Flask

from blueprints.tags import init_template_helpers
from blueprints.transaction_filter import PageTransactionFilter

# Configure logging for blueprint registration operations
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlueprintConfig:
    """Registration metadata for one blueprint module."""
    name: str
    module_path: str
    blueprint_name: str
    url_prefix: Optional[str] = None
    transactional: bool = False
    renders_html: bool = False
    priority: int = 0
    description: str = ""


class BlueprintRegistrationError(Exception):
    """Custom exception for blueprint registration failures."""

    def __init__(self, message: str, blueprint_name: str = None, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.blueprint_name = blueprint_name
        self.error_code = error_code or 'BLUEPRINT_REGISTRATION_ERROR'


BLUEPRINTS = (
    BlueprintConfig(
        name='health',
        module_path='blueprints.health',
        blueprint_name='health_bp',
        priority=1,
        description='Health check endpoints'
    ),
    BlueprintConfig(
        name='main',
        module_path='blueprints.main',
        blueprint_name='main_bp',
        renders_html=True,
        priority=2,
        description='Site root'
    ),
    BlueprintConfig(
        name='instructors',
        module_path='blueprints.instructors',
        blueprint_name='instructors_bp',
        transactional=True,
        renders_html=True,
        priority=3,
        description='Instructors index page'
    ),
    BlueprintConfig(
        name='courses',
        module_path='blueprints.courses',
        blueprint_name='courses_bp',
        transactional=True,
        renders_html=True,
        priority=4,
        description='Course pages'
    ),
)


def load_blueprint(config: BlueprintConfig) -> Blueprint:
    """
    Import a blueprint object from its module.

    Raises:
        BlueprintRegistrationError: If the module or attribute is missing
    """
    try:
        module = import_module(config.module_path)
    except ImportError as e:
        raise BlueprintRegistrationError(
            f"Failed to import blueprint module '{config.module_path}': {e}",
            blueprint_name=config.name,
            error_code='BLUEPRINT_IMPORT_ERROR'
        ) from e

    blueprint = getattr(module, config.blueprint_name, None)
    if not isinstance(blueprint, Blueprint):
        raise BlueprintRegistrationError(
            f"Module '{config.module_path}' has no blueprint '{config.blueprint_name}'",
            blueprint_name=config.name,
            error_code='BLUEPRINT_NOT_FOUND'
        )
    return blueprint


def register_blueprints(app: Flask) -> List[str]:
    """
    Register all blueprints in priority order and install page transactions.

    Args:
        app: Flask application instance

    Returns:
        Names of the registered blueprints, in registration order

    Raises:
        BlueprintRegistrationError: If any blueprint fails to load
    """
    registered = []
    for config in sorted(BLUEPRINTS, key=lambda c: c.priority):
        blueprint = load_blueprint(config)
        options = {}
        if config.url_prefix is not None:
            options['url_prefix'] = config.url_prefix
        app.register_blueprint(blueprint, **options)
        registered.append(blueprint.name)
        logger.debug(f"Registered blueprint '{blueprint.name}': {config.description}")

    init_template_helpers(app)

    if app.config.get('PAGE_TRANSACTIONS_ENABLED', True):
        PageTransactionFilter().init_app(app, get_transactional_blueprints())
    else:
        logger.info("Page transactions disabled; pipeline behaviors own the transaction")

    logger.info(f"Registered {len(registered)} blueprints: {registered}")
    return registered


def get_transactional_blueprints() -> List[str]:
    return [config.name for config in BLUEPRINTS if config.transactional]


def get_html_blueprints() -> List[str]:
    return [config.name for config in BLUEPRINTS if config.renders_html]


__all__ = [
    'BLUEPRINTS',
    'BlueprintConfig',
    'BlueprintRegistrationError',
    'get_html_blueprints',
    'get_transactional_blueprints',
    'load_blueprint',
    'register_blueprints',
]
