"""
Service Layer Package

Request pipeline, pipeline behaviors, the request-scoped unit of work and the
query/command handlers for the university records pages.

The mediator is built once per application by ``init_services`` from the
PIPELINE_BEHAVIORS setting and stored in ``app.extensions['mediator']``;
blueprints reach it through ``get_mediator``.

Example:
    from services import get_mediator, instructors

    @blueprint.route('/instructors/')
    def index():
        model = get_mediator().send(instructors.IndexQuery(id=3))
"""

import logging
from typing import Iterable, Optional

from flask import Flask, current_app

from services import courses, instructors
from services.base_service import BaseHandler, ContextProvider
from services.behaviors import LoggingBehavior, TransactionBehavior, build_behavior
from services.cancellation import CancellationToken
from services.errors import (
    HandlerNotFoundError,
    NotFoundError,
    OperationCancelledError,
    PipelineConfigurationError,
    ServiceError,
    TransactionStateError,
    ValidationError,
)
from services.mediator import HandlerRegistry, Mediator, PipelineBehavior, Request, RequestHandler
from services.unit_of_work import SchoolContext, get_school_context, init_unit_of_work

logger = logging.getLogger(__name__)

_EXTENSION_KEY = 'mediator'


def register_handlers(registry: HandlerRegistry, context_provider: Optional[ContextProvider] = None) -> None:
    """Register one handler instance per request type."""
    registry.register_handler(instructors.IndexQuery, instructors.IndexHandler(context_provider))
    registry.register_handler(courses.IndexQuery, courses.IndexHandler(context_provider))
    registry.register_handler(courses.EditCommand, courses.EditHandler(context_provider))


def build_mediator(behavior_names: Iterable[str] = (),
                   context_provider: Optional[ContextProvider] = None) -> Mediator:
    """
    Assemble the pipeline: handlers, then behaviors in configured order.

    Args:
        behavior_names: Behavior names, outermost first
        context_provider: Data context provider shared by handlers and behaviors

    Returns:
        Mediator over a frozen registry
    """
    registry = HandlerRegistry()
    register_handlers(registry, context_provider)
    for name in behavior_names:
        registry.add_behavior(build_behavior(name, context_provider))
    return Mediator(registry.freeze())


def init_services(app: Flask) -> None:
    """
    Initialize the service layer for the Flask application factory.

    Args:
        app: Flask application instance
    """
    init_unit_of_work(app)

    behavior_names = tuple(app.config.get('PIPELINE_BEHAVIORS', ()))
    app.extensions[_EXTENSION_KEY] = build_mediator(behavior_names)

    logger.info(f"Service layer initialized (behaviors: {', '.join(behavior_names) or 'none'})")


def get_mediator() -> Mediator:
    """
    Return the application's mediator.

    Raises:
        PipelineConfigurationError: If init_services was not called for this app
    """
    try:
        return current_app.extensions[_EXTENSION_KEY]
    except KeyError:
        raise PipelineConfigurationError(
            "Service layer not initialized; call init_services(app)",
            error_code='SERVICES_NOT_INITIALIZED'
        ) from None


__all__ = [
    'courses',
    'instructors',
    'BaseHandler',
    'CancellationToken',
    'HandlerRegistry',
    'LoggingBehavior',
    'Mediator',
    'PipelineBehavior',
    'Request',
    'RequestHandler',
    'SchoolContext',
    'TransactionBehavior',
    'build_mediator',
    'get_mediator',
    'get_school_context',
    'init_services',
    'register_handlers',
    'HandlerNotFoundError',
    'NotFoundError',
    'OperationCancelledError',
    'PipelineConfigurationError',
    'ServiceError',
    'TransactionStateError',
    'ValidationError',
]
