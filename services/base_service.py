"""
Base Handler Implementation

Foundation for query and command handlers: dependency injection of the
request-scoped data context, and the per-call helpers every handler uses.

Handlers are created once at startup and shared across requests, so they never
hold a SchoolContext directly. They receive a context provider and resolve the
current request's context on every call.

Usage Example:
    class Handler(BaseHandler, RequestHandler[Model]):
        def handle(self, request, cancel_token):
            self.check_cancelled(cancel_token)
            rows = self.session.execute(select(...)).all()
            ...
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from services.cancellation import CancellationToken
from services.unit_of_work import SchoolContext, get_school_context

logger = logging.getLogger(__name__)

ContextProvider = Callable[[], SchoolContext]


class BaseHandler:
    """
    Base class for pipeline handlers that read or write through the data context.

    Args:
        context_provider: Callable returning the current SchoolContext.
            Defaults to the Flask request-scoped context; tests inject their own.
    """

    def __init__(self, context_provider: Optional[ContextProvider] = None) -> None:
        self._context_provider = context_provider or get_school_context
        logger.debug(f"Handler {self.__class__.__qualname__} initialized")

    @property
    def context(self) -> SchoolContext:
        return self._context_provider()

    @property
    def session(self) -> Session:
        return self.context.session

    @staticmethod
    def check_cancelled(cancel_token: CancellationToken) -> None:
        """Abort before issuing the next storage call if the request was cancelled."""
        cancel_token.raise_if_cancelled()
