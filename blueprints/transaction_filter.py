"""
Page Transaction Filter

Wraps every page handler in the request's unit of work:

    begin -> run the page handler
          -> unhandled exception recorded  => rollback
          -> otherwise (success, or the exception was handled) => commit
    any exception raised by the filter itself => rollback, then re-raise

The page handler's outcome is captured in a PageHandlerExecutedContext instead
of being raised through the filter, so the filter decides commit or rollback from
what the handler produced. Once the transaction is settled the recorded exception
is re-raised so Flask's error handlers still render it.

An exception counts as handled when it is an HTTPException (abort(404), a
redirect raised by the binder, ...) or carries ``handled = True``.
"""

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Iterable, Optional

from flask import Flask
from werkzeug.exceptions import HTTPException

from services.base_service import ContextProvider
from services.unit_of_work import get_school_context

logger = logging.getLogger(__name__)


@dataclass
class PageHandlerExecutedContext:
    """Outcome of one page handler call."""
    result: Any = None
    exception: Optional[BaseException] = None
    exception_handled: bool = False

    @property
    def failed(self) -> bool:
        return self.exception is not None and not self.exception_handled


def is_exception_handled(exc: BaseException) -> bool:
    return isinstance(exc, HTTPException) or bool(getattr(exc, 'handled', False))


class PageTransactionFilter:
    """
    Transaction owner for page handler execution.

    Args:
        context_provider: Callable returning the current SchoolContext
    """

    def __init__(self, context_provider: Optional[ContextProvider] = None) -> None:
        self._context_provider = context_provider or get_school_context

    def on_page_handler_execution(
        self, call_next: Callable[[], PageHandlerExecutedContext]
    ) -> PageHandlerExecutedContext:
        context = self._context_provider()
        try:
            context.begin_transaction()

            executed = call_next()

            if executed.failed:
                context.rollback_transaction()
            else:
                context.commit_transaction()

            return executed
        except Exception:
            context.rollback_transaction()
            raise

    def wrap(self, view: Callable[..., Any]) -> Callable[..., Any]:
        """Return ``view`` running inside this filter."""

        @wraps(view)
        def transactional_view(*args, **kwargs):
            def execute() -> PageHandlerExecutedContext:
                try:
                    return PageHandlerExecutedContext(result=view(*args, **kwargs))
                except Exception as exc:
                    return PageHandlerExecutedContext(
                        exception=exc,
                        exception_handled=is_exception_handled(exc),
                    )

            executed = self.on_page_handler_execution(execute)
            if executed.exception is not None:
                raise executed.exception
            return executed.result

        transactional_view.__wrapped_by_page_filter__ = True
        return transactional_view

    def init_app(self, app: Flask, blueprint_names: Iterable[str]) -> int:
        """
        Wrap the view functions of the named blueprints.

        Must run after the blueprints are registered.

        Returns:
            Number of endpoints wrapped
        """
        names = set(blueprint_names)
        wrapped = 0
        for endpoint, view in list(app.view_functions.items()):
            if endpoint.partition('.')[0] not in names:
                continue
            if getattr(view, '__wrapped_by_page_filter__', False):
                continue
            app.view_functions[endpoint] = self.wrap(view)
            wrapped += 1

        app.extensions['page_transaction_filter'] = self
        logger.info(f"Page transaction filter installed on {wrapped} endpoint(s)")
        return wrapped
