"""
Pipeline behaviors: cross-cutting wrappers composed around request handlers.

- TransactionBehavior joins (or opens) the request's unit of work around the
  rest of the chain.
- LoggingBehavior records entry and exit inside a logging scope keyed by the
  request.

BEHAVIORS maps the names accepted by the PIPELINE_BEHAVIORS setting to
factories taking the data context provider.
"""

from typing import Any, Callable, Dict, Optional

import structlog

from services.base_service import ContextProvider
from services.cancellation import CancellationToken
from services.errors import PipelineConfigurationError
from services.mediator import NextHandler, PipelineBehavior, Request
from services.unit_of_work import get_school_context


class TransactionBehavior(PipelineBehavior):
    """
    Wraps the handler in a transaction scope.

    begin, then the rest of the chain, then commit and return the result. On any
    exception the scope is rolled back and the original exception re-raised.
    When the page filter already opened the transaction, begin/commit/rollback
    only join and leave its scope.
    """

    def __init__(self, context_provider: Optional[ContextProvider] = None) -> None:
        self._context_provider = context_provider or get_school_context

    def handle(self, request: Request, cancel_token: CancellationToken, call_next: NextHandler) -> Any:
        context = self._context_provider()
        try:
            context.begin_transaction()
            response = call_next()
            context.commit_transaction()
            return response
        except Exception:
            context.rollback_transaction()
            raise


class LoggingBehavior(PipelineBehavior):
    """
    Logs around the handler call.

    The request is bound into structlog's context variables for the duration of
    the call, so every record emitted further down the chain carries it. Failures
    are not logged here and propagate untouched.
    """

    def __init__(self, logger=None) -> None:
        self._logger = logger or structlog.get_logger('pipeline')

    def handle(self, request: Request, cancel_token: CancellationToken, call_next: NextHandler) -> Any:
        with structlog.contextvars.bound_contextvars(request=repr(request)):
            self._logger.info("Calling handler...", request_type=type(request).__qualname__)
            response = call_next()
            self._logger.info("Called handler with result", result=repr(response))
            return response


BEHAVIORS: Dict[str, Callable[[ContextProvider], PipelineBehavior]] = {
    'transaction': lambda provider: TransactionBehavior(provider),
    'logging': lambda provider: LoggingBehavior(),
}


def build_behavior(name: str, context_provider: Optional[ContextProvider] = None) -> PipelineBehavior:
    """
    Instantiate a behavior by its configuration name.

    Raises:
        PipelineConfigurationError: For an unknown name
    """
    try:
        factory = BEHAVIORS[name]
    except KeyError:
        raise PipelineConfigurationError(
            f"Unknown pipeline behavior '{name}'",
            error_code='UNKNOWN_BEHAVIOR'
        ) from None
    return factory(context_provider or get_school_context)
