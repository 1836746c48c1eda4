"""
Request Pipeline (Mediator)

Dispatches a typed request to the single handler registered for its type, running
it through an ordered chain of pipeline behaviors.

Key Concepts:
- Request[T]: A request value whose handler produces a response of type T
- RequestHandler: One ``handle(request, cancel_token)`` method per request type
- PipelineBehavior: A wrapper ``handle(request, cancel_token, call_next)`` around the
  rest of the chain; it may act before ``call_next``, after it, or instead of it
- HandlerRegistry: Request type -> handler instance, plus the ordered behaviors;
  populated at startup and frozen before the first dispatch

Composition:
    behaviors [B1, B2] and handler H run as B1(B2(H)): B1 pre, B2 pre, H,
    B2 post, B1 post. Exceptions propagate unchanged unless a behavior
    intercepts them.
"""

from abc import ABC, abstractmethod
from functools import partial
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

import structlog

from services.cancellation import CancellationToken
from services.errors import HandlerNotFoundError, PipelineConfigurationError

logger = structlog.get_logger(__name__)

TResponse = TypeVar('TResponse')

NextHandler = Callable[[], Any]


class Request(Generic[TResponse]):
    """Marker base for request values; subclass as ``Request[ResponseType]``."""
    pass


class RequestHandler(ABC, Generic[TResponse]):
    """Handles exactly one request type."""

    @abstractmethod
    def handle(self, request: Request[TResponse], cancel_token: CancellationToken) -> TResponse:
        ...


class PipelineBehavior(ABC):
    """
    Cross-cutting wrapper around request handling.

    ``request_types`` restricts the behavior to those request classes (and their
    subclasses); None applies it to every request.
    """

    request_types: Optional[Tuple[type, ...]] = None

    def applies_to(self, request_type: type) -> bool:
        return self.request_types is None or issubclass(request_type, self.request_types)

    @abstractmethod
    def handle(self, request: Request, cancel_token: CancellationToken, call_next: NextHandler) -> Any:
        ...


class HandlerRegistry:
    """
    Request-type to handler mapping and the ordered behavior list.

    Registration is only allowed before ``freeze``; dispatch is only allowed
    after it.
    """

    def __init__(self) -> None:
        self._handlers: Dict[type, RequestHandler] = {}
        self._behaviors: List[PipelineBehavior] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise PipelineConfigurationError(
                "Handler registry is frozen; register handlers at startup",
                error_code='REGISTRY_FROZEN'
            )

    def register_handler(self, request_type: Type[Request], handler: RequestHandler) -> None:
        self._ensure_mutable()
        if request_type in self._handlers:
            raise PipelineConfigurationError(
                f"A handler is already registered for {request_type.__name__}",
                error_code='DUPLICATE_HANDLER'
            )
        self._handlers[request_type] = handler

    def add_behavior(self, behavior: PipelineBehavior) -> None:
        """Append a behavior; earlier behaviors wrap later ones."""
        self._ensure_mutable()
        self._behaviors.append(behavior)

    def freeze(self) -> 'HandlerRegistry':
        if not self._frozen:
            self._handlers = MappingProxyType(dict(self._handlers))
            self._behaviors = tuple(self._behaviors)
            self._frozen = True
        return self

    def handler_for(self, request_type: type) -> RequestHandler:
        try:
            return self._handlers[request_type]
        except KeyError:
            raise HandlerNotFoundError(request_type) from None

    def behaviors_for(self, request_type: type) -> Sequence[PipelineBehavior]:
        return [behavior for behavior in self._behaviors if behavior.applies_to(request_type)]

    @property
    def request_types(self) -> List[type]:
        return list(self._handlers)


class Mediator:
    """
    Sends requests through the pipeline.

    Usage Example:
        registry = HandlerRegistry()
        registry.register_handler(InstructorsIndex.Query, InstructorsIndex.Handler(provider))
        registry.add_behavior(TransactionBehavior(provider))
        mediator = Mediator(registry.freeze())
        model = mediator.send(InstructorsIndex.Query(id=3))
    """

    def __init__(self, registry: HandlerRegistry) -> None:
        if not registry.frozen:
            raise PipelineConfigurationError(
                "Mediator requires a frozen registry",
                error_code='REGISTRY_NOT_FROZEN'
            )
        self.registry = registry

    def send(self, request: Request[TResponse],
             cancel_token: Optional[CancellationToken] = None) -> TResponse:
        """
        Dispatch a request to its handler through the applicable behaviors.

        Args:
            request: Request value
            cancel_token: Cancellation signal passed to every behavior and the handler

        Returns:
            Whatever the outermost behavior (or the handler) returns

        Raises:
            HandlerNotFoundError: If no handler is registered for the request type
            Exception: Anything raised by a behavior or the handler, unchanged
        """
        token = cancel_token or CancellationToken.NONE
        request_type = type(request)
        handler = self.registry.handler_for(request_type)

        invoke: NextHandler = partial(handler.handle, request, token)
        for behavior in reversed(self.registry.behaviors_for(request_type)):
            invoke = partial(behavior.handle, request, token, invoke)

        logger.debug("dispatching request", request_type=request_type.__name__)
        return invoke()
