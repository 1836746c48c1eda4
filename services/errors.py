"""
Service layer exception hierarchy.

Every error raised by the request pipeline, the unit of work or a handler derives
from ServiceError so the application error handlers can map it to a response.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional


class ServiceError(Exception):
    """Base exception for service layer operations."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        """
        Initialize service error with comprehensive error information.

        Args:
            message: Human-readable error description
            error_code: Optional error code for programmatic handling
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)


class HandlerNotFoundError(ServiceError):
    """No handler is registered for the request type being dispatched."""

    def __init__(self, request_type: type) -> None:
        super().__init__(
            f"No handler registered for {request_type.__name__}",
            error_code='HANDLER_NOT_FOUND'
        )
        self.request_type = request_type


class PipelineConfigurationError(ServiceError):
    """The handler registry or behavior list is misconfigured."""
    pass


class TransactionStateError(ServiceError):
    """A transaction operation was called in a state that does not allow it."""
    pass


class OperationCancelledError(ServiceError):
    """The request was cancelled before the operation completed."""

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message, error_code='CANCELLED')


class NotFoundError(ServiceError):
    """Resource not found error for entity lookup failures."""
    pass


class ValidationError(ServiceError):
    """Business rule validation error carrying per-field messages."""

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None) -> None:
        super().__init__(message, error_code='VALIDATION_FAILED')
        self.errors = errors or {}
