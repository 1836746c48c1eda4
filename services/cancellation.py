"""Cooperative cancellation threaded through the request pipeline."""

import threading

from flask import g, has_app_context

from services.errors import OperationCancelledError


class CancellationToken:
    """
    Signals that the work for a request should stop.

    Handlers call ``raise_if_cancelled`` before each storage call; a cancelled
    request surfaces as OperationCancelledError, which behaviors and the page
    filter treat like any other failure (rollback).
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError()


class _NeverCancelled(CancellationToken):
    def cancel(self) -> None:
        raise RuntimeError("The shared NONE token cannot be cancelled")


# Default for callers that have no cancellation source
CancellationToken.NONE = _NeverCancelled()


def current_cancel_token() -> CancellationToken:
    """
    Return the cancellation token for the current request, creating it on first use.

    Outside an application context the shared NONE token is returned.
    """
    if not has_app_context():
        return CancellationToken.NONE
    token = g.get('cancel_token')
    if token is None:
        token = CancellationToken()
        g.cancel_token = token
    return token
