"""
Request-scoped unit of work over the Flask-SQLAlchemy session.

SchoolContext is the single owner of the ambient transaction for a request. The
page transaction filter opens it; pipeline behaviors and handlers that call
``begin_transaction`` again only join the open scope. Only the outermost scope
touches the database transaction, so a request can never begin twice or commit a
transaction that another participant already closed.

Scope rules:
    begin     depth 0 opens the session transaction, deeper calls join
    commit    inner scopes only leave; the outermost commits, or rolls back when
              an inner scope has already rolled back
    rollback  inner scopes mark the unit of work rollback-only; the outermost
              rolls the session back; at depth 0 it is a no-op
"""

import logging
from typing import Callable, Optional, TypeVar

from flask import Flask, g, has_app_context
from sqlalchemy.orm import Session, scoped_session

from models import db
from services.errors import TransactionStateError

logger = logging.getLogger(__name__)

T = TypeVar('T')

_G_KEY = 'school_context'


class SchoolContext:
    """
    Transactional data context for one request.

    Args:
        session: SQLAlchemy session (normally ``db.session``)
    """

    def __init__(self, session: Session) -> None:
        # A scoped_session proxy does not expose in_transaction; hold the current session
        if isinstance(session, scoped_session):
            session = session()
        self.session = session
        self._depth = 0
        self._rollback_only = False

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @property
    def rollback_only(self) -> bool:
        return self._rollback_only

    def begin_transaction(self) -> None:
        if self._depth == 0:
            # Reads before the first scope may have auto-begun the session
            if not self.session.in_transaction():
                self.session.begin()
            self._rollback_only = False
            logger.debug("Transaction started")
        else:
            logger.debug("Joined open transaction at depth %d", self._depth)
        self._depth += 1

    def commit_transaction(self) -> bool:
        """
        Leave the current scope, committing when it is the outermost one.

        Returns:
            True if the work was (or will be) committed, False if the unit of
            work was rolled back because an inner scope failed

        Raises:
            TransactionStateError: If no transaction scope is open
            Exception: Whatever the outermost commit raises, after the session
                has been rolled back
        """
        if self._depth == 0:
            raise TransactionStateError(
                "commit_transaction called without an open transaction",
                error_code='NO_TRANSACTION'
            )

        self._depth -= 1
        if self._depth > 0:
            return not self._rollback_only

        if self._rollback_only:
            logger.warning("Commit requested on a rollback-only unit of work; rolling back")
            self._rollback_only = False
            self.session.rollback()
            return False

        try:
            self.session.commit()
        except Exception:
            logger.warning("Commit failed; rolling back")
            self.session.rollback()
            raise
        logger.debug("Transaction committed")
        return True

    def rollback_transaction(self) -> None:
        if self._depth == 0:
            return

        self._depth -= 1
        if self._depth > 0:
            self._rollback_only = True
            logger.debug("Inner scope rolled back, unit of work marked rollback-only")
            return

        self._rollback_only = False
        self.session.rollback()
        logger.debug("Transaction rolled back")

    def run_in_transaction(self, work: Callable[[], T]) -> T:
        """
        Run ``work`` inside a transaction scope.

        Raises:
            Whatever ``work`` raises, after the scope has been rolled back
        """
        self.begin_transaction()
        try:
            result = work()
        except Exception:
            self.rollback_transaction()
            raise
        self.commit_transaction()
        return result

    def close(self) -> None:
        """Roll back any scope left open at the end of the request."""
        if self._depth:
            logger.warning("Closing unit of work with %d open scope(s); rolling back", self._depth)
            self._depth = 0
            self._rollback_only = False
            self.session.rollback()


def get_school_context() -> SchoolContext:
    """
    Return the SchoolContext for the current application context, creating it
    on first use.

    Raises:
        RuntimeError: Outside a Flask application context
    """
    if not has_app_context():
        raise RuntimeError("SchoolContext requires a Flask application context")

    context = g.get(_G_KEY)
    if context is None:
        context = SchoolContext(db.session)
        setattr(g, _G_KEY, context)
    return context


def init_unit_of_work(app: Flask) -> None:
    """Register teardown that closes the request's SchoolContext."""

    @app.teardown_appcontext
    def close_school_context(error: Optional[BaseException]) -> None:
        context = g.pop(_G_KEY, None)
        if context is not None:
            context.close()
