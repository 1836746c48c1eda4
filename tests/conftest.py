"""
Pytest Configuration and Fixtures for Flask Application Testing

Provides the Flask application built with TestingConfig (in-memory SQLite, schema
created per test), the test client and CLI runner, the Flask-SQLAlchemy session,
and in-memory recording fakes for the unit of work used by the unit tests.

Fixtures:
- app: Application with an active application context and an empty schema
- client: Flask test client
- runner: Flask CLI runner
- session: ``db.session`` of the active application context
- seeded: The sample data set loaded into the test database
- recording_context: RecordingSchoolContext for pipeline and filter unit tests
"""

import sys
from pathlib import Path
from typing import List

import pytest

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app import create_app
from models import create_schema, db
from models.seed import seed_database


# =============================================================================
# PYTEST CONFIGURATION AND MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "unit: Unit tests for individual components and functions"
    )
    config.addinivalue_line(
        "markers",
        "integration: Integration tests through the Flask app and database"
    )
    config.addinivalue_line(
        "markers",
        "database: Database operation tests"
    )


def pytest_collection_modifyitems(config, items):
    """Apply markers based on test location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)

        if "unit_of_work" in str(item.fspath):
            item.add_marker(pytest.mark.database)


# =============================================================================
# FLASK APPLICATION FIXTURES
# =============================================================================

@pytest.fixture
def app():
    """
    Create a Flask application for testing with an empty in-memory database.

    The application context stays pushed for the whole test, so requests made
    through the test client share it (and its session) with the test body.
    """
    app = create_app('testing')

    with app.app_context():
        create_schema()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def seeded(session):
    """Load the sample data set and commit it."""
    seed_database(session)
    session.commit()
    return session


# =============================================================================
# RECORDING FAKES
# =============================================================================

class RecordingSchoolContext:
    """
    In-memory stand-in for SchoolContext that records every transaction call.

    ``calls`` holds 'begin', 'commit' and 'rollback' in call order.
    """

    def __init__(self, fail_on_commit: Exception = None):
        self.calls: List[str] = []
        self.fail_on_commit = fail_on_commit
        self.session = None

    def begin_transaction(self):
        self.calls.append('begin')

    def commit_transaction(self):
        self.calls.append('commit')
        if self.fail_on_commit is not None:
            raise self.fail_on_commit
        return True

    def rollback_transaction(self):
        self.calls.append('rollback')

    def count(self, name: str) -> int:
        return self.calls.count(name)


@pytest.fixture
def recording_context():
    return RecordingSchoolContext()
