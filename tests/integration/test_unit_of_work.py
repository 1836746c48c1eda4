"""
Integration tests for SchoolContext against the test database.
"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from blueprints.transaction_filter import PageHandlerExecutedContext, PageTransactionFilter
from models import Course, Department, db
from services.behaviors import TransactionBehavior
from services.cancellation import CancellationToken
from services.errors import TransactionStateError
from services.unit_of_work import SchoolContext, get_school_context
from tests.factories import CourseFactory, DepartmentFactory


def department_names():
    db.session.expire_all()
    return sorted(name for (name,) in db.session.query(Department.name))


@pytest.fixture
def context(session):
    return SchoolContext(session)


class TestSchoolContext:

    def test_commit_persists(self, context):
        context.begin_transaction()
        db.session.add(Department(name='History', budget=0))

        assert context.commit_transaction() is True
        assert department_names() == ['History']

    def test_rollback_discards(self, context):
        context.begin_transaction()
        db.session.add(Department(name='History', budget=0))
        db.session.flush()
        context.rollback_transaction()

        assert department_names() == []
        assert not context.in_transaction

    def test_nested_scopes_join_the_outer_transaction(self, context):
        context.begin_transaction()
        context.begin_transaction()
        assert context.depth == 2

        db.session.add(Department(name='Physics', budget=0))
        assert context.commit_transaction() is True
        assert context.in_transaction

        assert context.commit_transaction() is True
        assert department_names() == ['Physics']

    def test_inner_rollback_makes_outer_commit_roll_back(self, context):
        context.begin_transaction()
        db.session.add(Department(name='Physics', budget=0))
        db.session.flush()

        context.begin_transaction()
        context.rollback_transaction()
        assert context.rollback_only

        assert context.commit_transaction() is False
        assert department_names() == []
        assert not context.rollback_only

    def test_commit_without_transaction_raises(self, context):
        with pytest.raises(TransactionStateError) as excinfo:
            context.commit_transaction()

        assert excinfo.value.error_code == 'NO_TRANSACTION'

    def test_rollback_without_transaction_is_a_no_op(self, context):
        context.rollback_transaction()

        assert context.depth == 0

    def test_begin_adopts_an_autobegun_session(self, context):
        DepartmentFactory(name='Existing')
        department_names()
        assert db.session().in_transaction()

        context.begin_transaction()
        db.session.add(Department(name='Added', budget=0))
        context.commit_transaction()

        assert department_names() == ['Added', 'Existing']

    def test_run_in_transaction_rolls_back_on_failure(self, context):
        def work():
            db.session.add(Department(name='Doomed', budget=0))
            db.session.flush()
            raise RuntimeError('fail')

        with pytest.raises(RuntimeError):
            context.run_in_transaction(work)

        assert department_names() == []

    def test_close_rolls_back_open_scopes(self, context):
        context.begin_transaction()
        db.session.add(Department(name='Orphan', budget=0))
        db.session.flush()

        context.close()

        assert context.depth == 0
        assert department_names() == []


class TestFailedCommit:
    """A commit the database rejects leaves the session usable and nothing persisted."""

    @pytest.fixture
    def duplicate_course(self, session):
        existing = CourseFactory(id=900, title='Existing')
        department_id = existing.department_id
        session.expunge_all()

        def add_duplicate():
            session.add(Course(id=900, title='Duplicate', credits=1, department_id=department_id))

        return add_duplicate

    def course_titles(self, session):
        session.expire_all()
        return session.execute(select(Course.title).where(Course.id == 900)).scalars().all()

    def test_page_filter_reraises_and_rolls_back(self, session, duplicate_course):
        context = SchoolContext(session)
        page_filter = PageTransactionFilter(lambda: context)

        def handler():
            duplicate_course()
            return PageHandlerExecutedContext(result='saved')

        with pytest.raises(IntegrityError):
            page_filter.on_page_handler_execution(handler)

        assert context.depth == 0
        assert self.course_titles(session) == ['Existing']

    def test_transaction_behavior_reraises_and_rolls_back(self, session, duplicate_course):
        context = SchoolContext(session)
        behavior = TransactionBehavior(lambda: context)

        def call_next():
            duplicate_course()
            return 'saved'

        with pytest.raises(IntegrityError):
            behavior.handle(object(), CancellationToken.NONE, call_next)

        assert context.depth == 0
        assert self.course_titles(session) == ['Existing']

    def test_context_accepts_next_transaction(self, session, duplicate_course):
        context = SchoolContext(session)
        duplicate_course()

        context.begin_transaction()
        with pytest.raises(IntegrityError):
            context.commit_transaction()

        context.run_in_transaction(lambda: session.add(Department(name='Recovered', budget=0)))

        assert department_names().count('Recovered') == 1


def test_school_context_is_request_scoped(app):
    with app.test_request_context('/'):
        first = get_school_context()
        assert get_school_context() is first


def test_school_context_requires_app_context():
    with pytest.raises(RuntimeError):
        get_school_context()
