"""
Integration tests for the page blueprints through the Flask test client,
including the transaction outcome of each request.
"""

import pytest
from flask import Blueprint

from blueprints.transaction_filter import PageTransactionFilter
from config import TestingConfig
from models import Course, db
from services import courses, get_mediator
from services.errors import ValidationError
from tests.factories import CourseFactory, DepartmentFactory

CHEMISTRY = 1050


def reload_course(course_id):
    db.session.expire_all()
    return db.session.get(Course, course_id)


class RecordingMediator:
    """Stands in for the application's mediator and records what was sent."""

    def __init__(self):
        self.sent = []

    def send(self, request, cancel_token=None):
        self.sent.append(request)
        return None


class TestInstructorsPage:

    def test_root_redirects_to_instructors(self, client):
        response = client.get('/')

        assert response.status_code == 302
        assert response.headers['Location'].endswith('/instructors/')

    def test_lists_instructors(self, client, seeded):
        response = client.get('/instructors/')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert body.index('Abercrombie') < body.index('Fakhouri') < body.index('Zheng')
        assert 'Last Name' in body
        assert 'Gowan 27' in body

    def test_selected_course_shows_no_grade(self, client, seeded):
        response = client.get(f'/instructors/?course_id={CHEMISTRY}')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert 'Arturo Anand' in body
        assert 'No grade' in body

    def test_malformed_filter_is_ignored(self, client, seeded):
        response = client.get('/instructors/?id=abc&course_id=')

        assert response.status_code == 200
        assert 'Courses Taught by Selected Instructor' not in response.get_data(as_text=True)

    def test_request_id_is_echoed(self, client, seeded):
        response = client.get('/instructors/', headers={'X-Request-ID': 'req-123'})

        assert response.headers['X-Request-ID'] == 'req-123'


class TestCoursePages:

    def test_index(self, client, seeded):
        response = client.get('/courses/')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert body.index('1045') < body.index('1050') < body.index('4041')
        assert 'Engineering' in body

    def test_details_binds_course(self, client, seeded):
        response = client.get(f'/courses/{CHEMISTRY}')

        assert response.status_code == 200
        assert 'Chemistry' in response.get_data(as_text=True)

    def test_details_unknown_course_renders_404_page(self, client, seeded):
        response = client.get('/courses/9999')
        body = response.get_data(as_text=True)

        assert response.status_code == 404
        assert response.mimetype == 'text/html'
        assert 'Course 9999 not found' in body
        assert 'Status 404' in body

    def test_page_failure_renders_500_page(self, app, client, seeded):
        class FailingMediator:
            def send(self, request, cancel_token=None):
                raise RuntimeError('query failed')

        app.extensions['mediator'] = FailingMediator()

        response = client.get('/courses/')

        assert response.status_code == 500
        assert response.mimetype == 'text/html'
        assert 'An unexpected error occurred' in response.get_data(as_text=True)

    def test_edit_form_preselects_department(self, client, seeded):
        course = reload_course(CHEMISTRY)

        response = client.get(f'/courses/{CHEMISTRY}/edit')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert f'<option value="{course.department_id}" selected>Engineering</option>' in body

    def test_valid_edit_commits_and_redirects(self, client, seeded):
        course = reload_course(CHEMISTRY)
        department = DepartmentFactory(name='Natural Sciences')

        response = client.post(f'/courses/{CHEMISTRY}/edit', data={
            'title': 'General Chemistry',
            'credits': '4',
            'department_id': str(department.id),
        })

        assert response.status_code == 302
        assert response.headers['Location'].endswith(f'/courses/{CHEMISTRY}')
        course = reload_course(CHEMISTRY)
        assert (course.title, course.credits, course.department_id) == ('General Chemistry', 4, department.id)

    def test_invalid_edit_rerenders_without_sending(self, app, client, seeded):
        recorder = RecordingMediator()
        app.extensions['mediator'] = recorder

        response = client.post(f'/courses/{CHEMISTRY}/edit', data={
            'title': 'Ch',
            'credits': '9',
            'department_id': '',
        })
        body = response.get_data(as_text=True)

        assert response.status_code == 400
        assert 'Title must be between 3 and 50 characters long.' in body
        assert 'Credits must be between 0 and 5.' in body
        assert 'Department is required.' in body
        assert recorder.sent == []
        assert reload_course(CHEMISTRY).title == 'Chemistry'

    def test_edit_with_unknown_department_is_rejected(self, client, seeded):
        response = client.post(f'/courses/{CHEMISTRY}/edit', data={
            'title': 'Chemistry II',
            'credits': '3',
            'department_id': '424242',
        })

        assert response.status_code == 400
        assert 'Department 424242 does not exist.' in response.get_data(as_text=True)
        assert reload_course(CHEMISTRY).title == 'Chemistry'


class TestPageTransactions:
    """Commit and rollback outcomes of page requests, checked in the database."""

    @pytest.fixture
    def rename_pages(self, app):
        rename_bp = Blueprint('renames', __name__, url_prefix='/renames')

        @rename_bp.route('/rename/<int:course_id>/fail')
        def rename_then_fail(course_id):
            db.session.get(Course, course_id).title = 'Renamed'
            db.session.flush()
            raise RuntimeError('page failed')

        @rename_bp.route('/rename/<int:course_id>/swallow')
        def rename_then_swallow_pipeline_failure(course_id):
            db.session.get(Course, course_id).title = 'Renamed'
            db.session.flush()
            try:
                get_mediator().send(courses.EditCommand(
                    id=course_id, title='Valid Title', credits=3, department_id=424242
                ))
            except ValidationError:
                pass
            return 'ok'

        @rename_bp.route('/rename/<int:course_id>')
        def rename(course_id):
            db.session.get(Course, course_id).title = 'Renamed'
            return 'ok'

        app.register_blueprint(rename_bp)
        PageTransactionFilter().init_app(app, ['renames'])
        return app

    def test_successful_page_commits(self, client, rename_pages, seeded):
        response = client.get(f'/renames/rename/{CHEMISTRY}')

        assert response.status_code == 200
        assert reload_course(CHEMISTRY).title == 'Renamed'

    def test_unhandled_page_exception_rolls_back(self, client, rename_pages, seeded):
        response = client.get(f'/renames/rename/{CHEMISTRY}/fail')

        assert response.status_code == 500
        assert reload_course(CHEMISTRY).title == 'Chemistry'

    def test_failed_pipeline_call_rolls_back_the_whole_page(self, client, rename_pages, seeded):
        response = client.get(f'/renames/rename/{CHEMISTRY}/swallow')

        assert response.status_code == 200
        assert reload_course(CHEMISTRY).title == 'Chemistry'


class TestWithoutPageTransactions:

    @pytest.fixture
    def app(self, monkeypatch):
        monkeypatch.setattr(TestingConfig, 'PAGE_TRANSACTIONS_ENABLED', False)
        from app import create_app
        from models import create_schema

        app = create_app('testing')
        with app.app_context():
            create_schema()
            yield app
            db.session.remove()
            db.drop_all()

    def test_pipeline_commits_the_edit(self, app, client):
        course = CourseFactory(title='Statistics', credits=3)

        response = client.post(f'/courses/{course.id}/edit', data={
            'title': 'Applied Statistics',
            'credits': '2',
            'department_id': str(course.department_id),
        })

        assert response.status_code == 302
        assert reload_course(course.id).title == 'Applied Statistics'
        assert 'page_transaction_filter' not in app.extensions
