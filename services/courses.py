"""
Courses: index query and edit command.
"""

from dataclasses import dataclass
from typing import Tuple

from sqlalchemy import select

from models import Course, Department, validate_fields
from models.base import FieldSpec
from services.base_service import BaseHandler
from services.cancellation import CancellationToken
from services.errors import NotFoundError, ValidationError
from services.mediator import Request, RequestHandler


@dataclass(frozen=True)
class CourseRow:
    __field_specs__ = {
        'id': FieldSpec(display_name='Number'),
        'title': FieldSpec(display_name='Title'),
        'credits': FieldSpec(display_name='Credits'),
        'department_name': FieldSpec(display_name='Department'),
    }

    id: int
    title: str
    credits: int
    department_name: str


@dataclass(frozen=True)
class IndexModel:
    courses: Tuple[CourseRow, ...]


@dataclass(frozen=True)
class IndexQuery(Request[IndexModel]):
    pass


class IndexHandler(BaseHandler, RequestHandler[IndexModel]):

    def handle(self, request: IndexQuery, cancel_token: CancellationToken) -> IndexModel:
        self.check_cancelled(cancel_token)
        rows = self.session.execute(
            select(Course.id, Course.title, Course.credits, Department.name)
            .join(Department, Department.id == Course.department_id)
            .order_by(Course.id)
        ).all()
        return IndexModel(courses=tuple(
            CourseRow(id=course_id, title=title, credits=credits, department_name=name)
            for course_id, title, credits, name in rows
        ))


@dataclass(frozen=True)
class EditResult:
    id: int
    title: str
    credits: int
    department_id: int


@dataclass(frozen=True)
class EditCommand(Request[EditResult]):
    id: int
    title: str
    credits: int
    department_id: int


class EditHandler(BaseHandler, RequestHandler[EditResult]):
    """
    Applies an edit to an existing course.

    Raises:
        NotFoundError: If the course does not exist
        ValidationError: If a field violates the course's FieldSpecs or the
            department does not exist
    """

    def handle(self, request: EditCommand, cancel_token: CancellationToken) -> EditResult:
        errors = validate_fields(Course, {'title': request.title, 'credits': request.credits})
        if errors:
            raise ValidationError("Course is invalid", errors=errors)

        self.check_cancelled(cancel_token)
        course = self.session.get(Course, request.id)
        if course is None:
            raise NotFoundError(f"Course {request.id} not found", error_code='COURSE_NOT_FOUND')

        self.check_cancelled(cancel_token)
        if self.session.get(Department, request.department_id) is None:
            raise ValidationError(
                "Course is invalid",
                errors={'department_id': [f"Department {request.department_id} does not exist."]}
            )

        course.title = request.title
        course.credits = request.credits
        course.department_id = request.department_id
        self.session.flush()

        return EditResult(
            id=course.id,
            title=course.title,
            credits=course.credits,
            department_id=course.department_id,
        )
