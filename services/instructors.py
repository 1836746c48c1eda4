"""
Instructors index: query, view model and handler.

The page lists every instructor (ordered by last name) with the courses they
teach. Selecting an instructor adds that instructor's courses; selecting a course
adds its enrollments. Each collection is read with a column projection straight
into the view-model shape.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from sqlalchemy import select

from models import Course, CourseAssignment, Department, Enrollment, Grade, Instructor, OfficeAssignment, Student
from models.base import FieldSpec, get_field_spec
from services.base_service import BaseHandler
from services.cancellation import CancellationToken
from services.mediator import Request, RequestHandler


@dataclass(frozen=True)
class CourseAssignmentView:
    course_id: int
    course_title: str


@dataclass(frozen=True)
class InstructorView:
    __field_specs__ = {
        'last_name': FieldSpec(display_name='Last Name'),
        'first_mid_name': FieldSpec(display_name='First Name'),
        'hire_date': FieldSpec(display_name='Hire Date', date_format='%Y-%m-%d'),
        'office_assignment_location': FieldSpec(display_name='Office'),
        'course_assignments': FieldSpec(display_name='Courses'),
    }

    id: int
    last_name: str
    first_mid_name: str
    hire_date: date
    office_assignment_location: Optional[str]
    course_assignments: Tuple[CourseAssignmentView, ...] = ()


@dataclass(frozen=True)
class CourseView:
    __field_specs__ = {
        'id': FieldSpec(display_name='Number'),
        'title': FieldSpec(display_name='Title'),
        'department_name': FieldSpec(display_name='Department'),
    }

    id: int
    title: str
    department_name: str


@dataclass(frozen=True)
class EnrollmentView:
    __field_specs__ = {
        'student_full_name': FieldSpec(display_name='Name'),
        'grade_display': FieldSpec(display_name='Grade'),
    }

    student_full_name: str
    grade: Optional[Grade]
    grade_display: str


@dataclass(frozen=True)
class IndexModel:
    instructor_id: Optional[int]
    course_id: Optional[int]
    instructors: Tuple[InstructorView, ...]
    courses: Tuple[CourseView, ...]
    enrollments: Tuple[EnrollmentView, ...]


@dataclass(frozen=True)
class IndexQuery(Request[IndexModel]):
    id: Optional[int] = None
    course_id: Optional[int] = None


class IndexHandler(BaseHandler, RequestHandler[IndexModel]):

    def handle(self, request: IndexQuery, cancel_token: CancellationToken) -> IndexModel:
        instructors = self._read_instructors(cancel_token)

        courses: Tuple[CourseView, ...] = ()
        if request.id is not None:
            courses = self._read_courses(request.id, cancel_token)

        enrollments: Tuple[EnrollmentView, ...] = ()
        if request.course_id is not None:
            enrollments = self._read_enrollments(request.course_id, cancel_token)

        return IndexModel(
            instructor_id=request.id,
            course_id=request.course_id,
            instructors=instructors,
            courses=courses,
            enrollments=enrollments,
        )

    def _read_instructors(self, cancel_token: CancellationToken) -> Tuple[InstructorView, ...]:
        self.check_cancelled(cancel_token)
        rows = self.session.execute(
            select(
                Instructor.id,
                Instructor.last_name,
                Instructor.first_mid_name,
                Instructor.hire_date,
                OfficeAssignment.location,
            )
            .outerjoin(OfficeAssignment, OfficeAssignment.instructor_id == Instructor.id)
            .order_by(Instructor.last_name, Instructor.id)
        ).all()

        self.check_cancelled(cancel_token)
        assignment_rows = self.session.execute(
            select(CourseAssignment.instructor_id, Course.id, Course.title)
            .join(Course, Course.id == CourseAssignment.course_id)
            .order_by(CourseAssignment.instructor_id, Course.id)
        ).all()

        assignments = defaultdict(list)
        for instructor_id, course_id, title in assignment_rows:
            assignments[instructor_id].append(CourseAssignmentView(course_id=course_id, course_title=title))

        return tuple(
            InstructorView(
                id=row.id,
                last_name=row.last_name,
                first_mid_name=row.first_mid_name,
                hire_date=row.hire_date,
                office_assignment_location=row.location,
                course_assignments=tuple(assignments.get(row.id, ())),
            )
            for row in rows
        )

    def _read_courses(self, instructor_id: int, cancel_token: CancellationToken) -> Tuple[CourseView, ...]:
        self.check_cancelled(cancel_token)
        rows = self.session.execute(
            select(Course.id, Course.title, Department.name)
            .join(CourseAssignment, CourseAssignment.course_id == Course.id)
            .join(Department, Department.id == Course.department_id)
            .where(CourseAssignment.instructor_id == instructor_id)
            .order_by(Course.id)
        ).all()
        return tuple(CourseView(id=course_id, title=title, department_name=name) for course_id, title, name in rows)

    def _read_enrollments(self, course_id: int, cancel_token: CancellationToken) -> Tuple[EnrollmentView, ...]:
        self.check_cancelled(cancel_token)
        rows = self.session.execute(
            select(Enrollment.grade, Student.first_mid_name, Student.last_name)
            .join(Student, Student.id == Enrollment.student_id)
            .where(Enrollment.course_id == course_id)
            .order_by(Student.last_name, Enrollment.id)
        ).all()

        grade_spec = get_field_spec(Enrollment, 'grade')
        return tuple(
            EnrollmentView(
                student_full_name=f"{first} {last}",
                grade=grade,
                grade_display=grade_spec.format(grade),
            )
            for grade, first, last in rows
        )
