"""
Factory Boy Test Data Generation Module

SQLAlchemy model factories for the university records schema, bound to the
Flask-SQLAlchemy session of the active application context. Factories commit by
default so rows are visible to requests made through the test client.

Usage:
    course = CourseFactory(title='Chemistry', credits=3)
    EnrollmentFactory(course=course, grade=None)
"""

from datetime import date

import factory
from factory import fuzzy
from factory.alchemy import SQLAlchemyModelFactory
from faker import Faker

from models import (
    Course,
    CourseAssignment,
    Department,
    Enrollment,
    Grade,
    Instructor,
    OfficeAssignment,
    Student,
    db,
)

fake = Faker()


class BaseModelFactory(SQLAlchemyModelFactory):
    """Abstract base factory sharing the Flask-SQLAlchemy scoped session."""

    class Meta:
        abstract = True
        sqlalchemy_session = db.session
        sqlalchemy_session_persistence = 'commit'


class InstructorFactory(BaseModelFactory):
    class Meta:
        model = Instructor

    last_name = factory.LazyFunction(fake.last_name)
    first_mid_name = factory.LazyFunction(fake.first_name)
    hire_date = fuzzy.FuzzyDate(date(1990, 1, 1), date(2020, 12, 31))


class OfficeAssignmentFactory(BaseModelFactory):
    class Meta:
        model = OfficeAssignment

    instructor = factory.SubFactory(InstructorFactory)
    location = factory.Sequence(lambda n: f"Building {n}")


class DepartmentFactory(BaseModelFactory):
    class Meta:
        model = Department

    name = factory.Sequence(lambda n: f"Department {n}")
    budget = fuzzy.FuzzyDecimal(1000, 500000)
    start_date = fuzzy.FuzzyDate(date(2000, 1, 1), date(2020, 12, 31))
    administrator = None


class CourseFactory(BaseModelFactory):
    class Meta:
        model = Course

    id = factory.Sequence(lambda n: 5000 + n)
    title = factory.Sequence(lambda n: f"Course {n}")
    credits = fuzzy.FuzzyInteger(1, 5)
    department = factory.SubFactory(DepartmentFactory)


class StudentFactory(BaseModelFactory):
    class Meta:
        model = Student

    last_name = factory.LazyFunction(fake.last_name)
    first_mid_name = factory.LazyFunction(fake.first_name)
    enrollment_date = fuzzy.FuzzyDate(date(2005, 1, 1), date(2020, 12, 31))


class EnrollmentFactory(BaseModelFactory):
    class Meta:
        model = Enrollment

    course = factory.SubFactory(CourseFactory)
    student = factory.SubFactory(StudentFactory)
    grade = fuzzy.FuzzyChoice(list(Grade))


class CourseAssignmentFactory(BaseModelFactory):
    class Meta:
        model = CourseAssignment

    course = factory.SubFactory(CourseFactory)
    instructor = factory.SubFactory(InstructorFactory)
