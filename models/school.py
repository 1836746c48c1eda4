"""
University Records Entity Models

Declarative Flask-SQLAlchemy models for departments, courses, instructors, students,
enrollments and the instructor/course join. Field constraints live in each model's
``__field_specs__`` mapping and are enforced through ``@validates`` hooks.

Relationships:
    Department 1 ── n Course
    Course     1 ── n Enrollment n ── 1 Student
    Course     1 ── n CourseAssignment n ── 1 Instructor
    Instructor 1 ── 0..1 OfficeAssignment
    Department n ── 0..1 Instructor (administrator)
"""

import enum

from sqlalchemy import Column, Date, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship, validates

from models.base import BaseModel, FieldSpec


class Grade(enum.Enum):
    """Letter grade recorded on an enrollment."""
    A = 'A'
    B = 'B'
    C = 'C'
    D = 'D'
    F = 'F'


NO_GRADE = 'No grade'


class Department(BaseModel):
    __tablename__ = 'departments'

    __field_specs__ = {
        'name': FieldSpec(display_name='Name', min_length=3, max_length=50, required=True),
        'budget': FieldSpec(display_name='Budget', minimum=0),
        'start_date': FieldSpec(display_name='Start Date', date_format='%Y-%m-%d'),
        'administrator': FieldSpec(display_name='Administrator', null_display='None'),
    }

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)
    budget = Column(Numeric(12, 2), nullable=False, default=0)
    start_date = Column(Date, nullable=True)
    instructor_id = Column(Integer, ForeignKey('instructors.id'), nullable=True)

    administrator = relationship('Instructor', foreign_keys=[instructor_id])
    courses = relationship('Course', back_populates='department', lazy='select')

    @validates('name')
    def validate_name(self, key, name):
        return self.check_field(key, name)


class Instructor(BaseModel):
    __tablename__ = 'instructors'

    __field_specs__ = {
        'last_name': FieldSpec(display_name='Last Name', max_length=50, required=True),
        'first_mid_name': FieldSpec(display_name='First Name', max_length=50, required=True),
        'hire_date': FieldSpec(display_name='Hire Date', date_format='%Y-%m-%d'),
        'full_name': FieldSpec(display_name='Full Name'),
    }

    id = Column(Integer, primary_key=True)
    last_name = Column(String(50), nullable=False, index=True)
    first_mid_name = Column(String(50), nullable=False)
    hire_date = Column(Date, nullable=False)

    office_assignment = relationship(
        'OfficeAssignment',
        back_populates='instructor',
        uselist=False,
        cascade='all, delete-orphan'
    )
    course_assignments = relationship(
        'CourseAssignment',
        back_populates='instructor',
        cascade='all, delete-orphan'
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_mid_name} {self.last_name}"

    @validates('last_name', 'first_mid_name')
    def validate_names(self, key, value):
        return self.check_field(key, value)


class OfficeAssignment(BaseModel):
    __tablename__ = 'office_assignments'

    __field_specs__ = {
        'location': FieldSpec(display_name='Office Location', max_length=50),
    }

    instructor_id = Column(Integer, ForeignKey('instructors.id'), primary_key=True)
    location = Column(String(50), nullable=True)

    instructor = relationship('Instructor', back_populates='office_assignment')


class Student(BaseModel):
    __tablename__ = 'students'

    __field_specs__ = {
        'last_name': FieldSpec(display_name='Last Name', max_length=50, required=True),
        'first_mid_name': FieldSpec(display_name='First Name', max_length=50, required=True),
        'enrollment_date': FieldSpec(display_name='Enrollment Date', date_format='%Y-%m-%d'),
        'full_name': FieldSpec(display_name='Full Name'),
    }

    id = Column(Integer, primary_key=True)
    last_name = Column(String(50), nullable=False)
    first_mid_name = Column(String(50), nullable=False)
    enrollment_date = Column(Date, nullable=False)

    enrollments = relationship('Enrollment', back_populates='student', cascade='all, delete-orphan')

    @property
    def full_name(self) -> str:
        return f"{self.first_mid_name} {self.last_name}"

    @validates('last_name', 'first_mid_name')
    def validate_names(self, key, value):
        return self.check_field(key, value)


class Course(BaseModel):
    """
    A course offered by a department.

    The primary key is the course number, assigned by the registrar rather than
    generated by the database.
    """

    __tablename__ = 'courses'

    __field_specs__ = {
        'id': FieldSpec(display_name='Number', required=True),
        'title': FieldSpec(display_name='Title', min_length=3, max_length=50, required=True),
        'credits': FieldSpec(display_name='Credits', minimum=0, maximum=5, required=True),
        'department': FieldSpec(display_name='Department'),
    }

    id = Column('course_id', Integer, primary_key=True, autoincrement=False)
    title = Column(String(50), nullable=False)
    credits = Column(Integer, nullable=False, default=0)
    department_id = Column(Integer, ForeignKey('departments.id'), nullable=False, index=True)

    department = relationship('Department', back_populates='courses')
    enrollments = relationship('Enrollment', back_populates='course', cascade='all, delete-orphan')
    course_assignments = relationship(
        'CourseAssignment',
        back_populates='course',
        cascade='all, delete-orphan'
    )

    @validates('title', 'credits')
    def validate_course_fields(self, key, value):
        return self.check_field(key, value)


class Enrollment(BaseModel):
    __tablename__ = 'enrollments'

    __field_specs__ = {
        'grade': FieldSpec(display_name='Grade', null_display=NO_GRADE),
    }

    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey('courses.course_id'), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey('students.id'), nullable=False, index=True)
    grade = Column(Enum(Grade), nullable=True)

    course = relationship('Course', back_populates='enrollments')
    student = relationship('Student', back_populates='enrollments')


class CourseAssignment(BaseModel):
    """Join between an instructor and a course they teach; identity is the pair."""

    __tablename__ = 'course_assignments'

    course_id = Column(Integer, ForeignKey('courses.course_id'), primary_key=True)
    instructor_id = Column(Integer, ForeignKey('instructors.id'), primary_key=True)

    course = relationship('Course', back_populates='course_assignments')
    instructor = relationship('Instructor', back_populates='course_assignments')
