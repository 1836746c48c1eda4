"""Sample data for local development, loaded by ``flask init-db --seed``."""

import logging
from datetime import date
from decimal import Decimal

from models.school import (
    Course,
    CourseAssignment,
    Department,
    Enrollment,
    Grade,
    Instructor,
    OfficeAssignment,
    Student,
)

logger = logging.getLogger(__name__)


def seed_database(session) -> None:
    """
    Insert a small, fixed data set. Does nothing when students already exist.

    Args:
        session: SQLAlchemy session; the caller owns the transaction
    """
    if session.query(Student.id).first() is not None:
        logger.info("Database already seeded, skipping")
        return

    students = [
        Student(first_mid_name='Carson', last_name='Alexander', enrollment_date=date(2010, 9, 1)),
        Student(first_mid_name='Meredith', last_name='Alonso', enrollment_date=date(2012, 9, 1)),
        Student(first_mid_name='Arturo', last_name='Anand', enrollment_date=date(2013, 9, 1)),
        Student(first_mid_name='Gytis', last_name='Barzdukas', enrollment_date=date(2012, 9, 1)),
        Student(first_mid_name='Yan', last_name='Li', enrollment_date=date(2012, 9, 1)),
        Student(first_mid_name='Peggy', last_name='Justice', enrollment_date=date(2011, 9, 1)),
        Student(first_mid_name='Laura', last_name='Norman', enrollment_date=date(2013, 9, 1)),
        Student(first_mid_name='Nino', last_name='Olivetto', enrollment_date=date(2005, 9, 1)),
    ]
    session.add_all(students)

    abercrombie = Instructor(first_mid_name='Kim', last_name='Abercrombie', hire_date=date(1995, 3, 11))
    fakhouri = Instructor(first_mid_name='Fadi', last_name='Fakhouri', hire_date=date(2002, 7, 6))
    harui = Instructor(first_mid_name='Roger', last_name='Harui', hire_date=date(1998, 7, 1))
    kapoor = Instructor(first_mid_name='Candace', last_name='Kapoor', hire_date=date(2001, 1, 15))
    zheng = Instructor(first_mid_name='Roger', last_name='Zheng', hire_date=date(2004, 2, 12))
    session.add_all([abercrombie, fakhouri, harui, kapoor, zheng])

    fakhouri.office_assignment = OfficeAssignment(location='Smith 17')
    harui.office_assignment = OfficeAssignment(location='Gowan 27')
    kapoor.office_assignment = OfficeAssignment(location='Thompson 304')

    english = Department(name='English', budget=Decimal('350000'), start_date=date(2007, 9, 1), administrator=abercrombie)
    mathematics = Department(name='Mathematics', budget=Decimal('100000'), start_date=date(2007, 9, 1), administrator=fakhouri)
    engineering = Department(name='Engineering', budget=Decimal('350000'), start_date=date(2007, 9, 1), administrator=harui)
    economics = Department(name='Economics', budget=Decimal('100000'), start_date=date(2007, 9, 1), administrator=kapoor)
    session.add_all([english, mathematics, engineering, economics])

    chemistry = Course(id=1050, title='Chemistry', credits=3, department=engineering)
    microeconomics = Course(id=4022, title='Microeconomics', credits=3, department=economics)
    macroeconomics = Course(id=4041, title='Macroeconomics', credits=3, department=economics)
    calculus = Course(id=1045, title='Calculus', credits=4, department=mathematics)
    trigonometry = Course(id=3141, title='Trigonometry', credits=4, department=mathematics)
    composition = Course(id=2021, title='Composition', credits=3, department=english)
    literature = Course(id=2042, title='Literature', credits=4, department=english)
    session.add_all([chemistry, microeconomics, macroeconomics, calculus, trigonometry, composition, literature])

    session.add_all([
        CourseAssignment(course=chemistry, instructor=kapoor),
        CourseAssignment(course=chemistry, instructor=harui),
        CourseAssignment(course=microeconomics, instructor=zheng),
        CourseAssignment(course=macroeconomics, instructor=zheng),
        CourseAssignment(course=calculus, instructor=fakhouri),
        CourseAssignment(course=trigonometry, instructor=harui),
        CourseAssignment(course=composition, instructor=abercrombie),
        CourseAssignment(course=literature, instructor=abercrombie),
    ])

    alexander, alonso, anand, barzdukas, li, justice = students[:6]
    session.add_all([
        Enrollment(student=alexander, course=chemistry, grade=Grade.A),
        Enrollment(student=alexander, course=microeconomics, grade=Grade.C),
        Enrollment(student=alexander, course=macroeconomics, grade=Grade.B),
        Enrollment(student=alonso, course=calculus, grade=Grade.B),
        Enrollment(student=alonso, course=trigonometry, grade=Grade.B),
        Enrollment(student=alonso, course=composition, grade=Grade.B),
        Enrollment(student=anand, course=chemistry),
        Enrollment(student=anand, course=microeconomics, grade=Grade.B),
        Enrollment(student=barzdukas, course=chemistry, grade=Grade.B),
        Enrollment(student=li, course=composition, grade=Grade.B),
        Enrollment(student=justice, course=literature, grade=Grade.B),
    ])

    session.flush()
    logger.info("Seeded %d students, 5 instructors, 4 departments, 7 courses", len(students))
