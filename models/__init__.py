"""
Flask-SQLAlchemy Database Initialization Module

Centralizes the database instance, model imports and application-factory integration
for the university records schema.

Model Architecture:
- BaseModel: Common serialization and FieldSpec validation
- School models: Department, Course, Instructor, OfficeAssignment, Student,
  Enrollment, CourseAssignment

ENTITY_TYPES lists the entities that can be bound from a request by identifier.
It is fixed at import time and consulted by the entity model binder.
"""

import logging
from typing import Any, Dict

from flask import Flask
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from models.base import BaseModel, DatabaseError, FieldSpec, db, get_field_spec, validate_fields
from models.school import (
    NO_GRADE,
    Course,
    CourseAssignment,
    Department,
    Enrollment,
    Grade,
    Instructor,
    OfficeAssignment,
    Student,
)

# Configure logging for database operations
logger = logging.getLogger(__name__)

# Entities addressable by primary key from a URL or form value
ENTITY_TYPES = (Course, Department, Instructor, Student)


def init_database(app: Flask) -> None:
    """
    Bind the Flask-SQLAlchemy instance to the application.

    Args:
        app: Flask application instance

    Raises:
        DatabaseError: If the database URI is missing or the extension fails to load
    """
    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        raise DatabaseError("Database URI not configured. Set DATABASE_URL environment variable.")

    try:
        db.init_app(app)
    except Exception as e:
        raise DatabaseError(f"Database initialization failed: {str(e)}") from e

    logger.info("Database initialized for %s", app.config['SQLALCHEMY_DATABASE_URI'].split('://')[0])


def create_schema() -> None:
    """Create all tables for the registered models (requires an app context)."""
    db.create_all()
    logger.info("Database schema created")


def get_database_health() -> Dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict containing status and, on failure, the error text
    """
    try:
        db.session.execute(text('SELECT 1')).scalar()
        return {'status': 'healthy', 'database_accessible': True}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {'status': 'unhealthy', 'database_accessible': False, 'error': str(e)}


__all__ = [
    'db',
    'BaseModel',
    'DatabaseError',
    'FieldSpec',
    'get_field_spec',
    'validate_fields',
    'Grade',
    'NO_GRADE',
    'Course',
    'CourseAssignment',
    'Department',
    'Enrollment',
    'Instructor',
    'OfficeAssignment',
    'Student',
    'ENTITY_TYPES',
    'init_database',
    'create_schema',
    'get_database_health',
]
