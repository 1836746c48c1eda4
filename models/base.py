"""
Base Model Classes and Field Configuration for Flask-SQLAlchemy

This module provides the foundational model architecture for the university records
schema: the shared Flask-SQLAlchemy instance, the common model base class, and the
explicit per-field configuration (length bounds, numeric ranges, display names) that
ORM validators, form validation and display labels all read from.

Key Components:
- db: Global Flask-SQLAlchemy instance initialized by the application factory
- FieldSpec: Declarative field constraints and display metadata
- BaseModel: Abstract model base with serialization and field-spec validation helpers
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.inspection import inspect

# Configure logging for base model operations
logger = logging.getLogger(__name__)

# Global SQLAlchemy instance (initialized by the Flask app factory)
db = SQLAlchemy()


class DatabaseError(Exception):
    """Custom exception for database initialization and configuration errors."""
    pass


@dataclass(frozen=True)
class FieldSpec:
    """
    Validation and display configuration for a single model field.

    Attributes:
        display_name: Human readable label used by forms and templates
        min_length: Minimum string length (inclusive)
        max_length: Maximum string length (inclusive)
        minimum: Minimum numeric value (inclusive)
        maximum: Maximum numeric value (inclusive)
        required: Whether a value must be present
        null_display: Text shown when the value is None
        date_format: strftime format used when the value is a date
    """
    display_name: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    required: bool = False
    null_display: str = ''
    date_format: Optional[str] = None

    def validate(self, value: Any) -> List[str]:
        """
        Check a value against this field configuration.

        Args:
            value: Candidate field value

        Returns:
            List of human readable violations, empty when the value is valid
        """
        label = self.display_name or 'Value'
        if value is None or (isinstance(value, str) and not value.strip()):
            return [f"{label} is required."] if self.required else []

        errors = []
        if isinstance(value, str):
            length = len(value)
            if self.min_length is not None and length < self.min_length:
                errors.append(
                    f"{label} must be between {self.min_length} and "
                    f"{self.max_length} characters long."
                    if self.max_length is not None
                    else f"{label} must be at least {self.min_length} characters long."
                )
            elif self.max_length is not None and length > self.max_length:
                errors.append(f"{label} must be at most {self.max_length} characters long.")
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            too_low = self.minimum is not None and value < self.minimum
            too_high = self.maximum is not None and value > self.maximum
            if too_low or too_high:
                if self.minimum is not None and self.maximum is not None:
                    errors.append(f"{label} must be between {self.minimum:g} and {self.maximum:g}.")
                elif too_low:
                    errors.append(f"{label} must be at least {self.minimum:g}.")
                else:
                    errors.append(f"{label} must be at most {self.maximum:g}.")
        return errors

    def format(self, value: Any) -> str:
        """Render a value for display, honoring null text and date formats."""
        if value is None:
            return self.null_display
        if isinstance(value, Enum):
            return str(value.value)
        if self.date_format and isinstance(value, (date, datetime)):
            return value.strftime(self.date_format)
        return str(value)


def get_field_spec(target: Any, field_name: str) -> Optional[FieldSpec]:
    """
    Look up the FieldSpec declared for a field on a model class or instance.

    Args:
        target: Model class, view model class, or an instance of either
        field_name: Attribute name

    Returns:
        The declared FieldSpec, or None when the field carries no configuration
    """
    cls = target if isinstance(target, type) else type(target)
    for klass in cls.__mro__:
        specs = klass.__dict__.get('__field_specs__')
        if specs and field_name in specs:
            return specs[field_name]
    return None


def validate_fields(target: Any, data: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Validate a mapping of field values against the FieldSpecs of a model.

    Fields without a spec are ignored.

    Returns:
        Mapping of field name to violations, only for invalid fields
    """
    errors = {}
    for name, value in data.items():
        spec = get_field_spec(target, name)
        if spec is None:
            continue
        problems = spec.validate(value)
        if problems:
            errors[name] = problems
    return errors


class BaseModel(db.Model):
    """
    Abstract base class for all university records models.

    Provides serialization and FieldSpec-driven validation shared by every
    entity. Concrete models declare their own primary keys because some
    identities (Course) are assigned externally.
    """

    __abstract__ = True

    __field_specs__: ClassVar[Dict[str, FieldSpec]] = {}

    def check_field(self, key: str, value: Any) -> Any:
        """
        Validate a value against the field's FieldSpec for use in @validates hooks.

        Raises:
            ValueError: If the value violates the configured constraints
        """
        spec = get_field_spec(self, key)
        if spec is not None:
            problems = spec.validate(value)
            if problems:
                raise ValueError(' '.join(problems))
        return value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model column values to a dictionary.

        Returns:
            Dictionary keyed by column attribute name
        """
        result = {}
        for column in inspect(self.__class__).column_attrs:
            value = getattr(self, column.key)
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            elif isinstance(value, Enum):
                value = value.value
            result[column.key] = value
        return result

    def __repr__(self) -> str:
        identity = inspect(self).identity
        return f"<{self.__class__.__name__} {identity!r}>"


__all__ = [
    'db',
    'BaseModel',
    'DatabaseError',
    'FieldSpec',
    'get_field_spec',
    'validate_fields',
]
