"""
Template helpers: entity select lists and field display labels.

Registered as Jinja globals by ``init_template_helpers``:

    department_options(selected=None, include_blank=True)
    instructor_options(selected=None, include_blank=True)
    display_label(obj, field)
    display_value(obj, field)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from flask import Flask
from sqlalchemy import select

from models import Department, Instructor, get_field_spec
from services.base_service import ContextProvider
from services.unit_of_work import get_school_context


@dataclass(frozen=True)
class SelectOption:
    value: str
    text: str
    selected: bool = False


class EntitySelectBuilder(ABC):
    """
    Builds ``<option>`` lists for one entity type.

    Subclasses set ``model_type`` and ``order_by`` and provide ``option_text``.
    """

    model_type: Any = None
    order_by: tuple = ()
    blank_text = '-- Select --'

    def __init__(self, context_provider: Optional[ContextProvider] = None) -> None:
        self._context_provider = context_provider or get_school_context

    def option_value(self, entity: Any) -> str:
        return str(entity.id)

    @abstractmethod
    def option_text(self, entity: Any) -> str:
        ...

    def entities(self) -> List[Any]:
        statement = select(self.model_type).order_by(*self.order_by)
        return list(self._context_provider().session.scalars(statement))

    def options(self, selected: Any = None, include_blank: bool = True) -> List[SelectOption]:
        selected_value = None if selected is None or selected == '' else str(selected)
        options = []
        if include_blank:
            options.append(SelectOption(value='', text=self.blank_text, selected=selected_value is None))
        for entity in self.entities():
            value = self.option_value(entity)
            options.append(SelectOption(value=value, text=self.option_text(entity), selected=value == selected_value))
        return options


class DepartmentSelectBuilder(EntitySelectBuilder):
    model_type = Department
    order_by = (Department.name,)
    blank_text = '-- Select Department --'

    def option_text(self, entity: Department) -> str:
        return entity.name


class InstructorSelectBuilder(EntitySelectBuilder):
    model_type = Instructor
    order_by = (Instructor.last_name, Instructor.first_mid_name)
    blank_text = '-- Select Instructor --'

    def option_text(self, entity: Instructor) -> str:
        return entity.full_name


def display_label(obj: Any, field: str) -> str:
    """Configured display name of ``field``, or the field name in title case."""
    spec = get_field_spec(obj, field)
    if spec is not None and spec.display_name:
        return spec.display_name
    return field.replace('_', ' ').title()


def display_value(obj: Any, field: str) -> str:
    value = getattr(obj, field)
    spec = get_field_spec(obj, field)
    if spec is not None:
        return spec.format(value)
    return '' if value is None else str(value)


def init_template_helpers(app: Flask) -> None:
    departments = DepartmentSelectBuilder()
    instructors = InstructorSelectBuilder()
    app.jinja_env.globals.update(
        department_options=departments.options,
        instructor_options=instructors.options,
        display_label=display_label,
        display_value=display_value,
    )
