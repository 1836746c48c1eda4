"""
Integration tests for the select-list builders and the entity model binder.
"""

import pytest

from blueprints.binders import EntityModelBinder, EntityModelBinderProvider, bind_entity
from blueprints.tags import (
    DepartmentSelectBuilder,
    EntitySelectBuilder,
    InstructorSelectBuilder,
    SelectOption,
)
from models import Course, CourseAssignment, Department, Enrollment, Instructor, Student
from services.errors import NotFoundError
from tests.factories import CourseFactory, DepartmentFactory, InstructorFactory


class TestSelectBuilders:

    def test_department_options_sorted_by_name_with_blank(self, session):
        math = DepartmentFactory(name='Mathematics')
        DepartmentFactory(name='English')

        options = DepartmentSelectBuilder().options(selected=math.id)

        assert options[0] == SelectOption(value='', text='-- Select Department --', selected=False)
        assert [option.text for option in options[1:]] == ['English', 'Mathematics']
        assert [option.text for option in options if option.selected] == ['Mathematics']

    def test_blank_selected_when_nothing_is_selected(self, session):
        DepartmentFactory(name='English')

        options = DepartmentSelectBuilder().options()

        assert options[0].selected
        assert not options[1].selected

    def test_without_blank_option(self, session):
        DepartmentFactory(name='English')

        options = DepartmentSelectBuilder().options(include_blank=False)

        assert [option.text for option in options] == ['English']

    def test_instructor_options_use_full_name(self, session):
        InstructorFactory(first_mid_name='Roger', last_name='Zheng')
        harui = InstructorFactory(first_mid_name='Roger', last_name='Harui')

        options = InstructorSelectBuilder().options(selected=str(harui.id), include_blank=False)

        assert [(option.text, option.selected) for option in options] == [
            ('Roger Harui', True),
            ('Roger Zheng', False),
        ]

    def test_builder_without_option_text_cannot_be_created(self):
        class UntitledBuilder(EntitySelectBuilder):
            model_type = Department

        with pytest.raises(TypeError):
            UntitledBuilder()


class TestEntityModelBinder:

    @pytest.mark.parametrize('model_type', [Course, Department, Instructor, Student])
    def test_provider_returns_binder_for_entities(self, model_type):
        assert isinstance(EntityModelBinderProvider().get_binder(model_type), EntityModelBinder)

    @pytest.mark.parametrize('model_type', [Enrollment, CourseAssignment, str])
    def test_provider_declines_other_types(self, model_type):
        assert EntityModelBinderProvider().get_binder(model_type) is None

    def test_binds_existing_entity(self, session):
        course = CourseFactory(title='Optics')

        assert bind_entity(Course, str(course.id)).title == 'Optics'

    def test_missing_entity(self, session):
        with pytest.raises(NotFoundError) as excinfo:
            bind_entity(Department, 12345)

        assert excinfo.value.error_code == 'ENTITY_NOT_FOUND'

    def test_malformed_identifier(self, session):
        with pytest.raises(NotFoundError):
            bind_entity(Course, 'abc')

    def test_unbindable_type(self, session):
        with pytest.raises(TypeError):
            bind_entity(Enrollment, 1)
