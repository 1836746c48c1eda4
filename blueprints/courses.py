"""
Course pages: index, details and edit.

Details and edit bind the course from the URL through the entity model binder.
The edit form is checked against the course field configuration before anything
is sent; an invalid form is re-rendered with its messages and status 400.
"""

import logging
from typing import Dict, List, Optional, Tuple

from flask import Blueprint, redirect, render_template, request, url_for

from models import Course, validate_fields
from services import courses, get_mediator
from services.cancellation import current_cancel_token
from services.errors import ValidationError

from blueprints.binders import bind_entity

logger = logging.getLogger(__name__)

courses_bp = Blueprint('courses', __name__, url_prefix='/courses')

FormErrors = Dict[str, List[str]]


@courses_bp.route('/', methods=['GET'])
def index():
    model = get_mediator().send(courses.IndexQuery(), current_cancel_token())
    return render_template('courses/index.html', model=model, row_type=courses.CourseRow)


@courses_bp.route('/<int:course_id>', methods=['GET'])
def details(course_id: int):
    course = bind_entity(Course, course_id)
    return render_template('courses/details.html', course=course)


def parse_edit_form(course_id: int, form) -> Tuple[Dict[str, str], FormErrors, Optional[courses.EditCommand]]:
    """
    Read and validate the course edit form.

    Returns:
        The submitted values (for re-rendering), the field errors, and the
        command to send when there are no errors
    """
    values = {
        'title': form.get('title', '').strip(),
        'credits': form.get('credits', '').strip(),
        'department_id': form.get('department_id', '').strip(),
    }
    errors: FormErrors = {}

    credits = None
    if values['credits']:
        try:
            credits = int(values['credits'])
        except ValueError:
            errors['credits'] = ["Credits must be a whole number."]

    department_id = None
    try:
        department_id = int(values['department_id'])
    except ValueError:
        errors['department_id'] = ["Department is required."]

    fields = {'title': values['title'] or None}
    if 'credits' not in errors:
        fields['credits'] = credits
    errors.update(validate_fields(Course, fields))

    if errors:
        return values, errors, None

    command = courses.EditCommand(
        id=course_id,
        title=values['title'],
        credits=credits,
        department_id=department_id,
    )
    return values, errors, command


@courses_bp.route('/<int:course_id>/edit', methods=['GET', 'POST'])
def edit(course_id: int):
    course = bind_entity(Course, course_id)

    if request.method == 'GET':
        values = {
            'title': course.title,
            'credits': str(course.credits),
            'department_id': str(course.department_id),
        }
        return render_template('courses/edit.html', course=course, values=values, errors={})

    values, errors, command = parse_edit_form(course.id, request.form)
    if command is None:
        logger.info(f"Course {course.id} edit rejected: {sorted(errors)}")
        return render_template('courses/edit.html', course=course, values=values, errors=errors), 400

    try:
        get_mediator().send(command, current_cancel_token())
    except ValidationError as e:
        return render_template('courses/edit.html', course=course, values=values, errors=e.errors), 400

    return redirect(url_for('courses.details', course_id=course.id))
