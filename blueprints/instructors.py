"""
Instructors pages.

GET /instructors/?id=<instructor>&course_id=<course>
    Lists instructors; ``id`` selects an instructor and shows their courses,
    ``course_id`` selects a course and shows its enrollments. Malformed values
    are treated as absent.
"""

import logging

from flask import Blueprint, render_template, request

from services import get_mediator, instructors
from services.cancellation import current_cancel_token

logger = logging.getLogger(__name__)

instructors_bp = Blueprint('instructors', __name__, url_prefix='/instructors')


@instructors_bp.route('/', methods=['GET'])
def index():
    query = instructors.IndexQuery(
        id=request.args.get('id', type=int),
        course_id=request.args.get('course_id', type=int),
    )
    model = get_mediator().send(query, current_cancel_token())
    return render_template(
        'instructors/index.html',
        model=model,
        instructor_view=instructors.InstructorView,
        course_view=instructors.CourseView,
        enrollment_view=instructors.EnrollmentView,
    )
