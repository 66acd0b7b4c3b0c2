import logging

from django.views.decorators.http import require_GET, require_POST

from core.exceptions import ForbiddenError, ValidationError
from core.utils import parse_json_body, records_endpoint, faculty_or_admin_required
from staff.utils import get_acting_staff, staff_owns_student
from .base import get_client_ip, success
from ..serializers import (
    enrollment_to_dict,
    graded_result_to_dict,
    standing_to_dict,
    student_to_dict,
    supplementary_to_dict,
)
from ..services import GradebookService

logger = logging.getLogger(__name__)


@require_POST
@faculty_or_admin_required
@records_endpoint
def record_grade(request):
    """Record one grade for one of the acting staff member's students."""
    data = parse_json_body(request)
    staff = get_acting_staff(request)

    for field in ('student_id', 'course_id', 'grade', 'semester'):
        if data.get(field) in (None, ''):
            raise ValidationError('Please provide studentId, courseId, grade, and semester')

    service = GradebookService()
    result = service.record_grade(
        staff,
        data['student_id'],
        data['course_id'],
        data['grade'],
        data['semester'],
        include_in_gpa=data.get('include_in_gpa'),
    )
    student = service.repository.get_student(data['student_id'])
    logger.info(f"Grade entry by {staff.staff_id} from {get_client_ip(request)}")

    return success(
        status=201,
        message='Grade recorded successfully',
        grade=graded_result_to_dict(result, service.policy),
        student=student_to_dict(student),
    )


@require_POST
@faculty_or_admin_required
@records_endpoint
def record_grades_batch(request):
    """Record several grades for one student and semester."""
    data = parse_json_body(request)
    staff = get_acting_staff(request)

    if not data.get('student_id') or not data.get('semester') or not isinstance(data.get('grades'), list):
        raise ValidationError('Please provide studentId, semester, and grades array')

    service = GradebookService()
    result = service.record_grades_batch(staff, data['student_id'], data['semester'], data['grades'])
    student = service.repository.get_student(data['student_id'])

    return success(
        status=201,
        message=f'{len(result.records)} grade(s) recorded successfully',
        grades=[graded_result_to_dict(record, service.policy) for record in result.records],
        rejected=result.rejected,
        standing=standing_to_dict(result.standing),
        advanced=result.advanced,
        student=student_to_dict(student),
    )


@require_GET
@faculty_or_admin_required
@records_endpoint
def gradable_courses(request, student_id):
    """Courses the acting staff member can grade for a student."""
    staff = get_acting_staff(request)
    service = GradebookService()
    student = service.repository.get_student(student_id)
    if not staff_owns_student(staff, student):
        raise ForbiddenError('You do not have permission to view this student')

    enrollments, supplementary = service.gradable_courses(student)
    courses = [enrollment_to_dict(e) for e in enrollments]
    courses += [supplementary_to_dict(s, service.policy) for s in supplementary]
    return success(student=student_to_dict(student), courses=courses)
