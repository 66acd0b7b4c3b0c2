import logging

from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from core.exceptions import ValidationError
from core.utils import parse_json_body, records_endpoint, student_required
from gradebook.serializers import course_to_dict, enrollment_to_dict
from gradebook.services import GradebookService
from .utils import get_current_student

logger = logging.getLogger(__name__)


@require_GET
@student_required
@records_endpoint
def available_courses(request):
    """Courses the student can pick this semester, backlog re-attempts included."""
    student = get_current_student(request)
    current, backlogs = GradebookService().available_courses(student)

    data = [dict(course_to_dict(c), is_backlog=False) for c in current]
    data += [enrollment_to_dict(e) for e in backlogs]
    return JsonResponse({
        'success': True,
        'count': len(data),
        'current_semester_count': len(current),
        'backlog_count': len(backlogs),
        'data': data,
    })


@require_GET
@student_required
@records_endpoint
def enrolled_courses(request):
    student = get_current_student(request)
    grouped = GradebookService().enrolled_courses(student)
    current = [
        e for e in grouped['enrolled']
        if e.original_semester == student.semester
    ]
    carried = [e for e in grouped['enrolled'] if e.original_semester != student.semester]

    return JsonResponse({
        'success': True,
        'semester': student.semester,
        'current': [enrollment_to_dict(e) for e in current + carried],
        'backlog': [enrollment_to_dict(e) for e in grouped['backlog']],
        'dropped': [enrollment_to_dict(e) for e in grouped['dropped']],
        'completed': [enrollment_to_dict(e) for e in grouped['completed']],
    })


@require_POST
@student_required
@records_endpoint
def enroll(request):
    """
    Enroll in a batch of courses. Body: ``{"course_ids": [...], "instructors": {course_id: name}}``.
    The whole batch is accepted or rejected.
    """
    student = get_current_student(request)
    data = parse_json_body(request)
    course_ids = data.get('course_ids')
    if not isinstance(course_ids, list) or not course_ids:
        raise ValidationError('Please provide course IDs to enroll')

    instructors = data.get('instructors') or {}
    if not isinstance(instructors, dict):
        raise ValidationError('Instructor choices must be an object keyed by course ID')

    enrolled = GradebookService().enroll(student, course_ids, instructor_choices=instructors)
    return JsonResponse({
        'success': True,
        'message': f'Successfully enrolled in {len(enrolled)} course(s)',
        'data': [enrollment_to_dict(e) for e in enrolled],
    }, status=201)


@require_POST
@student_required
@records_endpoint
def drop(request):
    student = get_current_student(request)
    data = parse_json_body(request)
    result = GradebookService().drop_courses(student, data.get('course_ids'))
    return JsonResponse({
        'success': True,
        'message': f'Successfully dropped {len(result.dropped)} course(s)',
        'dropped': result.dropped,
        'rejected': result.rejected,
    })
