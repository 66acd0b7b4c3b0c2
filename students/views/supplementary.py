from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from core.exceptions import ValidationError
from core.utils import parse_json_body, records_endpoint, student_required
from gradebook.serializers import supplementary_to_dict
from ..catalog import search_external_catalog
from ..services import drop_external, enroll_supplementary, touch_external
from .utils import get_current_student


@require_GET
@student_required
@records_endpoint
def catalog_search(request):
    """Search the external lecture catalogue. Query params: ``q``, ``max_results``."""
    try:
        max_results = int(request.GET.get('max_results', 0)) or None
    except ValueError:
        raise ValidationError('max_results must be a number')

    courses = search_external_catalog(request.GET.get('q', ''), max_results)
    return JsonResponse({'success': True, 'count': len(courses), 'data': courses})


@require_GET
@student_required
@records_endpoint
def supplementary_list(request):
    student = get_current_student(request)
    enrollments = student.supplementary_enrollments.all()
    return JsonResponse({
        'success': True,
        'count': len(enrollments),
        'data': [supplementary_to_dict(e) for e in enrollments],
    })


@require_POST
@student_required
@records_endpoint
def supplementary_enroll(request):
    student = get_current_student(request)
    data = parse_json_body(request)
    enrollment = enroll_supplementary(
        student,
        data.get('external_id'),
        data.get('title'),
        description=data.get('description'),
        thumbnail_url=data.get('thumbnail_url'),
        video_url=data.get('video_url'),
        instructor=data.get('instructor'),
    )
    return JsonResponse({
        'success': True,
        'message': 'Successfully enrolled in course',
        'data': supplementary_to_dict(enrollment),
    }, status=201)


@require_POST
@student_required
@records_endpoint
def supplementary_drop(request, external_id):
    student = get_current_student(request)
    enrollment = drop_external(student, external_id)
    return JsonResponse({
        'success': True,
        'message': 'Successfully dropped course',
        'data': supplementary_to_dict(enrollment),
    })


@require_POST
@student_required
@records_endpoint
def supplementary_access(request, external_id):
    student = get_current_student(request)
    touch_external(student, external_id)
    return JsonResponse({'success': True, 'message': 'Access time updated successfully'})
