from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from core.exceptions import ValidationError
from core.utils import records_admin_required, records_endpoint
from gradebook.serializers import course_to_dict
from .importers import import_courses, read_course_sheet
from .models import Course, Regulation


@require_GET
@login_required
def course_list(request):
    """
    Active catalogue courses. Optional filters: ``regulation``, ``semester``,
    ``department``, ``course_type`` and ``search`` (code or name).
    """
    courses = Course.objects.filter(is_active=True)

    regulation = request.GET.get('regulation', '').strip()
    if regulation.isdigit():
        courses = courses.filter(regulation=int(regulation))
    semester = request.GET.get('semester', '').strip()
    if semester.isdigit():
        courses = courses.filter(semester=int(semester))
    course_type = request.GET.get('course_type', '').strip()
    if course_type:
        courses = courses.filter(course_type=course_type)

    data = [course_to_dict(c) for c in courses.order_by('semester', 'code')]

    # departments is a JSON list; filter after loading
    department = request.GET.get('department', '').strip()
    if department:
        data = [c for c in data if department in (c['departments'] or [])]
    search = request.GET.get('search', '').strip().lower()
    if search:
        data = [c for c in data if search in c['code'].lower() or search in c['name'].lower()]

    return JsonResponse({'success': True, 'count': len(data), 'data': data})


@require_GET
@login_required
def regulation_list(request):
    regulations = Regulation.objects.filter(is_active=True)
    data = [
        {'year': r.year, 'name': r.name, 'description': r.description}
        for r in regulations
    ]
    return JsonResponse({'success': True, 'count': len(data), 'data': data})


@require_GET
@login_required
def instructor_list(request):
    """Distinct instructor names across the catalogue."""
    names = set()
    for instructors in Course.objects.values_list('instructors', flat=True):
        names.update(instructors or [])
    data = sorted(names)
    return JsonResponse({'success': True, 'count': len(data), 'data': data})


@require_POST
@records_admin_required
@records_endpoint
def course_upload(request):
    """Bulk create/update catalogue courses from an .xlsx/.csv sheet."""
    file = request.FILES.get('file')
    if not file:
        raise ValidationError('Please select a file to upload.')

    processed = import_courses(read_course_sheet(file))
    return JsonResponse({
        'success': True,
        'message': f'{len(processed)} courses processed',
        'data': processed,
    })
