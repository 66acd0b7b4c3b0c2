import logging
from datetime import datetime

from django.db.models import Q
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from core.exceptions import ValidationError
from core.utils import faculty_or_admin_required, is_records_admin, records_admin_required, records_endpoint
from gradebook.ledger import EnrollmentStatus
from gradebook.serializers import student_to_dict
from students.exporters import export_students
from students.importers import import_roster, read_roster
from students.models import Student
from .importers import import_staff, read_staff_sheet
from .utils import get_acting_staff

logger = logging.getLogger(__name__)

EXPORT_STATUSES = (EnrollmentStatus.ENROLLED, EnrollmentStatus.COMPLETED, EnrollmentStatus.BACKLOG)


@require_GET
@faculty_or_admin_required
@records_endpoint
def profile(request):
    staff = get_acting_staff(request)
    return JsonResponse({
        'success': True,
        'data': {
            'id': staff.pk,
            'staff_id': staff.staff_id,
            'name': staff.name,
            'email': staff.email,
            'department': staff.department,
            'date_of_birth': staff.date_of_birth.isoformat() if staff.date_of_birth else None,
            'contact': staff.contact,
            'status': staff.status,
            'student_count': staff.students.count(),
        },
    })


@require_GET
@faculty_or_admin_required
@records_endpoint
def students(request):
    """
    The acting staff member's roster. Optional filters: ``semester``,
    ``department`` and ``search`` (register number or name).
    """
    staff = get_acting_staff(request)
    qs = staff.students.all()

    semester = request.GET.get('semester', '').strip()
    if semester.isdigit():
        qs = qs.filter(semester=int(semester))
    department = request.GET.get('department', '').strip()
    if department:
        qs = qs.filter(department=department)
    search = request.GET.get('search', '').strip()
    if search:
        qs = qs.filter(Q(student_id__icontains=search) | Q(name__icontains=search))

    data = [student_to_dict(s) for s in qs.order_by('student_id')]
    return JsonResponse({'success': True, 'count': len(data), 'data': data})


@require_POST
@faculty_or_admin_required
@records_endpoint
def roster_import(request):
    """Upload a roster sheet (.xlsx/.csv); new students are assigned to the uploader."""
    staff = get_acting_staff(request)
    file = request.FILES.get('file')
    if not file:
        raise ValidationError('Please select a file to upload.')

    processed, errors = import_roster(read_roster(file), staff)
    created = sum(1 for item in processed if item['status'] == 'created')
    return JsonResponse({
        'success': True,
        'message': f'{created} created, {len(processed) - created} updated',
        'processed': processed,
        'errors': errors,
    })


@require_POST
@records_admin_required
@records_endpoint
def staff_upload(request):
    """Bulk create/update staff from an .xlsx/.csv sheet."""
    file = request.FILES.get('file')
    if not file:
        raise ValidationError('Please select a file to upload.')

    processed = import_staff(read_staff_sheet(file))
    return JsonResponse({
        'success': True,
        'message': f'{len(processed)} staff members processed',
        'data': processed,
    })


@require_GET
@faculty_or_admin_required
@records_endpoint
def student_export(request):
    """
    Download students as .xlsx. Administrators export every student, staff
    their own roster. Optional filters: ``semester``, ``regulation``,
    ``department``, and ``course`` (with ``status``) for a class list, which
    uses the brief layout.
    """
    if is_records_admin(request.user):
        qs = Student.objects.all()
    else:
        qs = get_acting_staff(request).students.all()

    semester = request.GET.get('semester', '').strip()
    if semester.isdigit():
        qs = qs.filter(semester=int(semester))
    regulation = request.GET.get('regulation', '').strip()
    if regulation.isdigit():
        qs = qs.filter(regulation=int(regulation))
    department = request.GET.get('department', '').strip()
    if department:
        qs = qs.filter(department=department)

    course = request.GET.get('course', '').strip()
    if course:
        if not course.isdigit():
            raise ValidationError('course must be a course id', course=course)
        status = request.GET.get('status', '').strip()
        statuses = [status] if status else list(EXPORT_STATUSES)
        qs = qs.filter(enrollments__course_id=int(course), enrollments__status__in=statuses).distinct()

    output = export_students(qs.order_by('student_id'), brief=bool(course))
    response = HttpResponse(
        output.getvalue(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    filename = f"students_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
