import logging
from datetime import datetime

from django.http import HttpResponse
from django.views.decorators.http import require_GET, require_POST

from core.exceptions import ForbiddenError, ValidationError
from core.utils import records_endpoint, faculty_or_admin_required
from staff.utils import get_acting_staff, staff_owns_student
from .base import success
from ..importers import export_grade_sheet, grade_entries_from_frame, read_grade_sheet
from ..serializers import graded_result_to_dict, standing_to_dict
from ..services import GradebookService

logger = logging.getLogger(__name__)

# ============ Grade Sheet Import ============

@require_POST
@faculty_or_admin_required
@records_endpoint
def grade_import(request, student_id):
    """
    Upload a grade sheet (.xlsx/.csv) for one student and semester.

    Rows that cannot be used are reported back; the rest go through batch
    grading as one request.
    """
    staff = get_acting_staff(request)
    semester = request.POST.get('semester')
    if not semester:
        raise ValidationError('Please provide the semester being graded')

    file = request.FILES.get('file')
    if not file:
        raise ValidationError('Please select a file to upload.')

    service = GradebookService()
    df = read_grade_sheet(file)
    entries, row_errors = grade_entries_from_frame(df, service.policy)
    if not entries:
        raise ValidationError('No valid rows found in the file', row_errors=row_errors)

    result = service.record_grades_batch(staff, student_id, semester, entries)
    logger.info(
        f"Grade sheet import for {student_id} by {staff.staff_id}: "
        f"{len(result.records)} recorded, {len(row_errors)} row error(s)"
    )

    return success(
        status=201,
        message=f'{len(result.records)} grade(s) imported',
        grades=[graded_result_to_dict(record, service.policy) for record in result.records],
        rejected=result.rejected,
        row_errors=row_errors,
        standing=standing_to_dict(result.standing),
        advanced=result.advanced,
    )


# ============ Grade Sheet Export ============

@require_GET
@faculty_or_admin_required
@records_endpoint
def grade_export(request, student_id):
    """Download a student's grades as an Excel file."""
    staff = get_acting_staff(request)
    service = GradebookService()
    student = service.repository.get_student(student_id)
    if not staff_owns_student(staff, student):
        raise ForbiddenError('You do not have permission to view this student')

    output = export_grade_sheet(
        student,
        service.repository.grade_records_for(student),
        service.repository.supplementary_for(student),
        service.policy,
    )

    response = HttpResponse(
        output.getvalue(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    filename = f"grades_{student.student_id}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
