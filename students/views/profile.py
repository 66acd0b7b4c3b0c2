from django.http import JsonResponse
from django.views.decorators.http import require_GET

from core.utils import records_endpoint, student_required
from gradebook.policy import GradingPolicy
from gradebook.repository import GradebookRepository
from gradebook.serializers import grade_record_to_dict, student_to_dict, supplementary_to_dict
from .utils import get_current_student


@require_GET
@student_required
@records_endpoint
def profile(request):
    student = get_current_student(request)
    data = student_to_dict(student)
    data.update({
        'date_of_birth': student.date_of_birth.isoformat() if student.date_of_birth else None,
        'contact': student.contact,
        'parent_contact': student.parent_contact,
        'father_name': student.father_name,
        'mother_name': student.mother_name,
        'address': student.address,
        'staff_of_record': student.created_by.name,
    })
    return JsonResponse({'success': True, 'data': data})


@require_GET
@student_required
@records_endpoint
def grades(request):
    """The student's grade sheet: regular grade records plus graded supplementary courses."""
    student = get_current_student(request)
    repository = GradebookRepository()
    policy = GradingPolicy.from_settings()

    records = [grade_record_to_dict(r) for r in repository.grade_records_for(student)]
    supplementary = [
        supplementary_to_dict(s, policy) for s in repository.supplementary_for(student)
        if s.is_graded
    ]
    return JsonResponse({
        'success': True,
        'gpa': str(student.gpa),
        'cgpa': str(student.cgpa),
        'semester': student.semester,
        'count': len(records) + len(supplementary),
        'data': records + supplementary,
        'default_supplementary_credits': policy.supplementary_default_credits,
    })
