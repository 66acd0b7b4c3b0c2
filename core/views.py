from django.contrib.auth.decorators import login_required
from django.http import JsonResponse


def health(request):
    """Liveness check for the load balancer."""
    return JsonResponse({'status': 'ok'})


@login_required
def index(request):
    """Tell the client which area of the application the signed-in user belongs to."""
    user = request.user
    data = {
        'email': user.email,
        'role': user.role_label,
        'must_change_password': user.must_change_password,
    }

    if getattr(user, 'is_student', False):
        student = getattr(user, 'student_profile', None)
        data['student_id'] = student.student_id if student else None
    elif getattr(user, 'is_faculty', False):
        staff = getattr(user, 'staff_profile', None)
        data['staff_id'] = staff.staff_id if staff else None

    return JsonResponse(data)
