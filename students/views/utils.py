from core.exceptions import NotFoundError


def get_current_student(request):
    """The Student profile of the signed-in user."""
    student = getattr(request.user, 'student_profile', None)
    if student is None:
        raise NotFoundError('Student not found')
    return student
