from core.exceptions import ForbiddenError


def staff_owns_student(staff, student):
    """Only the staff member who created a student's record may grade them."""
    return staff is not None and staff.owns(student)


def get_staff_for_user(user):
    """The Staff profile linked to ``user``, or None."""
    return getattr(user, 'staff_profile', None)


def get_acting_staff(request):
    """The Staff profile behind the request; staff endpoints need one even for admins."""
    staff = get_staff_for_user(request.user)
    if staff is None:
        raise ForbiddenError('No staff profile is linked to this account')
    return staff
