"""Shared helpers for the JSON views: role checks, body parsing and error responses."""
import json
import logging
from functools import wraps

from django.http import JsonResponse

from .exceptions import RecordsError, ValidationError

logger = logging.getLogger(__name__)


def is_records_admin(user):
    """Check if user is an administrator or superuser."""
    return user.is_superuser or getattr(user, 'is_records_admin', False)


def is_faculty_or_admin(user):
    """Check if user is a staff member, administrator, or superuser."""
    return is_records_admin(user) or getattr(user, 'is_faculty', False)


def _role_required(check, message):
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return JsonResponse({'success': False, 'message': 'Authentication required'}, status=401)
            if not check(request.user):
                return JsonResponse({'success': False, 'message': message}, status=403)
            return view_func(request, *args, **kwargs)
        return _wrapped_view
    return decorator


records_admin_required = _role_required(is_records_admin, "Administrator access required.")
faculty_or_admin_required = _role_required(is_faculty_or_admin, "Staff access required.")
student_required = _role_required(
    lambda user: getattr(user, 'is_student', False),
    "Student access required.",
)


def parse_json_body(request):
    """Decode a JSON request body into a dict, raising ValidationError on junk."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError('Request body must be valid JSON')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def error_response(error):
    """Translate a RecordsError into a JsonResponse."""
    return JsonResponse(error.as_dict(), status=error.status_code)


def records_endpoint(view_func):
    """Turn RecordsError raised inside a view into the matching JSON error response."""
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except RecordsError as e:
            logger.warning(f"{view_func.__name__} rejected: {e.message}")
            return error_response(e)
    return _wrapped_view
