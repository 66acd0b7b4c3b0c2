"""
Errors raised by the enrollment, grading and progression services.

Views translate these into JSON responses; see ``core.utils.error_response``.
"""


class RecordsError(Exception):
    """Base class for errors the records services report to callers."""

    status_code = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def as_dict(self):
        return {'success': False, 'message': self.message, **self.details}


class ValidationError(RecordsError):
    """Malformed or policy-violating input (credit band, wrong semester, duplicates...)."""

    status_code = 400


class NotFoundError(RecordsError):
    """A referenced student, course or enrollment does not exist."""

    status_code = 404


class ForbiddenError(RecordsError):
    """The acting staff member is not the student's staff of record."""

    status_code = 403
