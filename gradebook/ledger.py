"""
State machine for a student's enrollment in one course.

    enrolled  -> completed | backlog | dropped
    backlog   -> enrolled (re-attempt) | completed | backlog (direct regrade)
    completed -> completed | backlog (grade correction)
    dropped   -> enrolled (re-enrollment in the same semester)

The functions below mutate the row in memory only; callers save it.
"""
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.exceptions import ValidationError


class EnrollmentStatus(models.TextChoices):
    ENROLLED = 'enrolled', _('Enrolled')
    COMPLETED = 'completed', _('Completed')
    BACKLOG = 'backlog', _('Backlog')
    DROPPED = 'dropped', _('Dropped')


# Tuples: members hash by name, so set lookups miss plain status strings
GRADED_STATES = (EnrollmentStatus.COMPLETED, EnrollmentStatus.BACKLOG)

TRANSITIONS = {
    EnrollmentStatus.ENROLLED: (EnrollmentStatus.COMPLETED, EnrollmentStatus.BACKLOG, EnrollmentStatus.DROPPED),
    EnrollmentStatus.BACKLOG: (EnrollmentStatus.ENROLLED, EnrollmentStatus.COMPLETED, EnrollmentStatus.BACKLOG),
    EnrollmentStatus.COMPLETED: (EnrollmentStatus.COMPLETED, EnrollmentStatus.BACKLOG),
    EnrollmentStatus.DROPPED: (EnrollmentStatus.ENROLLED,),
}


class InvalidTransition(ValidationError):
    """Raised when an enrollment is asked to move to a state it cannot reach."""


def can_transition(current, target):
    return target in TRANSITIONS.get(EnrollmentStatus(current), ())


def _move(enrollment, target):
    if not can_transition(enrollment.status, target):
        raise InvalidTransition(
            f"Cannot move enrollment from {enrollment.status} to {target}",
            status=enrollment.status,
            requested=str(target),
        )
    enrollment.status = target


def apply_grade(enrollment, letter, points, semester):
    """
    Record a grading outcome. Passing (points > 0) completes the course in
    ``semester``; failing puts it in backlog and clears the cleared semester.

    Regrading an already graded row is a correction and counts as another attempt.
    """
    regrade = enrollment.status in GRADED_STATES
    passed = points > 0
    _move(enrollment, EnrollmentStatus.COMPLETED if passed else EnrollmentStatus.BACKLOG)
    if regrade:
        enrollment.attempts += 1
    enrollment.grade_earned = letter
    enrollment.credit_points = points
    enrollment.cleared_semester = semester if passed else None
    return enrollment


def reenroll(enrollment):
    """Re-attempt a backlog course: back to enrolled, one more attempt."""
    if enrollment.status != EnrollmentStatus.BACKLOG:
        raise InvalidTransition(
            "Only backlog courses can be re-attempted",
            status=enrollment.status,
        )
    _move(enrollment, EnrollmentStatus.ENROLLED)
    enrollment.attempts += 1
    return enrollment


def reactivate(enrollment):
    """Take a dropped course again."""
    _move(enrollment, EnrollmentStatus.ENROLLED)
    enrollment.attempts += 1
    return enrollment


def drop(enrollment):
    _move(enrollment, EnrollmentStatus.DROPPED)
    return enrollment


def is_droppable(enrollment, course, student_semester, droppable_type):
    """
    Only an enrolled supplementary-type course of the student's current
    semester can be dropped; required courses stay on the transcript.
    """
    return (
        enrollment.status == EnrollmentStatus.ENROLLED
        and course.course_type == droppable_type
        and course.semester == student_semester
    )
