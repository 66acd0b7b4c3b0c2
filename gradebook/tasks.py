"""
Celery tasks for gradebook app.
Recomputes cached standing and repairs semester advancement that was skipped
when a grading event could not advance the student.
"""
import logging

from celery import shared_task
from django.db import DatabaseError

from core.exceptions import NotFoundError
from . import config
from .advancement import should_advance


logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=config.TASK_MAX_RETRIES,
    default_retry_delay=config.TASK_RETRY_DELAY,
)
def recompute_student_standing(self, student_pk, semester=None):
    """
    Recompute GPA/CGPA for one student and re-check advancement.

    Args:
        student_pk: primary key of the Student
        semester: semester whose GPA to recompute (defaults to the current one)

    Retries with exponential backoff on database errors.
    """
    from .services import GradebookService

    service = GradebookService()
    try:
        student = service.repository.get_student_by_pk(student_pk)
    except NotFoundError:
        # Non-retryable - student is gone
        logger.error(f"Student {student_pk} not found")
        return {'success': False, 'error': 'Student not found'}

    semester = semester or student.semester
    try:
        standing = service.recompute_standing(student, semester)
    except DatabaseError as e:
        logger.warning(f"Standing recompute failed for {student.student_id}, retrying: {e}")
        raise self.retry(exc=e, countdown=config.TASK_RETRY_DELAY * (2 ** self.request.retries))

    advanced = service.evaluate_advancement(student, semester)
    return {
        'success': True,
        'student_id': student.student_id,
        'gpa': str(standing.gpa),
        'cgpa': str(standing.cgpa),
        'advanced': advanced,
    }


@shared_task
def reconcile_semester_advancement():
    """
    Advance every active student whose current semester has graded
    enrollments and none still open.

    Scheduled periodically; picks up students whose advancement failed after
    a grading event.
    """
    from .repository import GradebookRepository

    repository = GradebookRepository()
    checked = 0
    advanced = 0

    for student in repository.active_students().iterator(chunk_size=config.RECONCILE_BATCH_SIZE):
        checked += 1
        semester = student.semester
        if not repository.has_graded_enrollments_in(student, semester):
            continue
        open_enrollments = repository.open_enrollment_count(student, semester)
        if not should_advance(student.semester, semester, open_enrollments):
            continue
        try:
            if repository.advance_semester(student, semester):
                advanced += 1
                logger.info(f"Reconcile: {student.student_id} advanced to semester {semester + 1}")
        except DatabaseError:
            logger.exception(f"Reconcile: could not advance {student.student_id}")

    logger.info(f"Semester advancement reconcile checked {checked} student(s), advanced {advanced}")
    return {'checked': checked, 'advanced': advanced}
