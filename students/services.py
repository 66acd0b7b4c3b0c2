"""Supplementary (external catalogue) enrollments for a student."""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from .models import SupplementaryEnrollment

logger = logging.getLogger(__name__)

SUPPLEMENTARY_FIELDS = ('description', 'thumbnail_url', 'video_url', 'instructor')


def enroll_supplementary(student, external_id, title, **details):
    """Add an external course to the student's list; the same course twice is rejected."""
    external_id = (external_id or '').strip()
    title = (title or '').strip()
    if not external_id or not title:
        raise ValidationError('Course ID and title are required')

    if SupplementaryEnrollment.objects.filter(student=student, external_id=external_id).exists():
        raise ValidationError('Already enrolled in this course', external_id=external_id)

    fields = {key: details[key] or '' for key in SUPPLEMENTARY_FIELDS if key in details}
    try:
        with transaction.atomic():
            enrollment = SupplementaryEnrollment.objects.create(
                student=student,
                external_id=external_id,
                title=title,
                **fields
            )
    except IntegrityError:
        raise ValidationError('Already enrolled in this course', external_id=external_id)

    logger.info(f"{student.student_id} enrolled in supplementary course {external_id}")
    return enrollment


def _get(student, external_id):
    try:
        return SupplementaryEnrollment.objects.get(student=student, external_id=external_id)
    except SupplementaryEnrollment.DoesNotExist:
        raise NotFoundError('Course not found in enrolled courses', external_id=external_id)


def drop_external(student, external_id):
    enrollment = _get(student, external_id)
    if enrollment.dropped:
        raise ValidationError('Course is already dropped', external_id=external_id)

    enrollment.dropped = True
    enrollment.save(update_fields=['dropped'])
    logger.info(f"{student.student_id} dropped supplementary course {external_id}")
    return enrollment


def touch_external(student, external_id):
    """Record that the student opened the course."""
    enrollment = _get(student, external_id)
    enrollment.last_accessed_at = timezone.now()
    enrollment.save(update_fields=['last_accessed_at'])
    return enrollment
