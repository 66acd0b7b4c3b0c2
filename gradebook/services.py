"""
Enrollment, grading and progression operations.

``GradebookService`` is what the views (and Celery tasks) call. It gets its
persistence through a ``GradebookRepository`` and its rules through a
``GradingPolicy``, both injectable. Every operation validates its whole input
before writing anything; writes run inside ``transaction.atomic()``.

Semester advancement runs after the grade write commits. If it fails the
grade stays recorded, the failure is logged, and the periodic reconcile task
picks the student up again.
"""
import logging
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from staff.utils import staff_owns_student
from .advancement import should_advance
from .aggregator import Standing, compute_standing
from .credit_load import plan_enrollment
from .ledger import EnrollmentStatus, apply_grade, drop, is_droppable, reactivate, reenroll
from .models import Enrollment, GradeRecord
from .policy import GradingPolicy
from .repository import GradebookRepository

logger = logging.getLogger(__name__)


@dataclass
class DropResult:
    dropped: List = field(default_factory=list)
    rejected: List = field(default_factory=list)


@dataclass
class BatchGradeResult:
    records: List = field(default_factory=list)
    rejected: List = field(default_factory=list)
    standing: Optional[Standing] = None
    advanced: bool = False


class GradeTarget(NamedTuple):
    """What a grade reference resolved to: a catalogue course or a supplementary enrollment."""
    course: object = None
    enrollment: object = None
    supplementary: object = None

    @property
    def is_supplementary(self):
        return self.supplementary is not None

    @property
    def key(self):
        if self.is_supplementary:
            return ('supplementary', self.supplementary.pk)
        return ('course', self.course.pk)


class GradebookService:

    def __init__(self, repository=None, policy=None):
        self.repository = repository or GradebookRepository()
        self.policy = policy or GradingPolicy.from_settings()

    # ============ Enrollment ============

    def enroll(self, student, course_ids, instructor_choices=None):
        """
        Enroll ``student`` in ``course_ids`` as one all-or-nothing batch.

        Backlog courses are re-attempted in place; everything else must be
        for the current semester and keep the semester load inside the
        credit band. Returns the enrolled ledger rows.
        """
        if not isinstance(course_ids, (list, tuple)) or not course_ids:
            raise ValidationError('Please provide course IDs to enroll')

        courses, unknown = self.repository.get_courses(course_ids)
        if unknown:
            raise ValidationError('Some courses do not exist', unknown_courses=unknown)

        existing = self.repository.enrollments_for(student)
        plan = plan_enrollment(student.semester, courses, existing, self.policy)
        choices = {str(key): value for key, value in (instructor_choices or {}).items()}

        enrolled = []
        with transaction.atomic():
            for enrollment in plan.reattempts:
                reenroll(enrollment)
                enrollment.instructor = enrollment.course.resolve_instructor(choices.get(str(enrollment.course_id)))
                enrolled.append(self.repository.save_enrollment(enrollment))

            for enrollment in plan.reactivations:
                reactivate(enrollment)
                enrollment.instructor = enrollment.course.resolve_instructor(choices.get(str(enrollment.course_id)))
                enrolled.append(self.repository.save_enrollment(enrollment))

            for course in plan.new_courses:
                enrolled.append(self.repository.create_enrollment(
                    student,
                    course,
                    original_semester=student.semester,
                    instructor=course.resolve_instructor(choices.get(str(course.pk))),
                ))

        logger.info(
            f"Enrolled {student.student_id} in {len(enrolled)} course(s) "
            f"({len(plan.reattempts)} backlog re-attempt(s), {plan.total_credits} credits this semester)"
        )
        return enrolled

    def drop_courses(self, student, course_ids):
        """
        Drop supplementary-type courses from the current semester.

        Valid items are dropped even when others are rejected; a request in
        which nothing can be dropped is a ValidationError.
        """
        if not isinstance(course_ids, (list, tuple)) or not course_ids:
            raise ValidationError('Please provide course IDs to drop')

        courses, unknown = self.repository.get_courses(course_ids)
        by_course = {e.course_id: e for e in self.repository.enrollments_for(student)}
        result = DropResult(rejected=list(unknown))

        with transaction.atomic():
            for course in {c.pk: c for c in courses}.values():
                enrollment = by_course.get(course.pk)
                if enrollment is not None and is_droppable(
                    enrollment, course, student.semester, self.policy.supplementary_course_type
                ):
                    drop(enrollment)
                    self.repository.save_enrollment(enrollment)
                    result.dropped.append(course.pk)
                else:
                    result.rejected.append(course.pk)

        if not result.dropped:
            raise ValidationError(
                f"No valid {self.policy.supplementary_course_type} courses found to drop. "
                f"Only current semester {self.policy.supplementary_course_type} courses can be dropped.",
                dropped=[],
                rejected=result.rejected,
            )

        if result.rejected:
            logger.warning(f"Drop for {student.student_id}: rejected {result.rejected}")
        logger.info(f"Dropped {len(result.dropped)} course(s) for {student.student_id}")
        return result

    # ============ Grading ============

    def record_grade(self, staff, student_id, course_id, letter_grade, semester, include_in_gpa=None):
        """
        Record one grade and bring the ledger and GPA/CGPA in line with it.

        Returns the ``GradeRecord`` (or the ``SupplementaryEnrollment`` for a
        prefixed supplementary reference).
        """
        student = self.repository.get_student(student_id)
        self._check_owner(staff, student)
        semester = self._validate_semester(semester)
        if not letter_grade or not str(letter_grade).strip():
            raise ValidationError('Please provide a grade')
        target = self._resolve_target(student, course_id)

        with transaction.atomic():
            record = self._apply(staff, student, target, letter_grade, semester, include_in_gpa)
            standing = self.recompute_standing(student, semester)

        logger.info(
            f"Grade {record.letter_grade} recorded for {student.student_id} in {course_id} "
            f"(semester {semester}); GPA={standing.gpa} CGPA={standing.cgpa}"
        )
        self.evaluate_advancement(student, semester)
        return record

    def record_grades_batch(self, staff, student_id, semester, entries):
        """
        Record several grades for one student and semester.

        Every entry is checked before anything is written; bad entries are
        returned in ``rejected`` with a reason. GPA/CGPA and advancement are
        evaluated once, after the last grade.
        """
        student = self.repository.get_student(student_id)
        self._check_owner(staff, student)
        semester = self._validate_semester(semester)
        if not isinstance(entries, (list, tuple)) or not entries:
            raise ValidationError('Please provide studentId, semester, and grades array')

        accepted, rejected = self._validate_entries(student, entries)
        if not accepted:
            raise ValidationError('No valid grade entries', rejected=rejected)

        result = BatchGradeResult(rejected=rejected)
        with transaction.atomic():
            for entry, target in accepted:
                result.records.append(self._apply(
                    staff, student, target, entry['grade'], semester, entry.get('include_in_gpa')
                ))
            result.standing = self.recompute_standing(student, semester)

        logger.info(
            f"Batch of {len(result.records)} grade(s) recorded for {student.student_id} "
            f"(semester {semester}, {len(rejected)} rejected); "
            f"GPA={result.standing.gpa} CGPA={result.standing.cgpa}"
        )
        result.advanced = self.evaluate_advancement(student, semester)
        return result

    def _check_owner(self, staff, student):
        if not staff_owns_student(staff, student):
            raise ForbiddenError('You do not have permission to enter grades for this student')

    def _validate_semester(self, semester):
        try:
            semester = int(semester)
        except (TypeError, ValueError):
            raise ValidationError('Semester must be a positive number', semester=semester)
        if semester < 1:
            raise ValidationError('Semester must be a positive number', semester=semester)
        return semester

    def _resolve_target(self, student, course_ref):
        if course_ref is None or str(course_ref).strip() == '':
            raise ValidationError('Each grade must have courseId and grade')

        if self.policy.is_supplementary_reference(course_ref):
            supplementary = self.repository.get_supplementary(student, self.policy.external_id(course_ref))
            if supplementary is None:
                raise NotFoundError(f'Supplementary course not found: {course_ref}', course_id=course_ref)
            return GradeTarget(supplementary=supplementary)

        course = self.repository.get_course(course_ref)
        enrollment = self.repository.get_enrollment(student, course)
        if enrollment is not None and enrollment.status == EnrollmentStatus.DROPPED:
            raise ValidationError(f'Course {course.code} was dropped', course_id=course.pk)
        return GradeTarget(course=course, enrollment=enrollment)

    def _validate_entries(self, student, entries):
        accepted = []
        rejected = []
        seen = set()
        for entry in entries:
            if not isinstance(entry, dict):
                rejected.append({'course_id': None, 'reason': 'Each grade must have courseId and grade'})
                continue
            course_ref = entry.get('course_id')
            if not course_ref or not entry.get('grade'):
                rejected.append({'course_id': course_ref, 'reason': 'Each grade must have courseId and grade'})
                continue
            try:
                target = self._resolve_target(student, course_ref)
            except (NotFoundError, ValidationError) as e:
                rejected.append({'course_id': course_ref, 'reason': e.message})
                continue
            # Different spellings of one reference resolve to the same row
            if target.key in seen:
                rejected.append({'course_id': course_ref, 'reason': 'Duplicate entry for this course'})
                continue
            seen.add(target.key)
            accepted.append((entry, target))
        return accepted, rejected

    def _apply(self, staff, student, target, letter_grade, semester, include_in_gpa):
        if target.is_supplementary:
            return self._grade_supplementary(staff, target.supplementary, letter_grade, semester, include_in_gpa)
        return self._grade_course(staff, student, target, letter_grade, semester, include_in_gpa)

    def _grade_course(self, staff, student, target, letter_grade, semester, include_in_gpa):
        table = self.policy.grade_table
        course = target.course
        points = table.points_for(letter_grade)

        record = self.repository.get_grade_record(student, course)
        if record is not None:
            record.grade_points = points
            record.letter_grade = table.letter_for(points)
            record.credits = course.credits
            record.semester = semester
            record.entered_by = staff
            record.attempt += 1
            if include_in_gpa is not None:
                record.include_in_gpa = include_in_gpa is not False
        else:
            record = GradeRecord(
                student=student,
                course=course,
                grade_points=points,
                letter_grade=table.letter_for(points),
                credits=course.credits,
                semester=semester,
                original_semester=semester,
                attempt=1,
                include_in_gpa=include_in_gpa is not False,
                entered_by=staff,
            )
        self.repository.save_grade_record(record)

        enrollment = target.enrollment
        if enrollment is None:
            enrollment = Enrollment(
                student=student,
                course=course,
                original_semester=semester,
                instructor=course.default_instructor,
            )
        apply_grade(enrollment, table.normalize(letter_grade), points, semester)
        self.repository.save_enrollment(enrollment)
        return record

    def _grade_supplementary(self, staff, supplementary, letter_grade, semester, include_in_gpa):
        table = self.policy.grade_table
        supplementary.grade_points = table.points_for(letter_grade)
        supplementary.letter_grade = table.letter_for(supplementary.grade_points)
        supplementary.semester = semester
        supplementary.graded_at = timezone.now()
        supplementary.graded_by = staff
        if include_in_gpa is not None:
            supplementary.include_in_gpa = include_in_gpa is not False
        return self.repository.save_supplementary(supplementary)

    # ============ Standing ============

    def recompute_standing(self, student, semester):
        """Recompute GPA for ``semester`` and CGPA from scratch and cache them on the student."""
        items = self.repository.graded_items(student, self.policy.supplementary_default_credits)
        standing = compute_standing(items, semester)
        self.repository.save_standing(student, standing)
        return standing

    def evaluate_advancement(self, student, semester):
        """
        Advance the student past ``semester`` when nothing from it is still
        enrolled. Storage errors are logged, never raised: the grade that
        triggered this is already recorded.
        """
        try:
            open_enrollments = self.repository.open_enrollment_count(student, semester)
            if not should_advance(student.semester, semester, open_enrollments):
                return False
            advanced = self.repository.advance_semester(student, semester)
        except DatabaseError:
            logger.exception(
                f"Semester advancement failed for {student.student_id} after grading semester {semester}"
            )
            return False

        if advanced:
            logger.info(f"{student.student_id} advanced to semester {semester + 1}")
        return advanced

    # ============ Listings ============

    def available_courses(self, student):
        """Courses the student may pick this semester, plus backlog courses to re-attempt."""
        enrollments = self.repository.enrollments_for(student)
        taken = [e.course_id for e in enrollments]
        current = [
            course for course in self.repository.browsable_courses(student, taken)
            if course.is_visible_to(
                student.department,
                self.policy.shared_department,
                self.policy.supplementary_course_type,
            )
        ]
        backlogs = [e for e in enrollments if e.status == EnrollmentStatus.BACKLOG]
        return current, backlogs

    def enrolled_courses(self, student):
        """The student's ledger grouped by status."""
        grouped = {status: [] for status in EnrollmentStatus.values}
        for enrollment in self.repository.enrollments_for(student):
            grouped[enrollment.status].append(enrollment)
        return grouped

    def gradable_courses(self, student):
        """What staff can grade: open or backlog ledger rows and live supplementary enrollments."""
        enrollments = self.repository.enrollments_for(
            student, statuses=[EnrollmentStatus.ENROLLED, EnrollmentStatus.BACKLOG]
        )
        supplementary = self.repository.supplementary_for(student, include_dropped=False)
        return enrollments, supplementary
