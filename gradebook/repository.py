"""
Narrow persistence interface used by the gradebook services.

Every database query the enrollment and grading operations make goes through
``GradebookRepository``, so the services never look related rows up on
their own. Tests can substitute a repository or call the pure modules
(``credit_load``, ``ledger``, ``aggregator``, ``advancement``) directly.
"""
from django.db.models import F

from academics.models import Course
from core.exceptions import NotFoundError
from students.models import Student, SupplementaryEnrollment
from .ledger import GRADED_STATES, EnrollmentStatus
from .models import Enrollment, GradeRecord


def _as_pk(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class GradebookRepository:

    # ============ Students ============

    def get_student(self, student_id):
        """Look a student up by register number."""
        try:
            return Student.objects.select_related('created_by').get(student_id=student_id)
        except Student.DoesNotExist:
            raise NotFoundError('Student not found', student_id=student_id)

    def get_student_by_pk(self, pk):
        try:
            return Student.objects.select_related('created_by').get(pk=pk)
        except Student.DoesNotExist:
            raise NotFoundError('Student not found', student_pk=pk)

    def save_standing(self, student, standing):
        student.gpa = standing.gpa
        student.cgpa = standing.cgpa
        Student.objects.filter(pk=student.pk).update(gpa=standing.gpa, cgpa=standing.cgpa)

    def advance_semester(self, student, from_semester):
        """
        Move the student from ``from_semester`` to the next one.

        The filter on the current semester makes this a compare-and-set, so
        two racing grading events can advance a student at most once.
        """
        updated = Student.objects.filter(
            pk=student.pk, semester=from_semester
        ).update(semester=F('semester') + 1)
        if updated:
            student.semester = from_semester + 1
        return bool(updated)

    def active_students(self):
        return Student.objects.filter(status=Student.Status.ACTIVE).only('pk', 'semester', 'student_id')

    # ============ Courses ============

    def get_course(self, course_id):
        pk = _as_pk(course_id)
        if pk is None:
            raise NotFoundError(f'Course not found: {course_id}', course_id=course_id)
        try:
            return Course.objects.get(pk=pk)
        except Course.DoesNotExist:
            raise NotFoundError(f'Course not found: {course_id}', course_id=course_id)

    def get_courses(self, course_ids):
        """
        Resolve course IDs. Returns ``(courses_in_request_order, unknown_ids)``.
        """
        pks = {_as_pk(course_id) for course_id in course_ids} - {None}
        found = Course.objects.in_bulk(pks)
        courses = []
        unknown = []
        for course_id in course_ids:
            course = found.get(_as_pk(course_id))
            if course is None:
                unknown.append(course_id)
            else:
                courses.append(course)
        return courses, unknown

    def browsable_courses(self, student, exclude_ids):
        return Course.objects.filter(
            is_active=True,
            semester=student.semester,
            regulation=student.regulation,
        ).exclude(pk__in=exclude_ids)

    # ============ Enrollment ledger ============

    def enrollments_for(self, student, statuses=None):
        qs = Enrollment.objects.filter(student=student).select_related('course')
        if statuses:
            qs = qs.filter(status__in=statuses)
        return list(qs)

    def get_enrollment(self, student, course):
        return Enrollment.objects.filter(student=student, course=course).select_related('course').first()

    def create_enrollment(self, student, course, original_semester, instructor='', **fields):
        return Enrollment.objects.create(
            student=student,
            course=course,
            original_semester=original_semester,
            instructor=instructor,
            **fields
        )

    def save_enrollment(self, enrollment):
        enrollment.save()
        return enrollment

    def open_enrollment_count(self, student, semester):
        return Enrollment.objects.filter(
            student=student,
            original_semester=semester,
            status=EnrollmentStatus.ENROLLED,
        ).count()

    def has_graded_enrollments_in(self, student, semester):
        return Enrollment.objects.filter(
            student=student,
            original_semester=semester,
            status__in=GRADED_STATES,
        ).exists()

    # ============ Grade records ============

    def get_grade_record(self, student, course):
        return GradeRecord.objects.filter(student=student, course=course).first()

    def save_grade_record(self, record):
        record.save()
        return record

    def grade_records_for(self, student):
        return list(GradeRecord.objects.filter(student=student).select_related('course'))

    # ============ Supplementary enrollments ============

    def supplementary_for(self, student, include_dropped=True):
        qs = SupplementaryEnrollment.objects.filter(student=student)
        if not include_dropped:
            qs = qs.filter(dropped=False)
        return list(qs)

    def get_supplementary(self, student, external_id, include_dropped=False):
        qs = SupplementaryEnrollment.objects.filter(student=student, external_id=external_id)
        if not include_dropped:
            qs = qs.filter(dropped=False)
        return qs.first()

    def save_supplementary(self, enrollment):
        enrollment.save()
        return enrollment

    # ============ Aggregation input ============

    def graded_items(self, student, default_supplementary_credits):
        """Every grade that can feed GPA/CGPA, as one uniform sequence."""
        items = [record.as_graded_item() for record in GradeRecord.objects.filter(student=student)]
        for supplementary in SupplementaryEnrollment.objects.filter(student=student):
            item = supplementary.as_graded_item(default_supplementary_credits)
            if item is not None:
                items.append(item)
        return items
