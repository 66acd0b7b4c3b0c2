from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from academics.models import Course
from students.models import Student
from .aggregator import GradedItem
from .ledger import GRADED_STATES, EnrollmentStatus


class Enrollment(models.Model):
    """
    A student's ledger row for one course.

    There is never more than one row per (student, course): re-attempts and
    corrections update this row. See ``gradebook.ledger`` for the transitions.
    """
    Status = EnrollmentStatus

    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='enrollments'
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.PROTECT,
        related_name='enrollments'
    )
    instructor = models.CharField(max_length=200, blank=True)
    enrolled_at = models.DateTimeField(auto_now_add=True)
    status = models.CharField(
        max_length=10,
        choices=EnrollmentStatus.choices,
        default=EnrollmentStatus.ENROLLED,
        db_index=True
    )
    original_semester = models.PositiveSmallIntegerField(
        help_text='Semester the course was first taken in; never changes'
    )
    attempts = models.PositiveSmallIntegerField(default=1)
    cleared_semester = models.PositiveSmallIntegerField(null=True, blank=True)
    grade_earned = models.CharField(max_length=5, blank=True)
    credit_points = models.PositiveSmallIntegerField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'enrollment'
        ordering = ['original_semester', 'course__code']
        verbose_name = 'Enrollment'
        verbose_name_plural = 'Enrollments'
        unique_together = ['student', 'course']
        indexes = [
            models.Index(fields=['student', 'original_semester', 'status'], name='enrollment_open_idx'),
        ]

    def __str__(self):
        return f"{self.student.student_id} - {self.course.code} ({self.status})"

    @property
    def grade_points(self):
        return self.credit_points

    def gpa_credits(self, default_credits=None):
        return self.course.credits

    def as_graded_item(self, default_credits=None):
        """The grade record behind a graded ledger row, or None while the course is open."""
        if self.status not in GRADED_STATES:
            return None
        record = self.student.grade_records.filter(course_id=self.course_id).first()
        return record.as_graded_item() if record else None


class GradeRecord(models.Model):
    """
    The student-visible grade for one course. One per (student, course);
    later gradings overwrite it and bump ``attempt``.
    """
    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='grade_records'
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.PROTECT,
        related_name='grade_records'
    )
    semester = models.PositiveSmallIntegerField(help_text='Semester in which this grading occurred')
    original_semester = models.PositiveSmallIntegerField()
    grade_points = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(10)]
    )
    letter_grade = models.CharField(max_length=5, blank=True, editable=False)
    credits = models.PositiveSmallIntegerField(help_text='Course credit weight when graded')
    include_in_gpa = models.BooleanField(default=True)
    attempt = models.PositiveSmallIntegerField(default=1)
    remarks = models.CharField(max_length=255, blank=True)
    entered_by = models.ForeignKey(
        'staff.Staff',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='grades_entered'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'grade_record'
        ordering = ['semester', 'course__code']
        verbose_name = 'Grade Record'
        verbose_name_plural = 'Grade Records'
        unique_together = ['student', 'course']

    def __str__(self):
        return f"{self.student.student_id} - {self.course.code}: {self.letter_grade}"

    def as_graded_item(self, default_credits=None):
        return GradedItem(
            points=self.grade_points,
            credits=self.credits,
            semester=self.semester,
            include_in_gpa=self.include_in_gpa,
            source=GradedItem.REGULAR,
        )
