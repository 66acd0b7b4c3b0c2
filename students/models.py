from decimal import Decimal

from django.core.validators import MinValueValidator, MaxValueValidator
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from academics.models import Department
from gradebook.aggregator import GradedItem
from gradebook.ledger import EnrollmentStatus


class Student(models.Model):
    """
    Represents a student admitted under a regulation.

    ``semester`` only moves forward, through the semester advancement rule.
    ``gpa`` and ``cgpa`` are caches recomputed after every grading event.
    """
    class Status(models.TextChoices):
        ACTIVE = 'active', _('Active')
        GRADUATED = 'graduated', _('Graduated')
        WITHDRAWN = 'withdrawn', _('Withdrawn')
        SUSPENDED = 'suspended', _('Suspended')

    # Personal Information
    student_id = models.CharField(
        max_length=50,
        unique=True,
        help_text="Unique register number"
    )
    name = models.CharField(max_length=200)
    date_of_birth = models.DateField(null=True, blank=True)
    email = models.EmailField(blank=True)
    contact = models.CharField(max_length=20, blank=True)
    parent_contact = models.CharField(max_length=20, blank=True)
    father_name = models.CharField(max_length=200, blank=True)
    mother_name = models.CharField(max_length=200, blank=True)
    address = models.TextField(blank=True)

    # Programme Details
    department = models.CharField(max_length=100, choices=Department.choices)
    program = models.CharField(max_length=50, help_text="e.g., B.Tech, B.E")
    admission_year = models.PositiveIntegerField()
    semester = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )
    regulation = models.PositiveIntegerField(help_text="Regulation year the student was admitted under")

    # Status
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE
    )

    # Cached standing
    gpa = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(0), MaxValueValidator(10)]
    )
    cgpa = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(0), MaxValueValidator(10)]
    )

    # Staff of record: the only staff member allowed to grade this student
    created_by = models.ForeignKey(
        'staff.Staff',
        on_delete=models.PROTECT,
        related_name='students'
    )

    # Optional User Account
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='student_profile'
    )

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['student_id']
        verbose_name = "Student"
        verbose_name_plural = "Students"

    def __str__(self):
        return f"{self.name} ({self.student_id})"


class SupplementaryEnrollment(models.Model):
    """
    A student's enrollment in an externally sourced online course.

    These never go through the catalogue or the enrollment ledger; staff grade
    them by submitting the external ID with the supplementary prefix.
    """
    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='supplementary_enrollments'
    )
    external_id = models.CharField(max_length=100, help_text="Identifier in the external catalogue")
    title = models.CharField(max_length=300)
    description = models.TextField(blank=True)
    thumbnail_url = models.URLField(max_length=500, blank=True)
    video_url = models.URLField(max_length=500, blank=True)
    instructor = models.CharField(max_length=200, blank=True)

    enrolled_at = models.DateTimeField(auto_now_add=True)
    last_accessed_at = models.DateTimeField(auto_now_add=True)
    dropped = models.BooleanField(default=False)

    # Grading
    grade_points = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(10)]
    )
    letter_grade = models.CharField(max_length=5, blank=True)
    semester = models.PositiveSmallIntegerField(null=True, blank=True)
    credits = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text="Leave empty to use the default supplementary credit weight"
    )
    include_in_gpa = models.BooleanField(default=True)
    graded_at = models.DateTimeField(null=True, blank=True)
    graded_by = models.ForeignKey(
        'staff.Staff',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    class Meta:
        ordering = ['enrolled_at']
        unique_together = ['student', 'external_id']
        verbose_name = "Supplementary Enrollment"
        verbose_name_plural = "Supplementary Enrollments"

    def __str__(self):
        return f"{self.student.student_id} - {self.title}"

    @property
    def is_graded(self):
        return self.grade_points is not None

    @property
    def status(self):
        """Ledger-style status so both enrollment kinds can be listed together."""
        if self.dropped:
            return EnrollmentStatus.DROPPED
        if not self.is_graded:
            return EnrollmentStatus.ENROLLED
        if self.grade_points > 0:
            return EnrollmentStatus.COMPLETED
        return EnrollmentStatus.BACKLOG

    def gpa_credits(self, default_credits=None):
        return self.credits if self.credits else default_credits

    def as_graded_item(self, default_credits=None):
        """The aggregator's view of this enrollment, or None while ungraded."""
        if not self.is_graded:
            return None
        return GradedItem(
            points=self.grade_points,
            credits=self.gpa_credits(default_credits),
            semester=self.semester,
            include_in_gpa=self.include_in_gpa,
            dropped=self.dropped,
            source=GradedItem.SUPPLEMENTARY,
        )
