from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Department(models.TextChoices):
    INFORMATION_TECHNOLOGY = 'Information Technology', _('Information Technology')
    COMPUTER_SCIENCE = 'Computer Science Engineering', _('Computer Science Engineering')
    MECHANICAL = 'Mechanical Engineering', _('Mechanical Engineering')
    CIVIL = 'Civil Engineering', _('Civil Engineering')
    ELECTRONICS = 'Electronics and Communication Engineering', _('Electronics and Communication Engineering')
    ELECTRICAL = 'Electrical and Electronics Engineering', _('Electrical and Electronics Engineering')
    AI_DATA_SCIENCE = 'Artificial Intelligence and Data Science', _('Artificial Intelligence and Data Science')
    SCIENCE_HUMANITIES = 'Science & Humanities', _('Science & Humanities')


class Regulation(models.Model):
    """
    A curriculum cohort (catalog year). Students are admitted under one
    regulation and only see courses published for it.
    """
    year = models.PositiveIntegerField(unique=True, help_text="e.g., 2021")
    name = models.CharField(max_length=100, help_text="e.g., R2021")
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-year']
        verbose_name = "Regulation"
        verbose_name_plural = "Regulations"

    def __str__(self):
        return f"{self.name} ({self.year})"


class Course(models.Model):
    """A catalogue course offered in one semester of one regulation."""

    class CourseType(models.TextChoices):
        CORE = 'Core', _('Core')
        ELECTIVE = 'Elective', _('Elective')
        NPTEL = 'NPTEL', _('NPTEL')
        LAB = 'Lab', _('Lab')
        PROJECT = 'Project', _('Project')

    code = models.CharField(
        max_length=20,
        unique=True,
        help_text="e.g., CS3401"
    )
    name = models.CharField(max_length=200)
    credits = models.PositiveSmallIntegerField(validators=[MinValueValidator(0)])
    course_type = models.CharField(
        max_length=10,
        choices=CourseType.choices,
        default=CourseType.CORE
    )
    semester = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    regulation = models.PositiveIntegerField(help_text="Regulation year this course belongs to")
    departments = models.JSONField(
        default=list,
        blank=True,
        help_text="Departments whose students may take this course"
    )
    instructors = models.JSONField(
        default=list,
        blank=True,
        help_text="Names of staff who teach this course"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['regulation', 'semester', 'code']
        verbose_name = "Course"
        verbose_name_plural = "Courses"
        indexes = [
            models.Index(fields=['regulation', 'semester', 'is_active'], name='course_reg_sem_active_idx'),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    @property
    def default_instructor(self):
        """First listed instructor, or an empty string."""
        return self.instructors[0] if self.instructors else ''

    def resolve_instructor(self, choice=None):
        """
        Return the caller's instructor choice when it names one of this
        course's instructors, otherwise the default.
        """
        if choice and choice in self.instructors:
            return choice
        return self.default_instructor

    def is_visible_to(self, department, shared_department, open_type):
        """Check whether students of ``department`` see this course when browsing."""
        if shared_department in (self.departments or []):
            return True
        if self.course_type == open_type:
            return True
        return department in (self.departments or [])
