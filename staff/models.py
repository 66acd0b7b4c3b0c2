from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from academics.models import Department


class Staff(models.Model):
    """A staff member who owns a roster of students and enters their grades."""

    class Status(models.TextChoices):
        ACTIVE = 'active', _('Active')
        INACTIVE = 'inactive', _('Inactive')

    # Link to User account
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='staff_profile',
        help_text="Associated user account for login"
    )

    staff_id = models.CharField(max_length=20, unique=True, help_text="Unique Employee ID")
    name = models.CharField(max_length=200)
    department = models.CharField(max_length=100, choices=Department.choices)
    date_of_birth = models.DateField(null=True, blank=True)
    email = models.EmailField(blank=True)
    contact = models.CharField(max_length=20, blank=True)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = "Staff"
        verbose_name_plural = "Staff"

    def __str__(self):
        return f"{self.name} ({self.staff_id})"

    def owns(self, student):
        """True when this staff member created the student's record."""
        return student.created_by_id == self.pk
