from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import Enrollment, GradeRecord


@admin.register(Enrollment)
class EnrollmentAdmin(ModelAdmin):
    list_display = ('student', 'course', 'status', 'original_semester', 'attempts', 'grade_earned', 'cleared_semester')
    list_filter = ('status', 'original_semester')
    search_fields = ('student__student_id', 'student__name', 'course__code', 'course__name')
    autocomplete_fields = ('student', 'course')
    readonly_fields = ('enrolled_at', 'updated_at')


@admin.register(GradeRecord)
class GradeRecordAdmin(ModelAdmin):
    """Grades are entered through the grading endpoints; the admin is for inspection."""

    list_display = ('student', 'course', 'semester', 'letter_grade', 'grade_points', 'credits', 'attempt', 'include_in_gpa')
    list_filter = ('semester', 'include_in_gpa')
    search_fields = ('student__student_id', 'student__name', 'course__code')
    readonly_fields = ('letter_grade', 'entered_by', 'created_at', 'updated_at')
    autocomplete_fields = ('student', 'course')
