from django.contrib import admin

from unfold.admin import ModelAdmin, TabularInline

from .models import Student, SupplementaryEnrollment


class SupplementaryEnrollmentInline(TabularInline):
    model = SupplementaryEnrollment
    extra = 0
    fields = ('external_id', 'title', 'dropped', 'letter_grade', 'grade_points', 'semester', 'include_in_gpa')
    readonly_fields = ('letter_grade', 'grade_points', 'semester')


@admin.register(Student)
class StudentAdmin(ModelAdmin):
    list_display = ('student_id', 'name', 'department', 'semester', 'regulation', 'gpa', 'cgpa', 'status')
    list_filter = ('status', 'department', 'semester', 'regulation')
    search_fields = ('student_id', 'name', 'email')
    autocomplete_fields = ('created_by',)
    readonly_fields = ('gpa', 'cgpa', 'created_at', 'updated_at')
    inlines = [SupplementaryEnrollmentInline]

    fieldsets = (
        (None, {'fields': ('student_id', 'name', 'email', 'date_of_birth', 'contact', 'address')}),
        ('Family', {'fields': ('father_name', 'mother_name', 'parent_contact')}),
        ('Programme', {'fields': ('department', 'program', 'admission_year', 'regulation', 'semester', 'status')}),
        ('Standing', {'fields': ('gpa', 'cgpa')}),
        ('Ownership', {'fields': ('created_by', 'user')}),
        ('Timestamps', {'fields': ('created_at', 'updated_at')}),
    )


@admin.register(SupplementaryEnrollment)
class SupplementaryEnrollmentAdmin(ModelAdmin):
    list_display = ('student', 'external_id', 'title', 'dropped', 'letter_grade', 'semester')
    list_filter = ('dropped', 'semester')
    search_fields = ('student__student_id', 'external_id', 'title')
    autocomplete_fields = ('student',)
    readonly_fields = ('enrolled_at', 'last_accessed_at', 'graded_at', 'graded_by')
