from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import Course, Regulation


@admin.register(Regulation)
class RegulationAdmin(ModelAdmin):
    list_display = ('year', 'name', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'year')


@admin.register(Course)
class CourseAdmin(ModelAdmin):
    list_display = ('code', 'name', 'credits', 'course_type', 'semester', 'regulation', 'is_active')
    list_filter = ('course_type', 'semester', 'regulation', 'is_active')
    search_fields = ('code', 'name')
    ordering = ('regulation', 'semester', 'code')
    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        (None, {'fields': ('code', 'name', 'credits', 'course_type')}),
        ('Placement', {'fields': ('regulation', 'semester', 'departments')}),
        ('Teaching', {'fields': ('instructors',)}),
        ('Status', {'fields': ('is_active', 'created_at', 'updated_at')}),
    )
