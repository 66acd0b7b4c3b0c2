from django.contrib import admin

from unfold.admin import ModelAdmin

from .models import Staff


@admin.register(Staff)
class StaffAdmin(ModelAdmin):
    list_display = ('staff_id', 'name', 'department', 'email', 'status')
    list_filter = ('status', 'department')
    search_fields = ('staff_id', 'name', 'email')
    readonly_fields = ('created_at', 'updated_at')
