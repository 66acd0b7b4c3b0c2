from django.urls import path
from . import views

app_name = 'gradebook'

urlpatterns = [
    # Grade Entry
    path('grades/', views.record_grade, name='record_grade'),
    path('grades/batch/', views.record_grades_batch, name='record_grades_batch'),
    path('students/<str:student_id>/gradable/', views.gradable_courses, name='gradable_courses'),

    # Grade Sheets
    path('students/<str:student_id>/import/', views.grade_import, name='grade_import'),
    path('students/<str:student_id>/export/', views.grade_export, name='grade_export'),
]
