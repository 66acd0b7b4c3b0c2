from django.urls import path
from . import views

app_name = 'staff'

urlpatterns = [
    path('me/', views.profile, name='profile'),
    path('students/', views.students, name='students'),
    path('students/import/', views.roster_import, name='roster_import'),
    path('students/export/', views.student_export, name='student_export'),
    path('upload/', views.staff_upload, name='staff_upload'),
]
