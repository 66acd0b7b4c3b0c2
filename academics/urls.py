from django.urls import path
from . import views

app_name = 'academics'

urlpatterns = [
    path('courses/', views.course_list, name='course_list'),
    path('courses/upload/', views.course_upload, name='course_upload'),
    path('instructors/', views.instructor_list, name='instructor_list'),
    path('regulations/', views.regulation_list, name='regulation_list'),
]
