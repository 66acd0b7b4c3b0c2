from django.urls import path
from . import views

app_name = 'students'

urlpatterns = [
    # Profile & Grades
    path('me/', views.profile, name='profile'),
    path('grades/', views.grades, name='grades'),

    # Catalogue Courses
    path('courses/available/', views.available_courses, name='available_courses'),
    path('courses/enrolled/', views.enrolled_courses, name='enrolled_courses'),
    path('courses/enroll/', views.enroll, name='enroll'),
    path('courses/drop/', views.drop, name='drop'),

    # Supplementary Courses
    path('supplementary/search/', views.catalog_search, name='catalog_search'),
    path('supplementary/', views.supplementary_list, name='supplementary_list'),
    path('supplementary/enroll/', views.supplementary_enroll, name='supplementary_enroll'),
    path('supplementary/<str:external_id>/drop/', views.supplementary_drop, name='supplementary_drop'),
    path('supplementary/<str:external_id>/access/', views.supplementary_access, name='supplementary_access'),
]
