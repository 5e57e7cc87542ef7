# classrooms/teacher_urls.py - Teacher class endpoints (mounted under /api/teacher/)

from django.urls import path
from . import views

app_name = 'teacher-classes'

urlpatterns = [
    path('classes', views.TeacherClassListView.as_view(), name='class-list'),
    path('classes/<str:class_id>/students', views.TeacherClassStudentsView.as_view(), name='class-students'),
]
