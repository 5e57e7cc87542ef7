# lessons/teacher_urls.py - Teacher lesson log endpoints (mounted under /api/teacher/)

from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

router = SimpleRouter(trailing_slash=False)
router.register(r'lessons', views.LessonViewSet, basename='lesson')

app_name = 'teacher-lessons'

urlpatterns = [
    path('classes/<str:class_id>/lessons', views.ClassLessonListView.as_view(), name='class-lessons'),
    path('', include(router.urls)),
]
