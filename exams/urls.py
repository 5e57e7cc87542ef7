# exams/urls.py - Teacher test endpoints (mounted under /api/teacher/)

from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

# API Router
router = SimpleRouter(trailing_slash=False)
router.register(r'tests', views.ExamViewSet, basename='test')

app_name = 'exams'

urlpatterns = [
    path('classes/<str:class_id>/tests', views.ClassTestListView.as_view(), name='class-tests'),
    path('curriculum', views.CurriculumView.as_view(), name='curriculum'),
    path('', include(router.urls)),
]
