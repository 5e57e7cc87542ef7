# lessons/urls.py - Admin lesson day endpoints (mounted under /api/admin/)

from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

# API Router
router = SimpleRouter(trailing_slash=False)
router.register(r'lesson-days', views.LessonDayViewSet, basename='lesson-day')

app_name = 'lessons'

urlpatterns = [
    path('', include(router.urls)),
]
