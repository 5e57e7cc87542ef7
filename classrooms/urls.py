# classrooms/urls.py - Admin class endpoints (mounted under /api/admin/)

from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

# API Router
router = SimpleRouter(trailing_slash=False)
router.register(r'classes', views.ClassroomViewSet, basename='classroom')

app_name = 'classrooms'

urlpatterns = [
    path('', include(router.urls)),
]
