# teachers/urls.py - Admin teacher endpoints (mounted under /api/admin/)

from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

# API Router
router = SimpleRouter(trailing_slash=False)
router.register(r'teachers', views.TeacherViewSet, basename='teacher')

app_name = 'teachers'

urlpatterns = [
    path('', include(router.urls)),
]
