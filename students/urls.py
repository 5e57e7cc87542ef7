# students/urls.py - Admin student endpoints (mounted under /api/admin/)

from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

# API Router
router = SimpleRouter(trailing_slash=False)
router.register(r'students', views.StudentViewSet, basename='student')

app_name = 'students'

urlpatterns = [
    path('', include(router.urls)),
]
