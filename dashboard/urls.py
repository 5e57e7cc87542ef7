# dashboard/urls.py - Admin dashboard endpoint (mounted under /api/admin/)

from django.urls import path
from . import views

app_name = 'dashboard'

urlpatterns = [
    path('dashboard', views.AdminDashboardView.as_view(), name='admin-dashboard'),
]
