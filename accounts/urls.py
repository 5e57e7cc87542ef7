# accounts/urls.py - Authentication and self-service account endpoints

from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # ==================== AUTHENTICATION URLS ====================
    path('auth/login', views.LoginView.as_view(), name='login'),
    path('auth/find-login-id', views.FindLoginIdView.as_view(), name='find-login-id'),
    path('auth/route', views.RouteCheckView.as_view(), name='route-check'),

    # ==================== MY ACCOUNT ====================
    path('me', views.MeView.as_view(), name='me'),
    path('me/password', views.MePasswordView.as_view(), name='me-password'),
    path('me/loginId', views.MeLoginIdView.as_view(), name='me-login-id'),
    path('me/phone', views.MePhoneView.as_view(), name='me-phone'),
]
