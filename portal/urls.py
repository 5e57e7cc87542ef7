# portal/urls.py - Portal endpoints, mounted under /api/student/ and /api/parent/

from django.urls import path

from accounts.permissions import IsParent, IsStudent
from .views import PortalViewSet

ROUTES = [
    ('classes', 'classes'),
    ('dashboard', 'dashboard'),
    ('lessons', 'lessons'),
    ('tests', 'tests'),
    ('tests/trend', 'trend'),
    ('statistics/monthly', 'monthly'),
    ('statistics/calendar', 'calendar'),
    ('statistics/report', 'report'),
]


def portal_urlpatterns(permission):
    return [
        path(route, PortalViewSet.as_view({'get': action}, permission_classes=[permission]), name=action)
        for route, action in ROUTES
    ]


student_urlpatterns = portal_urlpatterns(IsStudent)
parent_urlpatterns = portal_urlpatterns(IsParent)
