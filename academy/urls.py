# academy/urls.py - API routing by section: auth/me, admin, teacher, student and parent

from django.urls import path, include

from portal.urls import parent_urlpatterns, student_urlpatterns

urlpatterns = [
    # Authentication and my account
    path('api/', include('accounts.urls')),

    # Admin console (roles admin, teacher)
    path('api/admin/', include('dashboard.urls')),
    path('api/admin/', include('students.urls')),
    path('api/admin/', include('teachers.urls')),
    path('api/admin/', include('classrooms.urls')),
    path('api/admin/', include('lessons.urls')),

    # Teacher console, limited to the teacher's own classes
    path('api/teacher/', include('classrooms.teacher_urls')),
    path('api/teacher/', include('lessons.teacher_urls')),
    path('api/teacher/', include('exams.urls')),

    # Student and parent portal
    path('api/student/', include((student_urlpatterns, 'student'))),
    path('api/parent/', include((parent_urlpatterns, 'parent'))),
]
