# dashboard/views.py - Admin dashboard counts and today's lesson days

import datetime

from rest_framework.views import APIView

from academy.api import success_response
from accounts.permissions import IsAdminOrTeacher
from classrooms.models import Classroom
from lessons import services as lesson_services
from lessons.serializers import LessonDayListSerializer
from students.models import Student
from teachers.models import Teacher


class AdminDashboardView(APIView):
    """Headline numbers for the admin landing page"""
    permission_classes = [IsAdminOrTeacher]

    def get(self, request):
        today = datetime.date.today()
        lesson_days = lesson_services.lesson_days_on(today)
        context = lesson_services.lesson_day_context(lesson_days)
        return success_response({
            'date': today.isoformat(),
            'studentCount': Student.objects.count(),
            'teacherCount': Teacher.objects.count(),
            'classCount': Classroom.objects.count(),
            'todayPeriodCount': sum(len(day.periods) for day in lesson_days),
            'todayLessonDays': LessonDayListSerializer(lesson_days, many=True, context=context).data,
        })
