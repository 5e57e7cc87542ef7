# portal/views.py - Student and parent portal API
#
# The same view set serves /api/student/ (role student) and /api/parent/
# (role parent); urls.py binds it with the matching permission.

from rest_framework import viewsets

from academy.api import nullable_response, success_response
from accounts.permissions import IsStudent
from classrooms.serializers import ClassroomSerializer
from . import services
from .calendar import parse_year_month


class PortalViewSet(viewsets.ViewSet):
    permission_classes = [IsStudent]

    def get_student(self):
        return services.student_for_user(self.request.user)

    @property
    def class_id(self):
        return self.request.query_params.get('classId')

    def classes(self, request):
        classrooms = services.student_classes(self.get_student())
        return success_response(ClassroomSerializer(classrooms, many=True).data)

    def dashboard(self, request):
        return success_response(services.dashboard(self.get_student(), self.class_id))

    def lessons(self, request):
        data = services.lessons(
            self.get_student(), self.class_id,
            date_from=request.query_params.get('from'),
            date_to=request.query_params.get('to'),
        )
        return nullable_response(data)

    def tests(self, request):
        return nullable_response(services.tests(self.get_student(), self.class_id))

    def trend(self, request):
        year = month = None
        if request.query_params.get('year'):
            year, month = parse_year_month(request.query_params)
        return nullable_response(services.score_trend(self.get_student(), self.class_id, year, month))

    def monthly(self, request):
        year, month = parse_year_month(request.query_params)
        return nullable_response(services.monthly_statistics(self.get_student(), year, month, self.class_id))

    def calendar(self, request):
        year, month = parse_year_month(request.query_params)
        return nullable_response(services.monthly_calendar(self.get_student(), year, month, self.class_id))

    def report(self, request):
        year, month = parse_year_month(request.query_params)
        return nullable_response(services.monthly_report(self.get_student(), year, month, self.class_id))
