# lessons/views.py - Admin lesson day API and the teacher lesson log

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.views import APIView

from academy.api import nullable_response, success_response
from academy.csv_utils import csv_response, is_dry_run, preview_rows, read_rows, read_upload, run_bulk
from accounts.permissions import IsAdminOrTeacher
from . import services, utils
from .serializers import (
    AddPeriodSerializer,
    LessonCreateSerializer,
    LessonDayCreateSerializer,
    LessonDayListSerializer,
    LessonDaySerializer,
    LessonDayUpdateSerializer,
    LessonSerializer,
    LessonUpdateSerializer,
    PeriodUpdateSerializer,
)
import logging

logger = logging.getLogger(__name__)


def _lesson_day_data(lesson_day):
    context = services.lesson_day_context([lesson_day])
    return LessonDaySerializer(lesson_day, context=context).data


def _validate_lesson_row(values):
    return utils.validate_row(values, services.find_row_targets)


class LessonDayViewSet(viewsets.ViewSet):
    """REST API for lesson days and their periods"""
    permission_classes = [IsAdminOrTeacher]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def list(self, request):
        params = request.query_params
        lesson_days = services.filter_lesson_days(
            date_from=params.get('dateFrom'),
            date_to=params.get('dateTo'),
            classroom_id=params.get('classId'),
            teacher_id=params.get('teacherId'),
        )
        context = services.lesson_day_context(lesson_days)
        return success_response(LessonDayListSerializer(lesson_days, many=True, context=context).data)

    def create(self, request):
        serializer = LessonDayCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lesson_day = services.create_lesson_day(
            serializer.validated_data['class_id'], serializer.validated_data['date']
        )
        return success_response(_lesson_day_data(lesson_day), status_code=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path='by-class-date')
    def by_class_date(self, request):
        """The lesson day of a class on a date; `data` is null when none exists"""
        lesson_day = services.lesson_day_for(
            request.query_params.get('classId'), request.query_params.get('date')
        )
        return nullable_response(_lesson_day_data(lesson_day) if lesson_day is not None else None)

    def retrieve(self, request, pk=None):
        return success_response(_lesson_day_data(services.get_lesson_day(pk)))

    def update(self, request, pk=None):
        serializer = LessonDayUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lesson_day = services.update_lesson_day(pk, serializer.validated_data)
        return success_response(_lesson_day_data(lesson_day))

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        services.delete_lesson_day(pk)
        return success_response(message='Lesson day deleted.')

    # ==================== PERIODS ====================

    @action(detail=True, methods=['post', 'put', 'delete'])
    def periods(self, request, pk=None):
        if request.method == 'POST':
            serializer = AddPeriodSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            lesson_day = services.add_period(pk, serializer.validated_data['teacher_id'])
            return success_response(_lesson_day_data(lesson_day), status_code=status.HTTP_201_CREATED)

        if request.method == 'DELETE':
            index = services.parse_period_index(request.query_params.get('periodIndex'))
            return success_response(_lesson_day_data(services.remove_period(pk, index)))

        serializer = PeriodUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        index = data.pop('period_index')
        return success_response(_lesson_day_data(services.update_period(pk, index, data)))

    # ==================== CSV ====================

    @action(detail=False, methods=['post'])
    def bulk(self, request):
        rows = read_rows(read_upload(request), utils.COLUMNS, utils.HEADER_KEYWORDS)
        if is_dry_run(request):
            return success_response(preview_rows(rows, _validate_lesson_row))
        return success_response(run_bulk(rows, _validate_lesson_row, services.create_from_row, logger, 'lesson'))

    @action(detail=False, methods=['get'])
    def template(self, request):
        return csv_response(utils.TEMPLATE_FILENAME, utils.TEMPLATE_HEADER)


# ==================== TEACHER LESSON LOG ====================

class ClassLessonListView(APIView):
    """Lessons of one class, newest first"""
    permission_classes = [IsAdminOrTeacher]

    def get(self, request, class_id):
        lessons = services.list_lessons(
            class_id, request.user,
            date_from=request.query_params.get('from'),
            date_to=request.query_params.get('to'),
        )
        return success_response(LessonSerializer(lessons, many=True).data)


class LessonViewSet(viewsets.ViewSet):
    permission_classes = [IsAdminOrTeacher]

    def create(self, request):
        serializer = LessonCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lesson = services.create_lesson(serializer.validated_data, request.user)
        return success_response(LessonSerializer(lesson).data, status_code=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return success_response(LessonSerializer(services.get_lesson(pk, request.user)).data)

    def update(self, request, pk=None):
        serializer = LessonUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lesson = services.update_lesson(pk, serializer.validated_data, request.user)
        return success_response(LessonSerializer(lesson).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        services.delete_lesson(pk, request.user)
        return success_response(message='Lesson deleted.')
