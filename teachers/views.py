# teachers/views.py - Admin teacher management API

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser

from academy.api import success_response
from academy.csv_utils import (
    csv_response, dated_filename, is_dry_run, preview_rows, read_rows, read_upload, run_bulk,
)
from accounts.permissions import IsAdminOrTeacher
from . import services, utils
from .serializers import (
    TeacherCreateSerializer,
    TeacherListSerializer,
    TeacherSerializer,
    TeacherUpdateSerializer,
)
import logging

logger = logging.getLogger(__name__)


class TeacherViewSet(viewsets.ViewSet):
    """REST API for Teacher management"""
    permission_classes = [IsAdminOrTeacher]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def list(self, request):
        teachers, class_counts = services.list_teachers(request.query_params.get('search'))
        serializer = TeacherListSerializer(teachers, many=True, context={'class_counts': class_counts})
        return success_response(serializer.data)

    def create(self, request):
        serializer = TeacherCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        teacher = services.create_teacher(serializer.validated_data)
        return success_response(TeacherSerializer(teacher).data, status_code=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return success_response(TeacherSerializer(services.get_teacher(pk)).data)

    def update(self, request, pk=None):
        serializer = TeacherUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        teacher = services.update_teacher(pk, serializer.validated_data)
        return success_response(TeacherSerializer(teacher).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        services.delete_teacher(pk)
        return success_response(message='Teacher deleted.')

    # ==================== CSV ====================

    @action(detail=False, methods=['post'])
    def bulk(self, request):
        rows = read_rows(read_upload(request), utils.COLUMNS, utils.HEADER_KEYWORDS)
        if is_dry_run(request):
            return success_response(preview_rows(rows, utils.validate_row))

        def create(values):
            serializer = TeacherCreateSerializer(data={
                'name': values['name'],
                'loginId': values['login_id'],
                'password': values['password'],
                'phone': values['phone'],
                'description': values['description'],
            })
            serializer.is_valid(raise_exception=True)
            services.create_teacher(serializer.validated_data)

        return success_response(run_bulk(rows, utils.validate_row, create, logger, 'teacher'))

    @action(detail=False, methods=['get'])
    def export(self, request):
        teachers, class_counts = services.list_teachers(request.query_params.get('search'))
        ids = {value for value in request.query_params.get('ids', '').split(',') if value}
        if ids:
            teachers = [t for t in teachers if str(t.id) in ids]
        rows = utils.export_rows(teachers, class_counts)
        return csv_response(dated_filename(utils.EXPORT_PREFIX), utils.EXPORT_HEADER, rows)

    @action(detail=False, methods=['get'])
    def template(self, request):
        return csv_response(utils.TEMPLATE_FILENAME, utils.TEMPLATE_HEADER)
