# students/views.py - Admin student management API

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser

from academy.api import parse_page_params, success_response
from academy.csv_utils import (
    csv_response, dated_filename, is_dry_run, preview_rows, read_rows, read_upload, run_bulk,
)
from accounts.permissions import IsAdminOrTeacher
from . import services, utils
from .serializers import (
    StudentCreateSerializer,
    StudentDetailSerializer,
    StudentListSerializer,
    StudentUpdateSerializer,
)
import logging

logger = logging.getLogger(__name__)


def _filters(query_params):
    return {
        'search': query_params.get('search'),
        'name': query_params.get('name'),
        'grade': query_params.get('grade'),
        'classroom_id': query_params.get('classId'),
    }


class StudentViewSet(viewsets.ViewSet):
    """REST API for Student management"""
    permission_classes = [IsAdminOrTeacher]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def list(self, request):
        """Paginated, searchable student list with class counts"""
        page, limit = parse_page_params(request.query_params)
        result = services.list_students(page=page, limit=limit, **_filters(request.query_params))
        serializer = StudentListSerializer(
            result['students'], many=True, context={'class_counts': result['class_counts']}
        )
        return success_response({
            'list': serializer.data,
            'total': result['total'],
            'page': result['page'],
            'limit': result['limit'],
            'totalPages': result['total_pages'],
        })

    def create(self, request):
        """Register a student with student and parent logins"""
        serializer = StudentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        student = services.create_student(serializer.validated_data)
        return success_response(StudentDetailSerializer(student).data, status_code=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        student = services.get_student(pk)
        return success_response(StudentDetailSerializer(student).data)

    def update(self, request, pk=None):
        serializer = StudentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        student = services.update_student(pk, serializer.validated_data)
        return success_response(StudentDetailSerializer(student).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        services.delete_student(pk)
        return success_response(message='Student deleted.')

    # ==================== CSV ====================

    @action(detail=False, methods=['post'])
    def bulk(self, request):
        """CSV bulk registration; `dryRun` only validates and previews the rows"""
        rows = read_rows(read_upload(request), utils.COLUMNS, utils.HEADER_KEYWORDS)
        if is_dry_run(request):
            return success_response(preview_rows(rows, utils.validate_row))

        def create(values):
            serializer = StudentCreateSerializer(data={
                'name': values['name'],
                'school': values['school'],
                'grade': values['grade'],
                'studentPhone': values['student_phone'],
                'parentPhone': values['parent_phone'],
            })
            serializer.is_valid(raise_exception=True)
            services.create_student(serializer.validated_data)

        result = run_bulk(rows, utils.validate_row, create, logger, 'student')
        return success_response(result)

    @action(detail=False, methods=['get'])
    def export(self, request):
        """Download the filtered list (or the `ids` selection) as CSV"""
        query = services.filter_students(**_filters(request.query_params))
        ids = [value for value in request.query_params.get('ids', '').split(',') if value]
        if ids:
            query = query.filter(id__in=list(services.students_by_ids(ids)))
        students = list(query)
        rows = utils.export_rows(students, services.class_counts_for(students))
        return csv_response(dated_filename(utils.EXPORT_PREFIX), utils.EXPORT_HEADER, rows)

    @action(detail=False, methods=['get'])
    def template(self, request):
        return csv_response(utils.TEMPLATE_FILENAME, utils.TEMPLATE_HEADER)
