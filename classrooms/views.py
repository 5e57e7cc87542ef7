# classrooms/views.py - Admin class management API and the teacher class views

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.views import APIView

from academy.api import success_response
from academy.csv_utils import (
    csv_response, dated_filename, is_dry_run, preview_rows, read_rows, read_upload, run_bulk,
)
from accounts.permissions import IsAdminOrTeacher
from students.utils import sort_students_by_name
from . import services, utils
from .serializers import (
    AddStudentsSerializer,
    AddTeacherSerializer,
    ClassroomCreateSerializer,
    ClassroomDetailSerializer,
    ClassroomSerializer,
    ClassroomUpdateSerializer,
    StudentBriefSerializer,
)
import logging

logger = logging.getLogger(__name__)


class ClassroomViewSet(viewsets.ViewSet):
    """REST API for class management and membership"""
    permission_classes = [IsAdminOrTeacher]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def list(self, request):
        serializer = ClassroomSerializer(services.list_classrooms(), many=True)
        return success_response(serializer.data)

    @action(detail=False, methods=['get'], url_path='for-lessons')
    def for_lessons(self, request):
        """Class list for the lesson screen, with today's period count"""
        context = {'extra_counts': {'todayPeriodCount': services.today_period_counts()}}
        serializer = ClassroomSerializer(services.list_classrooms(), many=True, context=context)
        return success_response(serializer.data)

    @action(detail=False, methods=['get'], url_path='for-tests')
    def for_tests(self, request):
        """Class list for the test screen, with the number of tests"""
        context = {'extra_counts': {'testCount': services.test_counts()}}
        serializer = ClassroomSerializer(services.list_classrooms(), many=True, context=context)
        return success_response(serializer.data)

    def create(self, request):
        serializer = ClassroomCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        classroom = services.create_classroom(serializer.validated_data)
        return success_response(ClassroomDetailSerializer(classroom).data, status_code=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return success_response(ClassroomDetailSerializer(services.get_classroom(pk)).data)

    def update(self, request, pk=None):
        serializer = ClassroomUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        classroom = services.update_classroom(pk, serializer.validated_data)
        return success_response(ClassroomDetailSerializer(classroom).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        services.delete_classroom(pk)
        return success_response(message='Class deleted.')

    # ==================== MEMBERSHIP ====================

    @action(detail=True, methods=['post', 'delete'])
    def teachers(self, request, pk=None):
        if request.method == 'DELETE':
            teacher_id = request.query_params.get('teacherId') or request.data.get('teacherId')
            classroom = services.remove_teacher(pk, teacher_id)
            return success_response(ClassroomDetailSerializer(classroom).data)

        serializer = AddTeacherSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        classroom = services.add_teacher(pk, serializer.validated_data['teacherId'])
        return success_response(ClassroomDetailSerializer(classroom).data)

    @action(detail=True, methods=['post'])
    def students(self, request, pk=None):
        serializer = AddStudentsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        classroom = services.add_students(pk, serializer.validated_data['studentIds'])
        return success_response(ClassroomDetailSerializer(classroom).data)

    @action(detail=True, methods=['delete'], url_path=r'students/(?P<student_id>[^/.]+)')
    def remove_student(self, request, pk=None, student_id=None):
        classroom = services.remove_student(pk, student_id)
        return success_response(ClassroomDetailSerializer(classroom).data)

    # ==================== CSV ====================

    @action(detail=False, methods=['post'])
    def bulk(self, request):
        rows = read_rows(read_upload(request), utils.COLUMNS, utils.HEADER_KEYWORDS)
        if is_dry_run(request):
            return success_response(preview_rows(rows, utils.validate_row))

        def create(values):
            serializer = ClassroomCreateSerializer(data=values)
            serializer.is_valid(raise_exception=True)
            services.create_classroom(serializer.validated_data)

        return success_response(run_bulk(rows, utils.validate_row, create, logger, 'class'))

    @action(detail=False, methods=['get'])
    def export(self, request):
        classrooms = services.list_classrooms()
        search = (request.query_params.get('search') or '').strip().lower()
        if search:
            classrooms = [c for c in classrooms if search in c.name.lower()]
        ids = {value for value in request.query_params.get('ids', '').split(',') if value}
        if ids:
            classrooms = [c for c in classrooms if str(c.id) in ids]
        return csv_response(dated_filename(utils.EXPORT_PREFIX), utils.EXPORT_HEADER, utils.export_rows(classrooms))

    @action(detail=False, methods=['get'])
    def template(self, request):
        return csv_response(utils.TEMPLATE_FILENAME, utils.TEMPLATE_HEADER)


# ==================== TEACHER CONSOLE ====================

class TeacherClassListView(APIView):
    """Admins get every class, teachers the classes they are assigned to"""
    permission_classes = [IsAdminOrTeacher]

    def get(self, request):
        return success_response(ClassroomSerializer(services.classrooms_for_user(request.user), many=True).data)


class TeacherClassStudentsView(APIView):
    permission_classes = [IsAdminOrTeacher]

    def get(self, request, class_id):
        classroom = services.get_accessible_classroom(class_id, request.user)
        students = sort_students_by_name(classroom.students)
        return success_response(StudentBriefSerializer(students, many=True).data)
