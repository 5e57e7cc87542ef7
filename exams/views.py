# exams/views.py - Teacher test and score API

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.views import APIView

from academy.api import success_response
from accounts.permissions import IsAdminOrTeacher
from . import services
from .curriculum import curriculum_tree
from .serializers import ExamCreateSerializer, ExamSerializer, ExamUpdateSerializer, ScoreSerializer


class ClassTestListView(APIView):
    """Tests of one class, newest first"""
    permission_classes = [IsAdminOrTeacher]

    def get(self, request, class_id):
        return success_response(ExamSerializer(services.list_tests(class_id, request.user), many=True).data)


class ExamViewSet(viewsets.ViewSet):
    permission_classes = [IsAdminOrTeacher]

    def create(self, request):
        serializer = ExamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        test = services.create_test(serializer.validated_data, request.user)
        return success_response(ExamSerializer(test).data, status_code=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return success_response(ExamSerializer(services.get_test(pk, request.user)).data)

    def update(self, request, pk=None):
        serializer = ExamUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        test = services.update_test(pk, serializer.validated_data, request.user)
        return success_response(ExamSerializer(test).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        services.delete_test(pk, request.user)
        return success_response(message='Test deleted.')

    @action(detail=True, methods=['get', 'post'])
    def scores(self, request, pk=None):
        """GET lists the recorded scores, POST upserts one student's score"""
        if request.method == 'GET':
            return success_response(services.list_scores(pk, request.user))

        serializer = ScoreSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.upsert_score(
            pk, serializer.validated_data['student_id'], serializer.validated_data['score'], request.user
        )
        return success_response(services.list_scores(pk, request.user))


class CurriculumView(APIView):
    permission_classes = [IsAdminOrTeacher]

    def get(self, request):
        return success_response(curriculum_tree())
