from rest_framework import serializers

from .models import Exam
from .scoring import test_title


class ExamSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    classId = serializers.SerializerMethodField()
    testType = serializers.CharField(source='test_type', read_only=True)
    title = serializers.SerializerMethodField()
    date = serializers.DateTimeField(format='%Y-%m-%d', read_only=True)
    questionCount = serializers.IntegerField(source='question_count', read_only=True)
    subject = serializers.CharField(read_only=True)
    bigUnit = serializers.CharField(source='big_unit', read_only=True)
    smallUnit = serializers.CharField(source='small_unit', read_only=True)
    source = serializers.CharField(read_only=True)
    scoreCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    def get_classId(self, obj):
        ref = obj._data.get('classroom')
        return str(ref.id) if ref is not None else None

    def get_title(self, obj):
        return test_title(obj)

    def get_scoreCount(self, obj):
        return len(obj.scores)


class ExamCreateSerializer(serializers.Serializer):
    classId = serializers.CharField(source='class_id')
    testType = serializers.ChoiceField(source='test_type', choices=[value for value, _ in Exam.TEST_TYPES])
    date = serializers.DateField()
    questionCount = serializers.IntegerField(source='question_count', min_value=0, required=False, allow_null=True)
    subject = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    bigUnit = serializers.CharField(source='big_unit', required=False, allow_blank=True, allow_null=True)
    smallUnit = serializers.CharField(source='small_unit', required=False, allow_blank=True, allow_null=True)
    source = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ExamUpdateSerializer(ExamCreateSerializer):
    """The class and test type are fixed once created"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('partial', True)
        super().__init__(*args, **kwargs)
        self.fields.pop('classId')
        self.fields.pop('testType')


class ScoreSerializer(serializers.Serializer):
    studentId = serializers.CharField(source='student_id')
    score = serializers.FloatField(min_value=0)
