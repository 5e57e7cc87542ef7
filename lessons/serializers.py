from rest_framework import serializers

from academy.api import is_object_id
from classrooms.serializers import StudentBriefSerializer
from students.utils import sort_students_by_name
from .models import MARK_CHOICES


def _class_id(obj):
    ref = obj._data.get('classroom')
    return str(ref.id) if ref is not None else None


# ==================== LESSON DAYS ====================

class StudentRecordSerializer(serializers.Serializer):
    studentId = serializers.CharField(source='student_id')
    studentName = serializers.SerializerMethodField()
    attendance = serializers.ChoiceField(choices=MARK_CHOICES, allow_blank=True, required=False, default='')
    homework = serializers.ChoiceField(choices=MARK_CHOICES, allow_blank=True, required=False, default='')
    note = serializers.CharField(allow_blank=True, required=False, default='')

    def get_studentName(self, obj):
        return self.context.get('student_names', {}).get(str(obj.student_id), '-')

    def validate_studentId(self, value):
        if not is_object_id(value):
            raise serializers.ValidationError('Invalid student id.')
        return value


class PeriodSerializer(serializers.Serializer):
    teacherId = serializers.CharField(source='teacher_id', read_only=True)
    teacherName = serializers.SerializerMethodField()
    memo = serializers.CharField(read_only=True)
    homeworkDescription = serializers.CharField(source='homework_description', read_only=True)
    homeworkDueDate = serializers.DateTimeField(source='homework_due_date', format='%Y-%m-%d', read_only=True)
    records = StudentRecordSerializer(many=True, read_only=True)

    def get_teacherName(self, obj):
        return self.context.get('teacher_names', {}).get(str(obj.teacher_id), '-')


class LessonDayListSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    classId = serializers.SerializerMethodField()
    className = serializers.SerializerMethodField()
    date = serializers.DateTimeField(format='%Y-%m-%d', read_only=True)
    periodCount = serializers.SerializerMethodField()

    def get_classId(self, obj):
        return _class_id(obj)

    def get_className(self, obj):
        return self.context.get('class_names', {}).get(_class_id(obj), '-')

    def get_periodCount(self, obj):
        return len(obj.periods)


class LessonDaySerializer(LessonDayListSerializer):
    """A lesson day with its periods and the class roster"""
    periods = PeriodSerializer(many=True, read_only=True)
    students = serializers.SerializerMethodField()

    def get_students(self, obj):
        return StudentBriefSerializer(sort_students_by_name(obj.classroom.students), many=True).data


class LessonDayCreateSerializer(serializers.Serializer):
    classId = serializers.CharField(source='class_id')
    date = serializers.CharField()


class LessonDayUpdateSerializer(serializers.Serializer):
    classId = serializers.CharField(source='class_id', required=False)
    date = serializers.CharField(required=False)


class AddPeriodSerializer(serializers.Serializer):
    teacherId = serializers.CharField(source='teacher_id')


class PeriodUpdateSerializer(serializers.Serializer):
    periodIndex = serializers.IntegerField(source='period_index')
    teacherId = serializers.CharField(source='teacher_id', required=False, allow_blank=True)
    memo = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    homeworkDescription = serializers.CharField(
        source='homework_description', required=False, allow_blank=True, allow_null=True
    )
    homeworkDueDate = serializers.CharField(
        source='homework_due_date', required=False, allow_blank=True, allow_null=True
    )
    records = StudentRecordSerializer(many=True, required=False)


# ==================== LEGACY LESSONS ====================

class LessonSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    classId = serializers.SerializerMethodField()
    date = serializers.DateTimeField(format='%Y-%m-%d', read_only=True)
    period = serializers.CharField(read_only=True)
    progress = serializers.CharField(read_only=True)
    homework = serializers.CharField(read_only=True)
    homeworkDueDate = serializers.DateTimeField(source='homework_due_date', format='%Y-%m-%d', read_only=True)
    attendanceStatus = serializers.CharField(source='attendance_status', read_only=True)
    homeworkDone = serializers.BooleanField(source='homework_done', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    def get_classId(self, obj):
        return _class_id(obj)


class LessonCreateSerializer(serializers.Serializer):
    classId = serializers.CharField(source='class_id')
    date = serializers.DateField()
    period = serializers.CharField(max_length=20)
    progress = serializers.CharField(required=False, allow_blank=True)
    homework = serializers.CharField(required=False, allow_blank=True)
    homeworkDueDate = serializers.DateField(source='homework_due_date', required=False, allow_null=True)
    attendanceStatus = serializers.CharField(source='attendance_status', required=False, allow_blank=True)
    homeworkDone = serializers.BooleanField(source='homework_done', required=False)


class LessonUpdateSerializer(LessonCreateSerializer):
    """Same fields as create, all optional; the class cannot change"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('partial', True)
        super().__init__(*args, **kwargs)
        self.fields.pop('classId')
