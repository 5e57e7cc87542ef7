from rest_framework import serializers

from students.utils import sort_students_by_name


class TeacherBriefSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)


class StudentBriefSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    school = serializers.CharField(read_only=True)
    grade = serializers.CharField(read_only=True)
    studentPhone = serializers.CharField(source='student_phone', read_only=True)
    parentPhone = serializers.CharField(source='parent_phone', read_only=True)


class ClassroomSerializer(serializers.Serializer):
    """List representation of a MongoEngine Classroom"""
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    teachers = TeacherBriefSerializer(many=True, read_only=True)
    teacherIds = serializers.ListField(source='teacher_ids', child=serializers.CharField(), read_only=True)
    studentCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    def get_studentCount(self, obj):
        return len(obj.students)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        # Per-page extras: todayPeriodCount (lessons) / testCount (tests)
        for key, counts in self.context.get('extra_counts', {}).items():
            data[key] = counts.get(str(instance.id), 0)
        return data


class ClassroomDetailSerializer(ClassroomSerializer):
    students = serializers.SerializerMethodField()

    def get_students(self, obj):
        return StudentBriefSerializer(sort_students_by_name(obj.students), many=True).data


class ClassroomCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True)


class ClassroomUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    teacherIds = serializers.ListField(source='teacher_ids', child=serializers.CharField(), required=False)


class AddTeacherSerializer(serializers.Serializer):
    teacherId = serializers.CharField()


class AddStudentsSerializer(serializers.Serializer):
    studentIds = serializers.ListField(child=serializers.CharField(), allow_empty=False)
