from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from academy.csv_utils import PHONE_PATTERN


def validate_phone_number(value):
    if not PHONE_PATTERN.match(value.strip()):
        raise serializers.ValidationError('Phone numbers may only contain digits, -, + and spaces.')
    return value


class ClassroomBriefSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)


class StudentSerializer(serializers.Serializer):
    """List representation of a MongoEngine Student"""
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    school = serializers.CharField(read_only=True)
    grade = serializers.CharField(read_only=True)
    studentPhone = serializers.CharField(source='student_phone', read_only=True)
    parentPhone = serializers.CharField(source='parent_phone', read_only=True)
    classId = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    def get_classId(self, obj):
        # Read the raw reference so a list never dereferences every class
        ref = obj._data.get('classroom')
        return str(ref.id) if ref is not None else None


class StudentListSerializer(StudentSerializer):
    classCount = serializers.SerializerMethodField()

    def get_classCount(self, obj):
        return self.context.get('class_counts', {}).get(str(obj.id), 0)


class StudentDetailSerializer(StudentSerializer):
    user = UserSummarySerializer(read_only=True)
    parentUser = UserSummarySerializer(source='parent_user', read_only=True)
    classroom = ClassroomBriefSerializer(read_only=True)


class StudentCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    school = serializers.CharField(max_length=100)
    grade = serializers.CharField(max_length=20)
    studentPhone = serializers.CharField(max_length=30, source='student_phone', validators=[validate_phone_number])
    parentPhone = serializers.CharField(max_length=30, source='parent_phone', validators=[validate_phone_number])
    studentLoginId = serializers.CharField(max_length=100, source='student_login_id', required=False, allow_blank=True)
    studentPassword = serializers.CharField(max_length=128, source='student_password', required=False, allow_blank=True, trim_whitespace=False)
    parentLoginId = serializers.CharField(max_length=100, source='parent_login_id', required=False, allow_blank=True)
    parentPassword = serializers.CharField(max_length=128, source='parent_password', required=False, allow_blank=True, trim_whitespace=False)
    classId = serializers.CharField(source='classroom_id', required=False, allow_blank=True, allow_null=True)


class StudentUpdateSerializer(StudentCreateSerializer):
    """Same fields as create, all optional"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('partial', True)
        super().__init__(*args, **kwargs)
