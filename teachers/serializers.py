from rest_framework import serializers

from accounts.serializers import UserSummarySerializer


class TeacherSerializer(serializers.Serializer):
    """Representation of a MongoEngine Teacher with its login account"""
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    user = UserSummarySerializer(read_only=True)
    loginId = serializers.CharField(source='login_id', read_only=True)
    phone = serializers.CharField(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)


class TeacherListSerializer(TeacherSerializer):
    classCount = serializers.SerializerMethodField()

    def get_classCount(self, obj):
        return self.context.get('class_counts', {}).get(str(obj.id), 0)


class TeacherCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    loginId = serializers.CharField(max_length=100, source='login_id')
    password = serializers.CharField(min_length=4, max_length=128, trim_whitespace=False)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class TeacherUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    loginId = serializers.CharField(max_length=100, source='login_id', required=False, allow_blank=True)
    password = serializers.CharField(max_length=128, required=False, allow_blank=True, trim_whitespace=False)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
