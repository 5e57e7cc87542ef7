from rest_framework import serializers


class UserSerializer(serializers.Serializer):
    """Public profile of a MongoEngine User (never exposes the password hash)"""
    id = serializers.CharField(read_only=True)
    role = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    loginId = serializers.CharField(source='login_id', read_only=True)
    phone = serializers.CharField(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)


class UserSummarySerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    loginId = serializers.CharField(source='login_id', read_only=True)
    name = serializers.CharField(read_only=True)
    phone = serializers.CharField(read_only=True)


class LoginSerializer(serializers.Serializer):
    loginId = serializers.CharField(max_length=100, trim_whitespace=False)
    password = serializers.CharField(max_length=128, trim_whitespace=False)


class FindLoginIdSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[('student', 'Student'), ('parent', 'Parent')])
    name = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=30)


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(trim_whitespace=False)
    newPassword = serializers.CharField(min_length=4, max_length=128, trim_whitespace=False)


class ChangeLoginIdSerializer(serializers.Serializer):
    newLoginId = serializers.CharField(max_length=100, allow_blank=True)


class ChangePhoneSerializer(serializers.Serializer):
    newPhone = serializers.CharField(max_length=30, allow_blank=True, required=False, default='')
