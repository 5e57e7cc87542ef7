# accounts/views.py - Authentication and "my account" API

from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from academy.api import success_response
from . import services
from .authentication import OptionalBearerTokenAuthentication
from .guards import landing_path_for_role, resolve_route
from .serializers import (
    ChangeLoginIdSerializer,
    ChangePasswordSerializer,
    ChangePhoneSerializer,
    FindLoginIdSerializer,
    LoginSerializer,
    UserSerializer,
)


# ==================== AUTHENTICATION ====================

class LoginView(APIView):
    """POST {loginId, password} -> bearer token and role based landing page"""
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, token = services.login(
            serializer.validated_data['loginId'],
            serializer.validated_data['password'],
        )
        return success_response({
            'token': token,
            'user': {'id': str(user.id), 'role': user.role, 'name': user.name},
            'redirectTo': landing_path_for_role(user.role),
        })


class FindLoginIdView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = FindLoginIdSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        login_id = services.find_login_id(
            serializer.validated_data['type'],
            serializer.validated_data['name'],
            serializer.validated_data['phone'],
        )
        return success_response({'loginId': login_id})


class RouteCheckView(APIView):
    """Route guard for the web client. A missing or invalid token means an anonymous caller."""
    authentication_classes = [OptionalBearerTokenAuthentication]
    permission_classes = [AllowAny]

    def get(self, request):
        role = request.user.role if request.user else None
        allowed, redirect_to = resolve_route(request.query_params.get('path', '/'), role)
        return success_response({'allowed': allowed, 'redirectTo': redirect_to})


# ==================== MY ACCOUNT ====================

class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = services.get_account(request.user.id)
        return success_response(UserSerializer(user).data)


class MePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.change_password(
            request.user.id,
            serializer.validated_data['currentPassword'],
            serializer.validated_data['newPassword'],
        )
        return success_response(message='Password changed.')


class MeLoginIdView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = ChangeLoginIdSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = services.change_login_id(request.user.id, serializer.validated_data['newLoginId'])
        return success_response({'loginId': user.login_id}, message='Login ID changed.')


class MePhoneView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = ChangePhoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = services.change_phone(request.user.id, serializer.validated_data['newPhone'])
        return success_response({'phone': user.phone}, message='Phone number changed.')
