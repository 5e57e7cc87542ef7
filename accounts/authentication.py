# accounts/authentication.py - DRF authentication from the Authorization: Bearer header

from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed

from .tokens import TokenError, decode_token


class TokenUser:
    """
    Request principal built from the token claims alone.
    Views that need the stored account load it with `accounts.services.get_account`.
    """
    is_authenticated = True
    is_anonymous = False

    def __init__(self, user_id, role):
        self.id = user_id
        self.role = role

    def __str__(self):
        return f"{self.id} ({self.role})"


class BearerTokenAuthentication(BaseAuthentication):
    keyword = b'bearer'

    def authenticate(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword:
            return None
        if len(auth) != 2:
            raise AuthenticationFailed('Invalid token header')

        try:
            claims = decode_token(auth[1].decode('utf-8'))
        except (TokenError, UnicodeError) as e:
            raise AuthenticationFailed(str(e) if isinstance(e, TokenError) else 'Invalid token')

        return TokenUser(claims['sub'], claims['role']), claims

    def authenticate_header(self, request):
        # Makes DRF answer 401 rather than 403 for anonymous requests
        return 'Bearer realm="api"'


class OptionalBearerTokenAuthentication(BearerTokenAuthentication):
    """Expired or tampered tokens count as anonymous instead of failing with 401"""

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except AuthenticationFailed:
            return None
