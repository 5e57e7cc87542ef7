# accounts/tokens.py - Signed bearer tokens (JWT) carrying the user id and role

import datetime

import jwt
from django.conf import settings


class TokenError(Exception):
    """Raised when a bearer token is missing its claims, expired or tampered with"""


def issue_token(user, now=None):
    now = now or datetime.datetime.now(datetime.timezone.utc)
    payload = {
        'sub': str(user.id),
        'role': user.role,
        'iat': now,
        'exp': now + datetime.timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token):
    """Return the verified claims or raise TokenError"""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenError('Token has expired')
    except jwt.InvalidTokenError:
        raise TokenError('Invalid token')

    if not claims.get('sub') or not claims.get('role'):
        raise TokenError('Invalid token')
    return claims
