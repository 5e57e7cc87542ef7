# academy/api.py - Response envelope, exception handling and shared request parsing

import logging
import datetime

from django.conf import settings
from mongoengine.errors import DoesNotExist, NotUniqueError, ValidationError as MongoValidationError
from bson import ObjectId
from bson.errors import InvalidId
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = 'A server error occurred.'
AUTH_REQUIRED_MESSAGE = 'Authentication required'


# ==================== RESPONSE ENVELOPE ====================

def success_response(data=None, message=None, status_code=status.HTTP_200_OK):
    """Wrap a payload in the {success, data, message} envelope"""
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    return Response(body, status=status_code)


def nullable_response(data):
    """Envelope that keeps an explicit `data: null`"""
    return Response({'success': True, 'data': data})


def error_response(message, status_code=status.HTTP_400_BAD_REQUEST):
    return Response({'success': False, 'message': message}, status=status_code)


def first_error_message(detail):
    """Dig the first human readable message out of a DRF error structure"""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = first_error_message(value)
            if field in ('non_field_errors', 'detail'):
                return message
            return f'{field}: {message}'
        return 'Invalid request'
    if isinstance(detail, (list, tuple)):
        return first_error_message(detail[0]) if detail else 'Invalid request'
    return str(detail)


def api_exception_handler(exc, context):
    """DRF exception handler that renders every failure in the envelope"""
    if isinstance(exc, DoesNotExist):
        exc = NotFound(str(exc) or 'Resource not found')
    elif isinstance(exc, NotUniqueError):
        exc = ValidationError('A record with the same unique value already exists')
    elif isinstance(exc, MongoValidationError):
        exc = ValidationError(exc.message if hasattr(exc, 'message') else str(exc))

    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.error(
            'Unhandled error in %s: %s',
            view.__class__.__name__ if view else 'unknown view', exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return error_response(GENERIC_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, NotAuthenticated):
        response.data = {'success': False, 'message': AUTH_REQUIRED_MESSAGE}
    elif isinstance(exc, APIException):
        response.data = {'success': False, 'message': first_error_message(exc.detail)}
    return response


# ==================== REQUEST PARSING HELPERS ====================

def parse_object_id(value, label='id'):
    """Return an ObjectId or raise a 404 for malformed ids"""
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise NotFound(f'{label} not found')


def is_object_id(value):
    return bool(value) and ObjectId.is_valid(str(value))


def parse_date(value, field='date'):
    """Parse YYYY-MM-DD (or an ISO timestamp) into midnight of that day"""
    if isinstance(value, datetime.datetime):
        return datetime.datetime.combine(value.date(), datetime.time.min)
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time.min)
    text = str(value or '').strip()
    if not text:
        raise ValidationError(f'{field}: this field is required')
    try:
        parsed = datetime.date.fromisoformat(text[:10])
    except ValueError:
        raise ValidationError(f'{field}: use the YYYY-MM-DD format')
    return datetime.datetime.combine(parsed, datetime.time.min)


def parse_optional_date(value, field='date'):
    if value in (None, ''):
        return None
    return parse_date(value, field)


def end_of_day(day):
    return datetime.datetime.combine(day.date(), datetime.time.max)


def parse_page_params(query_params):
    """Read page/limit query params with the configured defaults and cap"""
    try:
        page = max(1, int(query_params.get('page') or 1))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(query_params.get('limit') or settings.LIST_PAGE_SIZE)
    except (TypeError, ValueError):
        limit = settings.LIST_PAGE_SIZE
    limit = min(settings.LIST_MAX_PAGE_SIZE, max(1, limit))
    return page, limit


def format_date(value):
    """YYYY-MM-DD for date/datetime values, None otherwise"""
    if value is None:
        return None
    return value.strftime('%Y-%m-%d')
