# accounts/services.py - Login, login-id recovery and self-service account changes

import logging
import re

from mongoengine.errors import DoesNotExist, ValidationError as MongoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ValidationError

from students.models import Student
from .models import User
from .tokens import issue_token

logger = logging.getLogger(__name__)

PHONE_NOISE = re.compile(r'[\s\-]')


class InvalidCredentials(APIException):
    """401 raised by the login view, which runs without authenticators"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid login ID or password.'
    default_code = 'invalid_credentials'


def normalize_phone(value):
    """Phone numbers are compared without spaces or hyphens"""
    return PHONE_NOISE.sub('', str(value or ''))


def login(login_id, password):
    """Check credentials and issue a bearer token. Login ids match exactly."""
    user = User.objects(login_id=login_id).first()
    if user is None or not user.check_password(password):
        logger.info('Failed login attempt for %s', login_id)
        raise InvalidCredentials()

    logger.info('User %s logged in as %s', user.login_id, user.role)
    return user, issue_token(user)


def find_login_id(kind, name, phone):
    """
    Recover a login id.
    Students match on their own phone, parents on the parent phone of the
    student with that name.
    """
    name = name.strip()
    phone = normalize_phone(phone)
    if not name or not phone:
        raise ValidationError('Enter both the name and the phone number.')

    for student in Student.objects(name=name):
        candidate = student.student_phone if kind == 'student' else student.parent_phone
        if normalize_phone(candidate) != phone:
            continue
        user = student.user if kind == 'student' else student.parent_user
        if user is not None:
            return user.login_id
    raise NotFound('No account matches that name and phone number.')


def get_account(user_id):
    try:
        return User.objects.get(id=user_id)
    except (DoesNotExist, MongoValidationError):
        raise NotFound('User not found.')


def change_password(user_id, current_password, new_password):
    user = get_account(user_id)
    if not user.check_password(current_password):
        raise ValidationError('The current password is incorrect.')
    user.set_password(new_password)
    user.save()
    logger.info('User %s changed their password', user.login_id)
    return user


def change_login_id(user_id, new_login_id):
    new_login_id = new_login_id.strip()
    if not new_login_id:
        raise ValidationError('Enter a new login ID.')

    existing = User.objects(login_id=new_login_id).first()
    if existing is not None and str(existing.id) != str(user_id):
        raise ValidationError('That login ID is already in use.')

    user = get_account(user_id)
    old_login_id = user.login_id
    user.login_id = new_login_id
    user.save()
    logger.info('User %s changed login ID to %s', old_login_id, new_login_id)
    return user


def change_phone(user_id, new_phone):
    user = get_account(user_id)
    user.phone = new_phone or ''
    user.save()
    return user
