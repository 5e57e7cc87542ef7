# teachers/services.py - Teacher accounts, search and class assignment counts

import logging
import re
from collections import Counter

from mongoengine.errors import NotUniqueError
from rest_framework.exceptions import NotFound, ValidationError

from academy.api import is_object_id
from accounts.models import User
from classrooms.models import Classroom
from .models import Teacher

logger = logging.getLogger(__name__)


def get_teacher(teacher_id):
    if not is_object_id(teacher_id):
        raise NotFound('Teacher not found.')
    teacher = Teacher.objects(id=teacher_id).first()
    if teacher is None:
        raise NotFound('Teacher not found.')
    return teacher


def teacher_for_user(user_id):
    """Teacher profile of a login account, or None for non-teachers"""
    if not is_object_id(user_id):
        return None
    return Teacher.objects(user=user_id).first()


def create_teacher(data):
    login_id = data['login_id'].strip()
    if User.objects(login_id=login_id).first() is not None:
        raise ValidationError(f'Login ID "{login_id}" is already in use.')

    try:
        user = User.create_user(login_id, data['password'], 'teacher', data['name'], (data.get('phone') or '').strip())
    except NotUniqueError:
        raise ValidationError(f'Login ID "{login_id}" is already in use.')

    teacher = Teacher(
        name=data['name'].strip(),
        description=(data.get('description') or '').strip(),
        user=user,
    )
    teacher.save()
    logger.info('Teacher %s created with login %s', teacher.name, login_id)
    return teacher


def filter_teachers(search=None):
    """Search matches the account name or login id"""
    query = Teacher.objects.order_by('-created_at')
    if search and search.strip():
        pattern = re.compile(re.escape(search.strip()), re.IGNORECASE)
        user_ids = [user.id for user in User.objects(role='teacher').filter(
            __raw__={'$or': [{'name': pattern}, {'login_id': pattern}]}
        ).only('id')]
        query = query.filter(user__in=user_ids)
    return query


def class_counts():
    """Number of classes each teacher is assigned to"""
    counts = Counter()
    for raw in Classroom.objects.only('teachers').as_pymongo():
        for teacher_id in raw.get('teachers', []):
            counts[str(teacher_id)] += 1
    return counts


def list_teachers(search=None):
    return list(filter_teachers(search)), class_counts()


def update_teacher(teacher_id, data):
    teacher = get_teacher(teacher_id)
    user = teacher.user

    if 'name' in data:
        teacher.name = data['name'].strip()
        user.name = teacher.name
    if data.get('login_id', '').strip():
        login_id = data['login_id'].strip()
        if User.objects(login_id=login_id, id__ne=user.id).first() is not None:
            raise ValidationError(f'Login ID "{login_id}" is already in use.')
        user.login_id = login_id
    if data.get('password'):
        user.set_password(data['password'])
    if 'phone' in data:
        user.phone = (data['phone'] or '').strip()
    if 'description' in data:
        teacher.description = (data['description'] or '').strip()

    user.save()
    teacher.save()
    return teacher


def delete_teacher(teacher_id):
    """Unassign the teacher from every class and delete its login"""
    teacher = get_teacher(teacher_id)
    Classroom.objects(teachers=teacher).update(pull__teachers=teacher)
    User.objects(id=teacher.user.id).delete()
    teacher.delete()
    logger.info('Teacher %s deleted', teacher.name)


def teacher_names(ids):
    """Map of teacher id -> name for the given ids"""
    valid = [value for value in {str(value) for value in ids if value} if is_object_id(value)]
    return {str(t.id): t.name for t in Teacher.objects(id__in=valid).only('id', 'name')}


def find_by_name(name):
    return Teacher.objects(name=(name or '').strip()).first()
