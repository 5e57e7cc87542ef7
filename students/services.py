# students/services.py - Student registration, search and cascading changes

import logging
import math
import re

from mongoengine.errors import NotUniqueError
from rest_framework.exceptions import NotFound, ValidationError

from academy.api import is_object_id
from accounts.models import User
from classrooms.models import Classroom
from .models import Student

logger = logging.getLogger(__name__)

PARENT_NAME_SUFFIX = ' 학부모'


def get_student(student_id):
    if not is_object_id(student_id):
        raise NotFound('Student not found.')
    student = Student.objects(id=student_id).first()
    if student is None:
        raise NotFound('Student not found.')
    return student


def _get_classroom(classroom_id):
    if not classroom_id:
        return None
    classroom = Classroom.objects(id=classroom_id).first() if is_object_id(classroom_id) else None
    if classroom is None:
        raise ValidationError('classId: class not found.')
    return classroom


def _ensure_login_id_free(login_id, exclude=None):
    query = User.objects(login_id=login_id)
    if exclude is not None:
        query = query.filter(id__ne=exclude.id)
    if query.first() is not None:
        raise ValidationError(f'Login ID "{login_id}" is already in use.')


# ==================== CREATE ====================

def create_student(data):
    """
    Create the student together with its two login accounts.
    Login ids and passwords default to the matching phone number, as typed.
    """
    name = data['name'].strip()
    student_phone = data['student_phone']
    parent_phone = data['parent_phone']
    student_login_id = (data.get('student_login_id') or '').strip() or student_phone
    parent_login_id = (data.get('parent_login_id') or '').strip() or parent_phone
    student_password = data.get('student_password') or student_phone
    parent_password = data.get('parent_password') or parent_phone

    if student_login_id == parent_login_id:
        raise ValidationError('The student and parent login IDs must differ.')
    _ensure_login_id_free(student_login_id)
    _ensure_login_id_free(parent_login_id)
    classroom = _get_classroom(data.get('classroom_id'))

    created_users = []
    try:
        student_user = User.create_user(student_login_id, student_password, 'student', name, student_phone)
        created_users.append(student_user)
        parent_user = User.create_user(
            parent_login_id, parent_password, 'parent', f'{name}{PARENT_NAME_SUFFIX}', parent_phone
        )
        created_users.append(parent_user)
    except NotUniqueError:
        for user in created_users:
            user.delete()
        raise ValidationError('A login ID is already in use.')

    student = Student(
        name=name,
        school=data['school'].strip(),
        grade=data['grade'].strip(),
        student_phone=student_phone,
        parent_phone=parent_phone,
        user=student_user,
        parent_user=parent_user,
        classroom=classroom,
    )
    student.save()
    if classroom is not None and not classroom.has_student(student):
        classroom.update(push__students=student)

    logger.info('Student %s registered (login %s / parent %s)', name, student_login_id, parent_login_id)
    return student


# ==================== LIST / SEARCH ====================

def filter_students(search=None, name=None, grade=None, classroom_id=None):
    """Case-insensitive search over name, school and both phone numbers"""
    query = Student.objects
    if name and name.strip():
        query = query.filter(name__icontains=name.strip())
    if grade and grade.strip():
        query = query.filter(grade=grade.strip())
    if classroom_id and is_object_id(classroom_id.strip()):
        query = query.filter(classroom=classroom_id.strip())
    if search and search.strip():
        term = re.escape(search.strip())
        pattern = re.compile(term, re.IGNORECASE)
        query = query.filter(__raw__={'$or': [
            {'name': pattern},
            {'school': pattern},
            {'student_phone': pattern},
            {'parent_phone': pattern},
        ]})
    return query.order_by('-created_at')


def class_counts_for(students):
    """Number of classes whose member list contains each student"""
    return {str(student.id): Classroom.objects(students=student).count() for student in students}


def list_students(page=1, limit=20, **filters):
    query = filter_students(**filters)
    total = query.count()
    students = list(query.skip((page - 1) * limit).limit(limit))
    return {
        'students': students,
        'class_counts': class_counts_for(students),
        'total': total,
        'page': page,
        'limit': limit,
        'total_pages': math.ceil(total / limit) or 1,
    }


# ==================== UPDATE / DELETE ====================

def update_student(student_id, data):
    """Partial update. Name and phone changes are mirrored onto the login accounts."""
    student = get_student(student_id)
    student_user = student.user
    parent_user = student.parent_user

    if 'name' in data:
        name = data['name'].strip()
        student.name = name
        student_user.name = name
        parent_user.name = f'{name}{PARENT_NAME_SUFFIX}'
    if 'school' in data:
        student.school = data['school'].strip()
    if 'grade' in data:
        student.grade = data['grade'].strip()
    if 'student_phone' in data:
        student.student_phone = data['student_phone']
        student_user.phone = data['student_phone']
    if 'parent_phone' in data:
        student.parent_phone = data['parent_phone']
        parent_user.phone = data['parent_phone']
    if 'classroom_id' in data:
        student.classroom = _get_classroom(data['classroom_id'])

    if data.get('student_login_id', '').strip():
        login_id = data['student_login_id'].strip()
        _ensure_login_id_free(login_id, exclude=student_user)
        student_user.login_id = login_id
    if data.get('parent_login_id', '').strip():
        login_id = data['parent_login_id'].strip()
        _ensure_login_id_free(login_id, exclude=parent_user)
        parent_user.login_id = login_id
    if data.get('student_password'):
        student_user.set_password(data['student_password'])
    if data.get('parent_password'):
        parent_user.set_password(data['parent_password'])

    student_user.save()
    parent_user.save()
    student.save()
    if student.classroom is not None and not student.classroom.has_student(student):
        student.classroom.update(push__students=student)
    return student


def delete_student(student_id):
    """Remove the student from every class and delete both login accounts"""
    student = get_student(student_id)
    Classroom.objects(students=student).update(pull__students=student)
    User.objects(id__in=[student.user.id, student.parent_user.id]).delete()
    student.delete()
    logger.info('Student %s deleted with its accounts', student.name)


def students_by_ids(ids):
    """Map of id -> Student for the valid ids given"""
    valid = [value for value in ids if is_object_id(value)]
    return {str(student.id): student for student in Student.objects(id__in=valid)}
