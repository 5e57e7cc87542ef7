# classrooms/services.py - Classes, their teachers/students and teacher access checks

import datetime
import logging
from collections import Counter

from bson import ObjectId
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from academy.api import is_object_id
from exams.models import Exam
from lessons.models import LessonDay
from students.models import Student
from teachers.services import get_teacher, teacher_for_user
from .models import Classroom

logger = logging.getLogger(__name__)


def get_classroom(classroom_id):
    if not is_object_id(classroom_id):
        raise NotFound('Class not found.')
    classroom = Classroom.objects(id=classroom_id).first()
    if classroom is None:
        raise NotFound('Class not found.')
    return classroom


def create_classroom(data):
    classroom = Classroom(
        name=data['name'].strip(),
        description=(data.get('description') or '').strip(),
    )
    classroom.save()
    logger.info('Class %s created', classroom.name)
    return classroom


def list_classrooms():
    return list(Classroom.objects.order_by('-created_at'))


def today_period_counts(today=None):
    """Periods registered today, per class"""
    today = today or datetime.date.today()
    start = datetime.datetime.combine(today, datetime.time.min)
    end = start + datetime.timedelta(days=1)
    counts = {}
    for raw in LessonDay.objects(date__gte=start, date__lt=end).only('classroom', 'periods').as_pymongo():
        counts[str(raw['classroom'])] = len(raw.get('periods', []))
    return counts


def test_counts():
    """Number of tests per class"""
    return Counter(str(raw['classroom']) for raw in Exam.objects.only('classroom').as_pymongo())


def update_classroom(classroom_id, data):
    classroom = get_classroom(classroom_id)
    if 'name' in data:
        classroom.name = data['name'].strip()
    if 'description' in data:
        classroom.description = (data['description'] or '').strip()
    if 'teacher_ids' in data:
        classroom.teachers = [get_teacher(teacher_id) for teacher_id in data['teacher_ids']]
    classroom.save()
    return classroom


def delete_classroom(classroom_id):
    """Lesson days, lessons and tests of the class go with it"""
    classroom = get_classroom(classroom_id)
    classroom.delete()
    logger.info('Class %s deleted', classroom.name)


# ==================== MEMBERSHIP ====================

def add_teacher(classroom_id, teacher_id):
    classroom = get_classroom(classroom_id)
    if not teacher_id:
        raise ValidationError('teacherId: this field is required.')
    teacher = get_teacher(teacher_id)
    if not classroom.has_teacher(teacher):
        classroom.update(push__teachers=teacher)
        classroom.reload()
    return classroom


def remove_teacher(classroom_id, teacher_id):
    classroom = get_classroom(classroom_id)
    if not is_object_id(teacher_id):
        raise ValidationError('teacherId: a valid teacher id is required.')
    Classroom.objects(id=classroom.id).update(pull__teachers=ObjectId(teacher_id))
    classroom.reload()
    return classroom


def add_students(classroom_id, student_ids):
    """Add the students that are not members yet and make this their primary class"""
    classroom = get_classroom(classroom_id)
    if not student_ids:
        raise ValidationError('studentIds: provide at least one student id.')
    invalid = [value for value in student_ids if not is_object_id(value)]
    if invalid:
        raise ValidationError(f'studentIds: invalid id {invalid[0]}.')

    existing = set(classroom.student_ids)
    to_add = list(Student.objects(id__in=[value for value in student_ids if value not in existing]))
    if to_add:
        classroom.update(push__students=to_add)
        Student.objects(id__in=[s.id for s in to_add]).update(set__classroom=classroom)
        classroom.reload()
    logger.info('Added %s students to class %s', len(to_add), classroom.name)
    return classroom


def remove_student(classroom_id, student_id):
    classroom = get_classroom(classroom_id)
    if not is_object_id(student_id):
        raise NotFound('Student not found.')
    Classroom.objects(id=classroom.id).update(pull__students=ObjectId(student_id))
    Student.objects(id=student_id).update(unset__classroom=True)
    classroom.reload()
    return classroom


# ==================== TEACHER ACCESS ====================

def classrooms_for_user(user):
    """Admins see every class, teachers only the classes they are assigned to"""
    if user.role == 'admin':
        return list(Classroom.objects.order_by('name'))
    teacher = teacher_for_user(user.id)
    if teacher is None:
        return []
    return list(Classroom.objects(teachers=teacher).order_by('name'))


def can_access_classroom(classroom, user):
    if user.role == 'admin':
        return True
    return classroom.has_teacher(teacher_for_user(user.id))


def get_accessible_classroom(classroom_id, user):
    """404 for unknown classes, 403 when a teacher is not assigned to it"""
    classroom = get_classroom(classroom_id)
    if not can_access_classroom(classroom, user):
        raise PermissionDenied('You are not assigned to this class.')
    return classroom


def find_by_name(name):
    return Classroom.objects(name=name.strip()).first()
