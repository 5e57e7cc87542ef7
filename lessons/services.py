# lessons/services.py - Lesson days, their periods and the legacy lesson log

import datetime
import logging

from django.conf import settings
from rest_framework.exceptions import NotFound, ValidationError

from academy.api import end_of_day, is_object_id, parse_date, parse_optional_date
from classrooms.models import Classroom
from classrooms.services import find_by_name, get_accessible_classroom, get_classroom
from students.models import Student
from teachers import services as teacher_services
from .models import Lesson, LessonDay, Period, StudentRecord
from .utils import parse_period

logger = logging.getLogger(__name__)


def get_lesson_day(lesson_day_id):
    if not is_object_id(lesson_day_id):
        raise NotFound('Lesson day not found.')
    lesson_day = LessonDay.objects(id=lesson_day_id).first()
    if lesson_day is None:
        raise NotFound('Lesson day not found.')
    return lesson_day


def _find_day(classroom, date):
    return LessonDay.objects(classroom=classroom, date__gte=date, date__lte=end_of_day(date)).first()


# ==================== LESSON DAYS ====================

def create_lesson_day(classroom_id, date):
    """One lesson day per class and date; a second one is rejected"""
    if not is_object_id(classroom_id):
        raise ValidationError('classId: class not found.')
    classroom = Classroom.objects(id=classroom_id).first()
    if classroom is None:
        raise ValidationError('classId: class not found.')
    date = parse_date(date)
    if _find_day(classroom, date) is not None:
        raise ValidationError('A lesson day already exists for this class and date.')

    lesson_day = LessonDay(classroom=classroom, date=date, periods=[])
    lesson_day.save()
    logger.info('Lesson day %s created', lesson_day)
    return lesson_day


def filter_lesson_days(date_from=None, date_to=None, classroom_id=None, teacher_id=None):
    query = LessonDay.objects
    if date_from:
        query = query.filter(date__gte=parse_date(date_from, 'dateFrom'))
    if date_to:
        query = query.filter(date__lte=end_of_day(parse_date(date_to, 'dateTo')))
    if classroom_id and is_object_id(classroom_id):
        query = query.filter(classroom=classroom_id)
    if teacher_id and is_object_id(teacher_id):
        query = query.filter(periods__teacher_id=teacher_id)
    return list(query.order_by('-date'))


def lesson_day_for(classroom_id, date):
    """The lesson day of a class on a date, or None"""
    if not is_object_id(classroom_id):
        raise NotFound('Class not found.')
    return _find_day(classroom_id, parse_date(date))


def lesson_days_on(day):
    start = datetime.datetime.combine(day, datetime.time.min)
    return list(LessonDay.objects(date__gte=start, date__lte=end_of_day(start)))


def update_lesson_day(lesson_day_id, data):
    lesson_day = get_lesson_day(lesson_day_id)
    if data.get('class_id'):
        lesson_day.classroom = get_classroom(data['class_id'])
    if data.get('date'):
        lesson_day.date = parse_date(data['date'])
    clash = _find_day(lesson_day.classroom, lesson_day.date)
    if clash is not None and clash.id != lesson_day.id:
        raise ValidationError('A lesson day already exists for this class and date.')
    lesson_day.save()
    return lesson_day


def delete_lesson_day(lesson_day_id):
    lesson_day = get_lesson_day(lesson_day_id)
    lesson_day.delete()
    logger.info('Lesson day %s deleted', lesson_day_id)


# ==================== PERIODS ====================

def _blank_records(classroom):
    return [StudentRecord(student_id=student_id) for student_id in classroom.student_ids]


def add_period(lesson_day_id, teacher_id):
    """Append a period with one empty record per current class member"""
    lesson_day = get_lesson_day(lesson_day_id)
    teacher = teacher_services.get_teacher(teacher_id)
    lesson_day.periods.append(Period(teacher_id=teacher.id, records=_blank_records(lesson_day.classroom)))
    lesson_day.save()
    return lesson_day


def parse_period_index(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError('periodIndex: a whole number is required.')


def _period_at(lesson_day, index):
    if index < 0 or index >= len(lesson_day.periods):
        raise NotFound('Period not found.')
    return lesson_day.periods[index]


def update_period(lesson_day_id, index, data):
    lesson_day = get_lesson_day(lesson_day_id)
    period = _period_at(lesson_day, index)

    if data.get('teacher_id'):
        period.teacher_id = teacher_services.get_teacher(data['teacher_id']).id
    if 'memo' in data:
        period.memo = data['memo'] or ''
    if 'homework_description' in data:
        period.homework_description = data['homework_description'] or ''
    if 'homework_due_date' in data:
        # Empty or null clears the due date
        period.homework_due_date = parse_optional_date(data['homework_due_date'], 'homeworkDueDate')
    if data.get('records') is not None:
        period.records = [
            StudentRecord(
                student_id=record['student_id'],
                attendance=record.get('attendance', ''),
                homework=record.get('homework', ''),
                note=record.get('note') or '',
            )
            for record in data['records']
        ]
    lesson_day.save()
    return lesson_day


def remove_period(lesson_day_id, index):
    lesson_day = get_lesson_day(lesson_day_id)
    _period_at(lesson_day, index)
    del lesson_day.periods[index]
    lesson_day.save()
    return lesson_day


# ==================== SERIALIZER CONTEXT ====================

def lesson_day_context(lesson_days):
    """Name lookups for classes, teachers and students referenced by the days"""
    class_ids, teacher_ids, student_ids = set(), set(), set()
    for day in lesson_days:
        ref = day._data.get('classroom')
        if ref is not None:
            class_ids.add(ref.id)
        for period in day.periods:
            teacher_ids.add(str(period.teacher_id))
            student_ids.update(str(record.student_id) for record in period.records)

    class_names = {str(c.id): c.name for c in Classroom.objects(id__in=list(class_ids)).only('id', 'name')}
    student_names = {
        str(s.id): s.name
        for s in Student.objects(id__in=[value for value in student_ids if is_object_id(value)]).only('id', 'name')
    }
    return {
        'class_names': class_names,
        'teacher_names': teacher_services.teacher_names(teacher_ids),
        'student_names': student_names,
    }


# ==================== CSV BULK ====================

def find_row_targets(values):
    """Class and teacher named by a lesson CSV row (None when unknown)"""
    return find_by_name(values.get('class_name', '')), teacher_services.find_by_name(values.get('teacher_name', ''))


def create_from_row(values):
    """
    Reuse the class's lesson day for the date (creating it when missing) and
    put the teacher on the row's period, appending periods up to it.
    A blank period column appends one period.
    """
    classroom, teacher = find_row_targets(values)
    if classroom is None:
        raise ValidationError(f'Class "{values.get("class_name")}" not found.')
    if teacher is None:
        raise ValidationError(f'Teacher "{values.get("teacher_name")}" not found.')
    date = parse_date(values.get('date'))

    lesson_day = _find_day(classroom, date)
    if lesson_day is None:
        lesson_day = LessonDay(classroom=classroom, date=date, periods=[])

    try:
        target = parse_period(values.get('period'))
    except ValueError as e:
        raise ValidationError(str(e))
    if target is None:
        target = len(lesson_day.periods) + 1
        if target > settings.LESSON_MAX_PERIODS:
            raise ValidationError(f'The lesson day already has {settings.LESSON_MAX_PERIODS} periods.')
    while len(lesson_day.periods) < target:
        lesson_day.periods.append(Period(teacher_id=teacher.id, records=_blank_records(classroom)))
    lesson_day.periods[target - 1].teacher_id = teacher.id
    lesson_day.save()
    return lesson_day


# ==================== LEGACY LESSONS ====================

def get_lesson(lesson_id, user):
    if not is_object_id(lesson_id):
        raise NotFound('Lesson not found.')
    lesson = Lesson.objects(id=lesson_id).first()
    if lesson is None:
        raise NotFound('Lesson not found.')
    get_accessible_classroom(lesson._data['classroom'].id, user)
    return lesson


def list_lessons(classroom_id, user, date_from=None, date_to=None):
    classroom = get_accessible_classroom(classroom_id, user)
    query = Lesson.objects(classroom=classroom)
    if date_from:
        query = query.filter(date__gte=parse_date(date_from, 'from'))
    if date_to:
        query = query.filter(date__lte=end_of_day(parse_date(date_to, 'to')))
    return list(query.order_by('-date', 'period'))


LESSON_FIELDS = ['period', 'progress', 'homework', 'attendance_status', 'homework_done']


def create_lesson(data, user):
    classroom = get_accessible_classroom(data['class_id'], user)
    lesson = Lesson(
        classroom=classroom,
        date=parse_date(data['date']),
        homework_due_date=parse_optional_date(data.get('homework_due_date'), 'homeworkDueDate'),
    )
    for field in LESSON_FIELDS:
        if field in data:
            setattr(lesson, field, data[field])
    lesson.save()
    return lesson


def update_lesson(lesson_id, data, user):
    lesson = get_lesson(lesson_id, user)
    if data.get('date'):
        lesson.date = parse_date(data['date'])
    if 'homework_due_date' in data:
        lesson.homework_due_date = parse_optional_date(data['homework_due_date'], 'homeworkDueDate')
    for field in LESSON_FIELDS:
        if field in data:
            setattr(lesson, field, data[field])
    lesson.save()
    return lesson


def delete_lesson(lesson_id, user):
    lesson = get_lesson(lesson_id, user)
    lesson.delete()
