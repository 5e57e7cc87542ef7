# exams/services.py - Class tests and score entry for the teacher console

import logging

from rest_framework.exceptions import NotFound, ValidationError

from academy.api import is_object_id, parse_date
from classrooms.services import get_accessible_classroom
from students.models import Student
from .models import Exam, ScoreEntry

logger = logging.getLogger(__name__)

TEST_FIELDS = ['question_count', 'subject', 'big_unit', 'small_unit', 'source']


def get_test(test_id, user):
    """404 for unknown tests, 403 when the teacher does not own the class"""
    if not is_object_id(test_id):
        raise NotFound('Test not found.')
    test = Exam.objects(id=test_id).first()
    if test is None:
        raise NotFound('Test not found.')
    get_accessible_classroom(test._data['classroom'].id, user)
    return test


def list_tests(classroom_id, user):
    classroom = get_accessible_classroom(classroom_id, user)
    return list(Exam.objects(classroom=classroom).order_by('-date'))


def create_test(data, user):
    classroom = get_accessible_classroom(data['class_id'], user)
    test = Exam(
        classroom=classroom,
        test_type=data['test_type'],
        date=parse_date(data['date']),
        scores=[],
    )
    for field in TEST_FIELDS:
        if data.get(field) is not None:
            setattr(test, field, data[field])
    test.save()
    logger.info('Test %s created for class %s', test, classroom.name)
    return test


def update_test(test_id, data, user):
    test = get_test(test_id, user)
    if data.get('date'):
        test.date = parse_date(data['date'])
    for field in TEST_FIELDS:
        if field in data:
            value = data[field]
            setattr(test, field, value if value is not None or field == 'question_count' else '')
    test.save()
    return test


def delete_test(test_id, user):
    test = get_test(test_id, user)
    test.delete()
    logger.info('Test %s deleted', test_id)


# ==================== SCORES ====================

def list_scores(test_id, user):
    """One row per recorded score, with the student's name"""
    test = get_test(test_id, user)
    ids = [entry.student_id for entry in test.scores]
    names = {s.id: s.name for s in Student.objects(id__in=ids).only('id', 'name')}
    return [
        {
            'studentId': str(entry.student_id),
            'studentName': names.get(entry.student_id, ''),
            'score': entry.score,
        }
        for entry in test.scores
    ]


def upsert_score(test_id, student_id, score, user):
    """Replace the student's score when present, otherwise add it"""
    test = get_test(test_id, user)
    if not is_object_id(student_id):
        raise ValidationError('studentId: invalid student id.')
    if test.question_count and score > test.question_count:
        raise ValidationError(f'score: cannot exceed the question count ({test.question_count}).')

    for entry in test.scores:
        if str(entry.student_id) == str(student_id):
            entry.score = score
            break
    else:
        test.scores.append(ScoreEntry(student_id=student_id, score=score))
    test.save()
    return test
