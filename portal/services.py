# portal/services.py - Student and parent views of a class: lessons, tests and statistics

import datetime
import logging

from rest_framework.exceptions import NotFound

from academy.api import end_of_day, format_date, is_object_id, parse_date
from classrooms.models import Classroom
from exams.models import Exam
from exams.scoring import average, round_half_up, score_as_percent, test_title
from exams.serializers import ExamSerializer
from lessons.models import LessonDay
from students.models import Student
from teachers.services import teacher_names
from . import calendar
from .reports import build_monthly_report

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10
RECENT_DAYS = 7
RECENT_FEED_LIMIT = 20

HOMEWORK_LABELS = {'O': '제출', 'X': '미제출'}


# ==================== STUDENT / CLASS RESOLUTION ====================

def student_for_user(user):
    """The student behind a student login, or the child behind a parent login"""
    if is_object_id(user.id):
        if user.role == 'parent':
            student = Student.objects(parent_user=user.id).first()
        else:
            student = Student.objects(user=user.id).first()
        if student is not None:
            return student
    raise NotFound('No student is linked to this account.')


def student_classes(student):
    return list(Classroom.objects(students=student).order_by('name'))


def resolve_classroom(student, class_id=None):
    """
    The requested class when the student belongs to it, else the primary
    class, else the first class listing the student. None when there is none.
    """
    if class_id and is_object_id(class_id):
        requested = Classroom.objects(id=class_id, students=student).first()
        if requested is not None:
            return requested
    if student.classroom is not None:
        return student.classroom
    return Classroom.objects(students=student).order_by('name').first()


# ==================== LESSON ROWS ====================

def flatten_lesson_days(lesson_days, student_id):
    """One row per period, seen from the student's record in it"""
    names = teacher_names(period.teacher_id for day in lesson_days for period in day.periods)
    rows = []
    for day in lesson_days:
        for index, period in enumerate(day.periods):
            record = period.record_for(student_id)
            homework = record.homework if record is not None else ''
            rows.append({
                'id': f'{day.id}-{index}',
                'date': format_date(day.date),
                'period': index + 1,
                'progress': period.memo or '',
                'homework': HOMEWORK_LABELS.get(homework, ''),
                'homeworkDone': homework == 'O',
                'attendanceStatus': record.attendance if record is not None else '',
                'homeworkDescription': (period.homework_description or '').strip(),
                'homeworkDueDate': format_date(period.homework_due_date),
                'teacherName': names.get(str(period.teacher_id), ''),
                'note': (record.note or '').strip() if record is not None else '',
            })
    return rows


def _rate(part, total):
    return round_half_up(part / total * 100, 2) if total else 0


def homework_summary(rows):
    assigned = [row for row in rows if row['homework'] or row['progress'].strip()]
    done = [row for row in rows if row['homeworkDone']]
    return {'total': len(assigned), 'done': len(done), 'rate': _rate(len(done), len(assigned))}


def attendance_summary(rows):
    attended = [row for row in rows if row['attendanceStatus'].strip()]
    return {'total': len(rows), 'attended': len(attended), 'rate': _rate(len(attended), len(rows))}


def _lesson_days(classroom, start=None, end=None):
    query = LessonDay.objects(classroom=classroom)
    if start is not None:
        query = query.filter(date__gte=start)
    if end is not None:
        query = query.filter(date__lte=end)
    return query.order_by('-date')


# ==================== TESTS ====================

def test_with_scores(test, student_id):
    """Serialized test plus the student's score and the class average/best"""
    data = dict(ExamSerializer(test).data)
    values = test.score_values
    data['myScore'] = test.score_for(student_id)
    data['average'] = average(values, 2)
    data['maxScore'] = round_half_up(max(values), 2) if values else None
    return data


def _tests(classroom, start=None, end=None):
    query = Exam.objects(classroom=classroom)
    if start is not None:
        query = query.filter(date__gte=start, date__lte=end)
    return query.order_by('-date')


# ==================== DASHBOARD ====================

def _student_info(student):
    return {'id': str(student.id), 'name': student.name, 'school': student.school, 'grade': student.grade}


def empty_dashboard(student):
    return {
        'student': _student_info(student),
        'class': None,
        'teacherNames': [],
        'recentLessons': [],
        'recentTests': [],
        'homeworkSummary': {'total': 0, 'done': 0, 'rate': 0},
        'attendanceSummary': {'total': 0, 'attended': 0, 'rate': 0},
        'recentHomework': [],
        'recentComments': [],
    }


def dashboard(student, class_id=None, today=None):
    classroom = resolve_classroom(student, class_id)
    if classroom is None:
        return empty_dashboard(student)

    today = today or datetime.date.today()
    week_start = format_date(today - datetime.timedelta(days=RECENT_DAYS))

    recent_rows = flatten_lesson_days(list(_lesson_days(classroom).limit(RECENT_LIMIT * 2)), student.id)
    rows = flatten_lesson_days(list(_lesson_days(classroom)), student.id)
    last_week = [row for row in rows if row['date'] >= week_start]

    seen = []
    for teacher in classroom.teachers:
        if teacher.name and teacher.name not in seen:
            seen.append(teacher.name)

    recent_homework = [
        {
            'id': row['id'],
            'date': row['date'],
            'teacherName': row['teacherName'],
            'homeworkDescription': row['homeworkDescription'],
            'homeworkDueDate': row['homeworkDueDate'],
            'homeworkDone': row['homeworkDone'],
        }
        for row in last_week if row['homeworkDescription'] or row['homeworkDueDate']
    ][:RECENT_FEED_LIMIT]
    recent_comments = [
        {'id': row['id'], 'date': row['date'], 'teacherName': row['teacherName'], 'note': row['note']}
        for row in last_week if row['note']
    ][:RECENT_FEED_LIMIT]

    recent_tests = []
    for test in _tests(classroom).limit(RECENT_LIMIT):
        data = dict(ExamSerializer(test).data)
        data['myScore'] = test.score_for(student.id)
        recent_tests.append(data)

    return {
        'student': _student_info(student),
        'class': {'id': str(classroom.id), 'name': classroom.name, 'description': classroom.description},
        'teacherNames': seen,
        'recentLessons': recent_rows[:RECENT_LIMIT],
        'recentTests': recent_tests,
        'homeworkSummary': homework_summary(rows),
        'attendanceSummary': attendance_summary(rows),
        'recentHomework': recent_homework,
        'recentComments': recent_comments,
    }


# ==================== LISTS ====================

def lessons(student, class_id=None, date_from=None, date_to=None):
    classroom = resolve_classroom(student, class_id)
    if classroom is None:
        return None
    start = parse_date(date_from, 'from') if date_from else None
    end = end_of_day(parse_date(date_to, 'to')) if date_to else None
    return {'lessons': flatten_lesson_days(list(_lesson_days(classroom, start, end)), student.id)}


def tests(student, class_id=None):
    classroom = resolve_classroom(student, class_id)
    if classroom is None:
        return None
    return {'tests': [test_with_scores(test, student.id) for test in _tests(classroom)]}


def score_trend(student, class_id=None, year=None, month=None):
    """Chart series of percentages, oldest test first; optionally one month only"""
    classroom = resolve_classroom(student, class_id)
    if classroom is None:
        return None
    start, end = calendar.month_bounds(year, month) if year else (None, None)
    series = []
    for test in reversed(list(_tests(classroom, start, end))):
        values = test.score_values
        series.append({
            'date': format_date(test.date),
            'label': f'{test.date.month}.{test.date.day:02d}',
            'title': test_title(test),
            'myScore': score_as_percent(test.score_for(student.id), test.question_count),
            'average': score_as_percent(average(values, 2), test.question_count),
            'maxScore': score_as_percent(max(values) if values else None, test.question_count),
        })
    return series


# ==================== MONTHLY STATISTICS ====================

def _month_rows(classroom, student, year, month):
    start, end = calendar.month_bounds(year, month)
    return flatten_lesson_days(list(_lesson_days(classroom, start, end)), student.id)


def monthly_statistics(student, year, month, class_id=None):
    classroom = resolve_classroom(student, class_id)
    if classroom is None:
        return None
    rows = _month_rows(classroom, student, year, month)
    start, end = calendar.month_bounds(year, month)
    my_scores = [
        score for score in (test.score_for(student.id) for test in _tests(classroom, start, end))
        if score is not None
    ]
    return {
        'year': year,
        'month': month,
        'attendance': attendance_summary(rows),
        'homework': homework_summary(rows),
        'testAverage': average(my_scores, 2),
        'testCount': len(my_scores),
    }


def monthly_calendar(student, year, month, class_id=None):
    classroom = resolve_classroom(student, class_id)
    if classroom is None:
        return None
    rows = _month_rows(classroom, student, year, month)
    return {
        'year': year,
        'month': month,
        'cells': calendar.calendar_cells(year, month),
        'marks': calendar.daily_marks(rows),
    }


def monthly_report(student, year, month, class_id=None):
    classroom = resolve_classroom(student, class_id)
    if classroom is None:
        return None
    start, end = calendar.month_bounds(year, month)
    report = build_monthly_report(list(_tests(classroom, start, end)), student.id)
    logger.info('Monthly report %s-%02d built for student %s', year, month, student.id)
    return dict(report, year=year, month=month, className=classroom.name, studentName=student.name)
