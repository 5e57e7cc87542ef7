# lessons/utils.py - CSV layout of the lesson bulk upload

import datetime
import re

from django.conf import settings

from academy.csv_utils import require_fields

COLUMNS = ['date', 'class_name', 'period', 'teacher_name']
# Date column title only: class names such as "A반" contain 반
HEADER_KEYWORDS = ['날짜', 'date']
TEMPLATE_HEADER = ['날짜', '반', '교시', '강사']
TEMPLATE_FILENAME = '수업_일괄등록_양식.csv'
PERIOD_PATTERN = re.compile(r'^(\d+)\s*(교시)?$')

REQUIRED_LABELS = {
    'date': '날짜',
    'class_name': '반',
    'teacher_name': '강사',
}


def parse_period(value):
    """
    Period number of a 교시 cell such as "3" or "3교시".
    None for a blank cell. Raises ValueError for anything else or a number
    outside 1..LESSON_MAX_PERIODS.
    """
    value = (value or '').strip()
    if not value:
        return None
    match = PERIOD_PATTERN.match(value)
    if match is None:
        raise ValueError(f'교시 "{value}" must be a number such as 3 or 3교시')
    number = int(match.group(1))
    if not 1 <= number <= settings.LESSON_MAX_PERIODS:
        raise ValueError(f'교시 must be between 1 and {settings.LESSON_MAX_PERIODS}')
    return number


def validate_row(values, find_targets):
    """Required fields, a YYYY-MM-DD date, a valid period and a known class and teacher"""
    errors = require_fields(values, REQUIRED_LABELS)
    date = values.get('date', '').strip()
    if date:
        try:
            datetime.date.fromisoformat(date)
        except ValueError:
            errors.append('날짜 must use the YYYY-MM-DD format')
    try:
        parse_period(values.get('period'))
    except ValueError as e:
        errors.append(str(e))
    if values.get('class_name', '').strip() and values.get('teacher_name', '').strip():
        classroom, teacher = find_targets(values)
        if classroom is None:
            errors.append(f'Class "{values["class_name"]}" not found')
        if teacher is None:
            errors.append(f'Teacher "{values["teacher_name"]}" not found')
    return errors
