# portal/calendar.py - Month bounds, calendar grid and per-day O/X marks

import calendar
import datetime

from rest_framework.exceptions import ValidationError

MIN_YEAR = 2000
MAX_YEAR = 2100


def parse_year_month(query_params, today=None):
    """year/month query params, defaulting to the current month"""
    today = today or datetime.date.today()
    try:
        year = int(query_params.get('year') or today.year)
        month = int(query_params.get('month') or today.month)
    except (TypeError, ValueError):
        raise ValidationError('year and month must be numbers.')
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f'year: must be between {MIN_YEAR} and {MAX_YEAR}.')
    if not 1 <= month <= 12:
        raise ValidationError('month: must be between 1 and 12.')
    return year, month


def month_bounds(year, month):
    """First instant and last instant of the month"""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime.datetime(year, month, 1)
    end = datetime.datetime.combine(datetime.date(year, month, last_day), datetime.time.max)
    return start, end


def calendar_cells(year, month):
    """Sunday-first grid: a None per blank leading cell, then 1..days in month"""
    first_weekday, days = calendar.monthrange(year, month)
    # monthrange counts Monday as 0
    leading = (first_weekday + 1) % 7
    return [None] * leading + list(range(1, days + 1))


def date_range(start, end):
    """Every day from start to end, both included"""
    if isinstance(start, datetime.datetime):
        start = start.date()
    if isinstance(end, datetime.datetime):
        end = end.date()
    return [start + datetime.timedelta(days=offset) for offset in range((end - start).days + 1)]


def _merge(current, mark):
    if mark == 'X' or current == 'X':
        return 'X'
    return mark or current


def daily_marks(rows):
    """
    One attendance/homework mark per lesson date. An X on any period of the
    day wins over an O; homework is X as soon as one period is not done.
    """
    marks = {}
    for row in rows:
        day = marks.setdefault(row['date'], {'attendance': None, 'homework': None})
        attendance = (row.get('attendanceStatus') or '').strip()
        if attendance in ('O', 'X'):
            day['attendance'] = _merge(day['attendance'], attendance)
        day['homework'] = _merge(day['homework'], 'O' if row.get('homeworkDone') else 'X')
    return marks
