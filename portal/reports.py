# portal/reports.py - Monthly unit report built from the weekly tests of a month

import pandas as pd

from exams.curriculum import unit_order_key
from exams.scoring import round_half_up

STRONG_THRESHOLD = 70
WEAK_LIMIT = 5
PERCENT_TOTAL = 100

UNIT_COLUMNS = ['subject', 'bigUnit', 'smallUnit']


def _number(value):
    """Plain int for whole numbers, float otherwise (drops numpy types)"""
    value = float(value)
    return int(value) if value.is_integer() else value


def _percent(score, question_count):
    if question_count and question_count > 0:
        return score / question_count * 100
    return score


def class_percentile(test, score):
    """
    Standing of `score` among the class results of one test: 100 for the
    best result, lower further down the list.
    """
    results = sorted(
        (_percent(value, test.question_count) for value in test.score_values),
        reverse=True,
    )
    if not results:
        return PERCENT_TOTAL
    mine = _percent(score, test.question_count)
    rank = next((index for index, value in enumerate(results) if value <= mine), len(results))
    return round_half_up((len(results) - rank) / len(results) * 100)


def report_rows(tests, student_id):
    """One row per weekly test the student has a score on"""
    rows = []
    for test in tests:
        if test.test_type != 'weeklyTest':
            continue
        score = test.score_for(student_id)
        if score is None:
            continue
        has_count = bool(test.question_count and test.question_count > 0)
        rows.append({
            'subject': (test.subject or '').strip(),
            'bigUnit': (test.big_unit or '').strip(),
            'smallUnit': (test.small_unit or '').strip(),
            'correct': score,
            'total': test.question_count if has_count else PERCENT_TOTAL,
            'percentile': class_percentile(test, score),
        })
    return rows


def _unit_percentage(correct, total):
    return round_half_up(correct / total * 100) if total > 0 else 0


def build_monthly_report(tests, student_id):
    """
    Aggregate the month's weekly tests per (subject, big unit, small unit).
    Units at or above the threshold are strengths (best first); the rest
    are weaknesses (worst first, capped).
    """
    rows = report_rows(tests, student_id)
    if not rows:
        return {
            'testCount': 0,
            'totalCorrect': 0,
            'totalQuestions': 0,
            'totalPercentage': 0,
            'avgPercentile': 0,
            'units': [],
            'strongUnits': [],
            'weakUnits': [],
        }

    df = pd.DataFrame(rows)
    grouped = df.groupby(UNIT_COLUMNS, sort=False).agg(
        correct=('correct', 'sum'),
        total=('total', 'sum'),
        tests=('correct', 'size'),
        avgPercentile=('percentile', 'mean'),
    ).reset_index()

    units = []
    for row in grouped.itertuples(index=False):
        units.append({
            'subject': row.subject,
            'bigUnit': row.bigUnit,
            'smallUnit': row.smallUnit,
            'correct': _number(row.correct),
            'total': _number(row.total),
            'count': int(row.tests),
            'percentage': _unit_percentage(row.correct, row.total),
            'avgPercentile': round_half_up(row.avgPercentile),
        })
    units.sort(key=lambda unit: unit_order_key(unit['subject'], unit['bigUnit'], unit['smallUnit']))

    strong = sorted(
        (unit for unit in units if unit['percentage'] >= STRONG_THRESHOLD),
        key=lambda unit: unit['percentage'], reverse=True,
    )
    weak = sorted(
        (unit for unit in units if unit['percentage'] < STRONG_THRESHOLD),
        key=lambda unit: unit['percentage'],
    )[:WEAK_LIMIT]

    total_correct = df['correct'].sum()
    total_questions = df['total'].sum()
    return {
        'testCount': len(df),
        'totalCorrect': _number(total_correct),
        'totalQuestions': _number(total_questions),
        'totalPercentage': _unit_percentage(total_correct, total_questions),
        'avgPercentile': round_half_up(df['percentile'].mean()),
        'units': units,
        'strongUnits': strong,
        'weakUnits': weak,
    }
