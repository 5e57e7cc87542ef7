# exams/scoring.py - Score to percentage conversion and test labels

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

TEST_TYPE_LABELS = {
    'weeklyTest': '주간TEST',
    'realTest': '실전TEST',
}

TITLE_SEPARATOR = ' · '


def round_half_up(value, ndigits=0):
    """
    Round halves away from zero (2.5 -> 3) instead of Python's banker's rounding.
    Returns an int when ndigits is 0.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if ndigits == 0 else float(rounded)


def score_as_percent(value, question_count=None):
    """
    Percentage for a raw score. Without a question count the score is
    already a percentage and is only capped at 100.
    """
    if value is None:
        return None
    if not question_count or question_count <= 0:
        return min(100, round_half_up(value))
    return round_half_up(value / question_count * 100)


def parse_fraction_score(text):
    """'correct/total' -> percentage, None for anything unparseable or a zero total"""
    if not text or '/' not in str(text):
        return None
    correct, _, total = str(text).partition('/')
    try:
        correct = Decimal(correct.strip())
        total = Decimal(total.strip())
    except InvalidOperation:
        return None
    if not correct.is_finite() or not total.is_finite() or total <= 0:
        return None
    return round_half_up(correct / total * 100)


def format_score(value, question_count=None):
    percent = score_as_percent(value, question_count)
    return '-' if percent is None else f'{percent}점'


def test_title(test):
    """Weekly tests are named by their curriculum tags, real tests by their source"""
    if test.test_type == 'weeklyTest':
        parts = [part for part in (test.subject, test.small_unit) if part]
        return TITLE_SEPARATOR.join(parts) or TEST_TYPE_LABELS['weeklyTest']
    return test.source or TEST_TYPE_LABELS.get(test.test_type, test.test_type)


def average(values, ndigits=2):
    values = [value for value in values if value is not None]
    if not values:
        return None
    return round_half_up(sum(values) / len(values), ndigits)
