# students/utils.py - CSV layout of the student bulk upload and export

from academy.csv_utils import require_fields, validate_phone

COLUMNS = ['name', 'school', 'grade', 'student_phone', 'parent_phone']
HEADER_KEYWORDS = ['이름', 'name']
TEMPLATE_HEADER = ['이름', '학교', '학년', '학생 전화번호', '학부모 전화번호']
EXPORT_HEADER = ['이름', '학교', '학년', '학생 전화번호', '학부모 전화번호', '소속 반 수']
TEMPLATE_FILENAME = '학생_일괄등록_양식.csv'
EXPORT_PREFIX = '학생목록'

REQUIRED_LABELS = {
    'name': '이름',
    'school': '학교',
    'grade': '학년',
    'student_phone': '학생 전화번호',
    'parent_phone': '학부모 전화번호',
}


def validate_row(values):
    errors = require_fields(values, REQUIRED_LABELS)
    errors += validate_phone(values.get('student_phone', ''), REQUIRED_LABELS['student_phone'])
    errors += validate_phone(values.get('parent_phone', ''), REQUIRED_LABELS['parent_phone'])
    return errors


def export_rows(students, class_counts):
    return [
        [s.name, s.school, s.grade, s.student_phone, s.parent_phone, class_counts.get(str(s.id), 0)]
        for s in students
    ]


def sort_students_by_name(students):
    """Sorts students by name, then school"""
    return sorted(students, key=lambda s: (s.name, s.school))
