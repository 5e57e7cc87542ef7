# teachers/utils.py - CSV layout of the teacher bulk upload and export

from academy.csv_utils import require_fields, validate_phone

COLUMNS = ['name', 'login_id', 'password', 'phone', 'description']
HEADER_KEYWORDS = ['이름', 'name']
TEMPLATE_HEADER = ['이름', '로그인 ID', '비밀번호', '전화번호', '비고']
EXPORT_HEADER = ['이름', '로그인 ID', '전화번호', '담당 반 개수', '비고']
TEMPLATE_FILENAME = '강사_일괄등록_양식.csv'
EXPORT_PREFIX = '강사목록'

REQUIRED_LABELS = {
    'name': '이름',
    'login_id': '로그인 ID',
    'password': '비밀번호',
}


def validate_row(values):
    errors = require_fields(values, REQUIRED_LABELS)
    errors += validate_phone(values.get('phone', ''), '전화번호')
    return errors


def export_rows(teachers, class_counts):
    return [
        [t.name, t.login_id, t.phone, class_counts.get(str(t.id), 0), t.description]
        for t in teachers
    ]
