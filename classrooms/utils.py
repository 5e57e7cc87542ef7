# classrooms/utils.py - CSV layout of the class bulk upload and export

from academy.csv_utils import require_fields

COLUMNS = ['name', 'description']
HEADER_KEYWORDS = ['반 이름', '반이름', 'name']
TEMPLATE_HEADER = ['반 이름', '비고']
EXPORT_HEADER = ['반 이름', '담당 강사', '소속 학생 수', '생성일', '비고']
TEMPLATE_FILENAME = '반_일괄등록_양식.csv'
EXPORT_PREFIX = '반목록'


def validate_row(values):
    return require_fields(values, {'name': '반 이름'})


def export_rows(classrooms):
    return [
        [
            c.name,
            ', '.join(teacher.name for teacher in c.teachers),
            len(c.students),
            c.created_at.isoformat() if c.created_at else '',
            c.description,
        ]
        for c in classrooms
    ]
