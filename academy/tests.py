"""
Tests for the shared API helpers.
Tests: CSV parsing/building, header detection, bulk helpers, envelope and request parsing.
"""
import datetime

from django.test import SimpleTestCase
from rest_framework.exceptions import NotFound, ValidationError

from academy.api import (
    first_error_message, format_date, is_object_id, parse_date, parse_optional_date, parse_page_params,
)
from academy.csv_utils import (
    BOM, build_csv, csv_response, dated_filename, detect_delimiter, detect_header, parse_csv,
    preview_rows, read_rows, run_bulk,
)
from classrooms import utils as class_csv
from lessons import utils as lesson_csv
from students import utils as student_csv
from teachers import utils as teacher_csv


class RecordingLogger:
    def __init__(self):
        self.messages = []

    def info(self, message, *args):
        self.messages.append(message % args)


# ============================================================================
# Parsing
# ============================================================================

class ParseCsvTest(SimpleTestCase):

    def test_quoted_cells_with_commas(self):
        rows = parse_csv('이름,비고\n"A반","월, 수, 금"\n')
        self.assertEqual(rows, [['이름', '비고'], ['A반', '월, 수, 금']])

    def test_escaped_quotes(self):
        rows = parse_csv('"He said ""hi""",x')
        self.assertEqual(rows, [['He said "hi"', 'x']])

    def test_tab_separated(self):
        rows = parse_csv('홍길동\t한빛중\t중2\n김철수\t누리중\t중3')
        self.assertEqual(rows[1], ['김철수', '누리중', '중3'])

    def test_bom_and_blank_lines(self):
        rows = parse_csv(BOM + '이름,학교\r\n\r\n홍길동 , 한빛중 \r\n   \r\n')
        self.assertEqual(rows, [['이름', '학교'], ['홍길동', '한빛중']])

    def test_empty_text(self):
        self.assertEqual(parse_csv(''), [])
        self.assertEqual(parse_csv(BOM + '\n\n'), [])

    def test_detect_delimiter(self):
        self.assertEqual(detect_delimiter('a\tb'), '\t')
        self.assertEqual(detect_delimiter('a\tb,c'), ',')
        self.assertEqual(detect_delimiter('a,b'), ',')


class HeaderDetectionTest(SimpleTestCase):

    def test_student_header(self):
        self.assertTrue(detect_header(student_csv.TEMPLATE_HEADER, student_csv.HEADER_KEYWORDS))
        self.assertFalse(detect_header(['홍길동', '한빛중', '중2'], student_csv.HEADER_KEYWORDS))

    def test_teacher_header(self):
        self.assertTrue(detect_header(['Name', 'Login'], teacher_csv.HEADER_KEYWORDS))

    def test_class_header(self):
        self.assertTrue(detect_header(['반이름', '비고'], class_csv.HEADER_KEYWORDS))
        self.assertFalse(detect_header(['A반', '수요일'], class_csv.HEADER_KEYWORDS))

    def test_lesson_header(self):
        self.assertTrue(detect_header(lesson_csv.TEMPLATE_HEADER, lesson_csv.HEADER_KEYWORDS))
        self.assertFalse(detect_header(['2024-03-04', 'A반', '1교시', '김강사'], lesson_csv.HEADER_KEYWORDS))


class ReadRowsTest(SimpleTestCase):

    def test_header_is_skipped_and_rows_numbered_from_file(self):
        text = '이름,학교,학년,학생 전화번호,학부모 전화번호\n홍길동,한빛중,중2,010-1,010-2\n김철수,누리중'
        rows = read_rows(text, student_csv.COLUMNS, student_csv.HEADER_KEYWORDS)
        self.assertEqual(rows[0][0], 2)
        self.assertEqual(rows[0][1]['parent_phone'], '010-2')
        # Missing cells become empty strings
        self.assertEqual(rows[1], (3, {
            'name': '김철수', 'school': '누리중', 'grade': '', 'student_phone': '', 'parent_phone': '',
        }))

    def test_blank_lines_keep_source_line_numbers(self):
        text = '이름,학교,학년,학생 전화번호,학부모 전화번호\n\n홍길동,한빛중,중2,010-1,010-2\n\n\n김철수,누리중,중1,010-3,010-4\n'
        rows = read_rows(text, student_csv.COLUMNS, student_csv.HEADER_KEYWORDS)
        self.assertEqual([number for number, _ in rows], [3, 6])
        self.assertEqual(rows[1][1]['name'], '김철수')

    def test_rows_without_header(self):
        rows = read_rows('A반,오전반', class_csv.COLUMNS, class_csv.HEADER_KEYWORDS)
        self.assertEqual(rows, [(1, {'name': 'A반', 'description': '오전반'})])


# ============================================================================
# Validation and bulk helpers
# ============================================================================

class RowValidationTest(SimpleTestCase):

    def test_student_row_requires_every_field(self):
        errors = student_csv.validate_row({'name': '홍길동', 'school': '', 'grade': '중2',
                                           'student_phone': '010-1', 'parent_phone': '010-2'})
        self.assertEqual(errors, ['학교 is required'])

    def test_student_row_phone_format(self):
        errors = student_csv.validate_row({'name': 'a', 'school': 'b', 'grade': 'c',
                                           'student_phone': '010-abcd', 'parent_phone': '+82 10 1234'})
        self.assertEqual(len(errors), 1)
        self.assertIn('학생 전화번호', errors[0])

    def test_teacher_row(self):
        errors = teacher_csv.validate_row({'name': '김강사', 'login_id': '', 'password': '', 'phone': ''})
        self.assertEqual(errors, ['로그인 ID is required', '비밀번호 is required'])

    def test_lesson_row_date_format(self):
        found = lambda values: (object(), object())  # noqa: E731
        errors = lesson_csv.validate_row(
            {'date': '2024/03/04', 'class_name': 'A반', 'period': '1', 'teacher_name': '김강사'}, found
        )
        self.assertEqual(errors, ['날짜 must use the YYYY-MM-DD format'])

    def test_lesson_period_cell(self):
        self.assertIsNone(lesson_csv.parse_period(' '))
        self.assertEqual(lesson_csv.parse_period('3'), 3)
        self.assertEqual(lesson_csv.parse_period('3교시'), 3)
        for value in ('2a', '둘째', '0', '500교시'):
            with self.assertRaises(ValueError):
                lesson_csv.parse_period(value)

    def test_lesson_row_unknown_class(self):
        missing_class = lambda values: (None, object())  # noqa: E731
        errors = lesson_csv.validate_row(
            {'date': '2024-03-04', 'class_name': 'Z반', 'period': '1', 'teacher_name': '김강사'}, missing_class
        )
        self.assertEqual(errors, ['Class "Z반" not found'])


class BulkHelpersTest(SimpleTestCase):

    def test_preview_counts(self):
        rows = [(2, {'name': 'A반'}), (3, {'name': ''})]
        result = preview_rows(rows, class_csv.validate_row)
        self.assertEqual((result['valid'], result['invalid']), (1, 1))
        self.assertEqual(result['rows'][1]['errors'], ['반 이름 is required'])

    def test_run_bulk_keeps_going_after_a_failure(self):
        created = []

        def create(values):
            if values['name'] == 'dup':
                raise ValidationError('already exists')
            created.append(values['name'])

        logger = RecordingLogger()
        rows = [(1, {'name': 'A'}), (2, {'name': 'dup'}), (3, {'name': ''}), (4, {'name': 'B'})]
        result = run_bulk(rows, class_csv.validate_row, create, logger, 'class')

        self.assertEqual(created, ['A', 'B'])
        self.assertEqual(result['success'], 2)
        self.assertEqual(result['fail'], 2)
        self.assertEqual([error['row'] for error in result['errors']], [2, 3])
        self.assertIn('2 created, 2 failed', logger.messages[0])


# ============================================================================
# Export
# ============================================================================

class BuildCsvTest(SimpleTestCase):

    def test_bom_crlf_and_quoting(self):
        content = build_csv(['이름', '소속 반 수'], [['홍길동', 2], ['김, 철수', 0]])
        self.assertTrue(content.startswith(BOM))
        self.assertEqual(content[1:].split('\r\n'), ['"이름","소속 반 수"', '"홍길동",2', '"김, 철수",0', ''])

    def test_none_cells_become_empty(self):
        content = build_csv(['a'], [[None]])
        self.assertIn('""', content)

    def test_template_response_has_header_only(self):
        response = csv_response('반_일괄등록_양식.csv', class_csv.TEMPLATE_HEADER)
        self.assertEqual(response.content.decode('utf-8'), BOM + '반 이름,비고')
        self.assertIn("filename*=utf-8''", response['Content-Disposition'])

    def test_dated_filename(self):
        self.assertEqual(dated_filename('학생목록', datetime.date(2024, 3, 4)), '학생목록_2024-03-04.csv')


# ============================================================================
# Request parsing and envelope
# ============================================================================

class RequestParsingTest(SimpleTestCase):

    def test_parse_date(self):
        self.assertEqual(parse_date('2024-02-29'), datetime.datetime(2024, 2, 29))
        self.assertEqual(parse_date('2024-03-04T15:00:00.000Z'), datetime.datetime(2024, 3, 4))
        self.assertEqual(parse_date(datetime.date(2024, 1, 1)), datetime.datetime(2024, 1, 1))

    def test_parse_date_errors(self):
        with self.assertRaises(ValidationError):
            parse_date('')
        with self.assertRaises(ValidationError):
            parse_date('2023-02-29')

    def test_parse_optional_date(self):
        self.assertIsNone(parse_optional_date(''))
        self.assertIsNone(parse_optional_date(None))

    def test_page_params(self):
        self.assertEqual(parse_page_params({}), (1, 20))
        self.assertEqual(parse_page_params({'page': '3', 'limit': '50'}), (3, 50))
        self.assertEqual(parse_page_params({'page': '-1', 'limit': '1000'}), (1, 100))
        self.assertEqual(parse_page_params({'page': 'x', 'limit': 'y'}), (1, 20))
        self.assertEqual(parse_page_params({'limit': '0'}), (1, 1))

    def test_object_id_check(self):
        self.assertTrue(is_object_id('64b000000000000000000001'))
        self.assertFalse(is_object_id('nope'))
        self.assertFalse(is_object_id(None))

    def test_format_date(self):
        self.assertEqual(format_date(datetime.datetime(2024, 3, 4, 9, 30)), '2024-03-04')
        self.assertIsNone(format_date(None))

    def test_first_error_message(self):
        self.assertEqual(first_error_message({'name': ['This field is required.']}), 'name: This field is required.')
        self.assertEqual(first_error_message({'non_field_errors': ['Bad pair']}), 'Bad pair')
        self.assertEqual(first_error_message(['Plain']), 'Plain')
        self.assertEqual(first_error_message(NotFound('x').detail), 'x')
