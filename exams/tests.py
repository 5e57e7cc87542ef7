"""
Tests for the exams app.
Tests: score rounding and labels, curriculum ordering, test CRUD and score entry with class access.
"""
import datetime
from types import SimpleNamespace

from django.test import SimpleTestCase

from exams.curriculum import UNKNOWN_POSITION, curriculum_tree, unit_order_key
from exams.models import Exam, ScoreEntry
from exams.scoring import (
    average, format_score, parse_fraction_score, round_half_up, score_as_percent, test_title as title_for,
)
from test_helpers import MongoTestCase


def mock_test(test_type='weeklyTest', subject='', small_unit='', source=''):
    return SimpleNamespace(test_type=test_type, subject=subject, small_unit=small_unit, source=source)


# ============================================================================
# Scoring helpers
# ============================================================================

class RoundHalfUpTest(SimpleTestCase):

    def test_halves_round_away_from_zero(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(3.5), 4)
        self.assertEqual(round_half_up(-2.5), -3)

    def test_whole_result_is_int(self):
        self.assertIsInstance(round_half_up(69.4), int)

    def test_decimal_places(self):
        self.assertEqual(round_half_up(1.005, 2), 1.01)
        self.assertEqual(round_half_up(66.666, 2), 66.67)


class ScorePercentTest(SimpleTestCase):

    def test_with_question_count(self):
        self.assertEqual(score_as_percent(7, 10), 70)
        self.assertEqual(score_as_percent(2, 3), 67)

    def test_without_question_count_is_capped(self):
        self.assertEqual(score_as_percent(85.5), 86)
        self.assertEqual(score_as_percent(120, 0), 100)

    def test_missing_score(self):
        self.assertIsNone(score_as_percent(None, 10))

    def test_format_score(self):
        self.assertEqual(format_score(8, 10), '80점')
        self.assertEqual(format_score(None), '-')

    def test_parse_fraction_score(self):
        self.assertEqual(parse_fraction_score('7/10'), 70)
        self.assertEqual(parse_fraction_score(' 1 / 3 '), 33)
        self.assertIsNone(parse_fraction_score('0/0'))
        self.assertIsNone(parse_fraction_score('a/b'))
        self.assertIsNone(parse_fraction_score('70'))
        self.assertIsNone(parse_fraction_score(None))

    def test_average(self):
        self.assertEqual(average([80, 90, None, 75]), 81.67)
        self.assertIsNone(average([]))
        self.assertIsNone(average([None]))


class TitleTest(SimpleTestCase):

    def test_weekly_test_uses_curriculum_tags(self):
        self.assertEqual(title_for(mock_test(subject='중2-1', small_unit='일차부등식')), '중2-1 · 일차부등식')
        self.assertEqual(title_for(mock_test(subject='중2-1')), '중2-1')
        self.assertEqual(title_for(mock_test()), '주간TEST')

    def test_real_test_uses_source(self):
        self.assertEqual(title_for(mock_test('realTest', source='2023 한빛중 기말')), '2023 한빛중 기말')
        self.assertEqual(title_for(mock_test('realTest')), '실전TEST')


class CurriculumTest(SimpleTestCase):

    def test_tree_shape(self):
        tree = curriculum_tree()
        first = tree[0]
        self.assertEqual(first['id'], '중1-1')
        self.assertEqual(first['units'][0]['label'], '소인수분해')
        self.assertEqual(first['units'][0]['smallUnits'][1], {
            'id': '최대공약수와 최소공배수', 'label': '최대공약수와 최소공배수',
        })

    def test_order_key(self):
        self.assertEqual(unit_order_key('중1-1', '소인수분해', '최대공약수와 최소공배수'), (0, 0, 1))
        self.assertLess(unit_order_key('중1-1', '문자와 식', '일차방정식'), unit_order_key('중1-2', '기본 도형과 작도', '기본 도형'))

    def test_unknown_names_sort_last(self):
        self.assertEqual(unit_order_key('중1-1', '없는 단원'), (0, UNKNOWN_POSITION, UNKNOWN_POSITION))
        self.assertEqual(unit_order_key('대학', '', ''), (UNKNOWN_POSITION,) * 3)


# ============================================================================
# API
# ============================================================================

class ExamAPITestBase(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.teacher = self.make_teacher()
        self.api = self.client_for(self.teacher.user)
        self.student = self.make_student()
        self.classroom = self.make_classroom(teachers=[self.teacher], students=[self.student])
        self.other_class = self.make_classroom('B반')

    def make_test(self, classroom=None, **fields):
        fields.setdefault('test_type', 'weeklyTest')
        fields.setdefault('date', datetime.datetime(2024, 3, 4))
        test = Exam(classroom=classroom or self.classroom, **fields)
        test.save()
        return test


class ExamCrudAPITest(ExamAPITestBase):

    def test_create_weekly_test(self):
        response = self.api.post('/api/teacher/tests', {
            'classId': str(self.classroom.id),
            'testType': 'weeklyTest',
            'date': '2024-03-04',
            'questionCount': 20,
            'subject': '중2-1',
            'bigUnit': '부등식',
            'smallUnit': '일차부등식',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['title'], '중2-1 · 일차부등식')
        self.assertEqual(data['classId'], str(self.classroom.id))
        self.assertEqual(data['scoreCount'], 0)

    def test_create_rejects_unknown_type(self):
        response = self.api.post('/api/teacher/tests', {
            'classId': str(self.classroom.id), 'testType': 'quiz', 'date': '2024-03-04',
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_create_for_unassigned_class(self):
        response = self.api.post('/api/teacher/tests', {
            'classId': str(self.other_class.id), 'testType': 'realTest', 'date': '2024-03-04',
        }, format='json')
        self.assertEqual(response.status_code, 403)

    def test_list_newest_first(self):
        self.make_test(date=datetime.datetime(2024, 3, 1))
        self.make_test(date=datetime.datetime(2024, 3, 8), test_type='realTest', source='기말')
        rows = self.api.get(f'/api/teacher/classes/{self.classroom.id}/tests').json()['data']
        self.assertEqual([row['title'] for row in rows], ['기말', '주간TEST'])

    def test_list_other_class_is_forbidden(self):
        response = self.api.get(f'/api/teacher/classes/{self.other_class.id}/tests')
        self.assertEqual(response.status_code, 403)

    def test_update_keeps_type(self):
        test = self.make_test(subject='중2-1')
        data = self.api.patch(f'/api/teacher/tests/{test.id}', {
            'testType': 'realTest', 'subject': None, 'questionCount': 25,
        }, format='json').json()['data']
        self.assertEqual(data['testType'], 'weeklyTest')
        self.assertEqual(data['subject'], '')
        self.assertEqual(data['questionCount'], 25)

    def test_delete(self):
        test = self.make_test()
        self.assertEqual(self.api.delete(f'/api/teacher/tests/{test.id}').status_code, 200)
        self.assertEqual(Exam.objects.count(), 0)

    def test_other_class_test_is_forbidden(self):
        test = self.make_test(self.other_class)
        self.assertEqual(self.api.get(f'/api/teacher/tests/{test.id}').status_code, 403)
        self.assertEqual(self.api.delete(f'/api/teacher/tests/{test.id}').status_code, 403)

    def test_unknown_test(self):
        self.assertEqual(self.api.get('/api/teacher/tests/64b000000000000000000009').status_code, 404)

    def test_curriculum_endpoint(self):
        data = self.api.get('/api/teacher/curriculum').json()['data']
        self.assertEqual(len(data), 13)


class ScoreAPITest(ExamAPITestBase):

    def setUp(self):
        super().setUp()
        self.test = self.make_test(question_count=20)
        self.url = f'/api/teacher/tests/{self.test.id}/scores'

    def test_upsert_replaces_the_score(self):
        self.api.post(self.url, {'studentId': str(self.student.id), 'score': 15}, format='json')
        rows = self.api.post(self.url, {'studentId': str(self.student.id), 'score': 18}, format='json').json()['data']
        self.assertEqual(rows, [{'studentId': str(self.student.id), 'studentName': '홍길동', 'score': 18.0}])

    def test_list_scores(self):
        self.test.scores = [ScoreEntry(student_id=self.student.id, score=12)]
        self.test.save()
        rows = self.api.get(self.url).json()['data']
        self.assertEqual(rows[0]['studentName'], '홍길동')

    def test_score_above_question_count(self):
        response = self.api.post(self.url, {'studentId': str(self.student.id), 'score': 21}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()['message'].startswith('score'))

    def test_negative_score(self):
        response = self.api.post(self.url, {'studentId': str(self.student.id), 'score': -1}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_invalid_student_id(self):
        response = self.api.post(self.url, {'studentId': 'nobody', 'score': 3}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_model_helpers(self):
        self.test.scores = [
            ScoreEntry(student_id=self.student.id, score=12),
            ScoreEntry(student_id='64b000000000000000000009', score=16),
        ]
        self.assertEqual(self.test.score_for(self.student.id), 12)
        self.assertIsNone(self.test.score_for('64b00000000000000000000a'))
        self.assertEqual(self.test.score_values, [12, 16])
