"""
Tests for the student/parent portal.
Tests: calendar helpers, monthly unit report, class resolution and every portal endpoint.
"""
import datetime

from bson import ObjectId
from django.test import SimpleTestCase
from rest_framework.exceptions import ValidationError

from exams.models import Exam, ScoreEntry
from lessons.models import LessonDay, Period, StudentRecord
from portal import services
from portal.calendar import calendar_cells, daily_marks, date_range, month_bounds, parse_year_month
from portal.reports import build_monthly_report, class_percentile
from test_helpers import MongoTestCase

STUDENT_ID = ObjectId('64b000000000000000000001')
OTHER_ID = ObjectId('64b000000000000000000002')


# ============================================================================
# Calendar helpers
# ============================================================================

class CalendarTest(SimpleTestCase):

    def test_leap_february(self):
        cells = calendar_cells(2024, 2)
        # 2024-02-01 is a Thursday
        self.assertEqual(cells[:5], [None, None, None, None, 1])
        self.assertEqual(cells[-1], 29)
        self.assertEqual(len(cells), 33)

    def test_month_starting_on_sunday(self):
        self.assertEqual(calendar_cells(2024, 9)[0], 1)

    def test_month_bounds(self):
        start, end = month_bounds(2023, 2)
        self.assertEqual(start, datetime.datetime(2023, 2, 1))
        self.assertEqual(end.date(), datetime.date(2023, 2, 28))
        self.assertEqual(end.time(), datetime.time.max)

    def test_date_range_includes_both_ends(self):
        days = date_range(datetime.datetime(2024, 2, 28), datetime.date(2024, 3, 1))
        self.assertEqual(days, [datetime.date(2024, 2, 28), datetime.date(2024, 2, 29), datetime.date(2024, 3, 1)])

    def test_parse_year_month(self):
        today = datetime.date(2024, 5, 17)
        self.assertEqual(parse_year_month({}, today), (2024, 5))
        self.assertEqual(parse_year_month({'year': '2023', 'month': '12'}, today), (2023, 12))
        for params in ({'year': '1999'}, {'month': '13'}, {'month': '0x'}, {'year': '2101'}):
            with self.assertRaises(ValidationError):
                parse_year_month(params, today)

    def test_daily_marks(self):
        rows = [
            {'date': '2024-03-04', 'attendanceStatus': 'O', 'homeworkDone': True},
            {'date': '2024-03-04', 'attendanceStatus': 'X', 'homeworkDone': False},
            {'date': '2024-03-05', 'attendanceStatus': '', 'homeworkDone': True},
        ]
        self.assertEqual(daily_marks(rows), {
            '2024-03-04': {'attendance': 'X', 'homework': 'X'},
            '2024-03-05': {'attendance': None, 'homework': 'O'},
        })


# ============================================================================
# Monthly report
# ============================================================================

def weekly_test(subject, big_unit, small_unit, question_count, scores, test_type='weeklyTest'):
    return Exam(
        test_type=test_type,
        subject=subject,
        big_unit=big_unit,
        small_unit=small_unit,
        question_count=question_count,
        scores=[ScoreEntry(student_id=student_id, score=score) for student_id, score in scores.items()],
    )


class ClassPercentileTest(SimpleTestCase):

    def setUp(self):
        self.test = weekly_test('중1-1', '소인수분해', '소인수분해', 10, {
            STUDENT_ID: 8, OTHER_ID: 10, ObjectId(): 6, ObjectId(): 4,
        })

    def test_percentile(self):
        self.assertEqual(class_percentile(self.test, 10), 100)
        self.assertEqual(class_percentile(self.test, 8), 75)
        self.assertEqual(class_percentile(self.test, 4), 25)

    def test_no_results(self):
        self.assertEqual(class_percentile(weekly_test('', '', '', 10, {}), 5), 100)


class MonthlyReportTest(SimpleTestCase):

    def test_units_strengths_and_weaknesses(self):
        tests = [
            weekly_test('중1-1', '정수와 유리수', '정수와 유리수', 20, {STUDENT_ID: 8, OTHER_ID: 16}),
            weekly_test('중1-1', '소인수분해', '소인수분해', 10, {STUDENT_ID: 9, OTHER_ID: 5}),
            weekly_test('중1-1', '소인수분해', '소인수분해', 10, {STUDENT_ID: 7, OTHER_ID: 9}),
            # Ignored: real test, and a test without the student's score
            weekly_test('', '', '', None, {STUDENT_ID: 100}, test_type='realTest'),
            weekly_test('중1-1', '소인수분해', '소인수분해', 10, {OTHER_ID: 3}),
        ]
        report = build_monthly_report(tests, STUDENT_ID)

        self.assertEqual(report['testCount'], 3)
        self.assertEqual((report['totalCorrect'], report['totalQuestions']), (24, 40))
        self.assertEqual(report['totalPercentage'], 60)
        self.assertEqual(report['avgPercentile'], 67)

        first, second = report['units']
        self.assertEqual(first['bigUnit'], '소인수분해')
        self.assertEqual((first['correct'], first['total'], first['count']), (16, 20, 2))
        self.assertEqual((first['percentage'], first['avgPercentile']), (80, 75))
        self.assertEqual((second['percentage'], second['avgPercentile']), (40, 50))

        self.assertEqual([unit['bigUnit'] for unit in report['strongUnits']], ['소인수분해'])
        self.assertEqual([unit['bigUnit'] for unit in report['weakUnits']], ['정수와 유리수'])

    def test_score_without_question_count_counts_out_of_100(self):
        report = build_monthly_report([weekly_test('중2-1', '함수', '', None, {STUDENT_ID: 85})], STUDENT_ID)
        self.assertEqual((report['totalCorrect'], report['totalQuestions']), (85, 100))
        self.assertEqual(report['units'][0]['percentage'], 85)

    def test_empty_month(self):
        report = build_monthly_report([], STUDENT_ID)
        self.assertEqual(report['testCount'], 0)
        self.assertEqual(report['units'], [])
        self.assertEqual(report['weakUnits'], [])


class SummaryTest(SimpleTestCase):

    def test_rates(self):
        rows = [
            {'homework': '제출', 'homeworkDone': True, 'progress': '', 'attendanceStatus': 'O'},
            {'homework': '미제출', 'homeworkDone': False, 'progress': '', 'attendanceStatus': ''},
            {'homework': '', 'homeworkDone': False, 'progress': '2단원', 'attendanceStatus': 'X'},
        ]
        self.assertEqual(services.homework_summary(rows), {'total': 3, 'done': 1, 'rate': 33.33})
        self.assertEqual(services.attendance_summary(rows), {'total': 3, 'attended': 2, 'rate': 66.67})

    def test_empty_rates(self):
        self.assertEqual(services.homework_summary([])['rate'], 0)
        self.assertEqual(services.attendance_summary([])['rate'], 0)


# ============================================================================
# API
# ============================================================================

class PortalAPITestBase(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.teacher = self.make_teacher()
        self.classroom = self.make_classroom(teachers=[self.teacher])
        self.student = self.make_student(classroom_id=str(self.classroom.id))
        self.api = self.client_for(self.student.user)
        self.parent_api = self.client_for(self.student.parent_user)

    def record(self, **fields):
        return StudentRecord(student_id=self.student.id, **fields)

    def make_day(self, date, periods):
        lesson_day = LessonDay(classroom=self.classroom, date=date, periods=periods)
        lesson_day.save()
        return lesson_day

    def make_test(self, date, question_count=10, my_score=8, other_score=6, **fields):
        test = Exam(
            classroom=self.classroom, test_type='weeklyTest', date=date, question_count=question_count,
            scores=[
                ScoreEntry(student_id=self.student.id, score=my_score),
                ScoreEntry(student_id=OTHER_ID, score=other_score),
            ],
            **fields
        )
        test.save()
        return test


class PortalAccessTest(PortalAPITestBase):

    def test_parent_sees_the_child(self):
        response = self.parent_api.get('/api/parent/dashboard')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['student']['name'], '홍길동')

    def test_roles_are_kept_apart(self):
        self.assertEqual(self.api.get('/api/parent/dashboard').status_code, 403)
        self.assertEqual(self.parent_api.get('/api/student/dashboard').status_code, 403)
        admin_api = self.client_for(self.make_admin())
        self.assertEqual(admin_api.get('/api/student/tests').status_code, 403)

    def test_anonymous(self):
        self.assertEqual(self.client.get('/api/student/dashboard').status_code, 401)

    def test_classes(self):
        self.make_classroom('B반', students=[self.student])
        self.make_classroom('C반')
        rows = self.api.get('/api/student/classes').json()['data']
        self.assertEqual([row['name'] for row in rows], ['A반', 'B반'])


class ClassResolutionTest(PortalAPITestBase):

    def test_primary_class_by_default(self):
        self.make_classroom('0반', students=[self.student])
        self.assertEqual(services.resolve_classroom(self.student).id, self.classroom.id)

    def test_requested_class_when_a_member(self):
        other = self.make_classroom('B반', students=[self.student])
        self.assertEqual(services.resolve_classroom(self.student, str(other.id)).id, other.id)

    def test_foreign_class_falls_back(self):
        foreign = self.make_classroom('B반')
        self.assertEqual(services.resolve_classroom(self.student, str(foreign.id)).id, self.classroom.id)
        self.assertEqual(services.resolve_classroom(self.student, 'junk').id, self.classroom.id)

    def test_first_listing_class_without_primary(self):
        student = self.make_student(name='김철수', student_phone='010-4', parent_phone='010-5')
        self.make_classroom('Z반', students=[student])
        self.make_classroom('B반', students=[student])
        self.assertEqual(services.resolve_classroom(student).name, 'B반')

    def test_no_class(self):
        student = self.make_student(name='김철수', student_phone='010-4', parent_phone='010-5')
        self.assertIsNone(services.resolve_classroom(student))

        api = self.client_for(student.user)
        data = api.get('/api/student/dashboard').json()['data']
        self.assertIsNone(data['class'])
        self.assertEqual(data['recentLessons'], [])
        self.assertEqual(data['homeworkSummary'], {'total': 0, 'done': 0, 'rate': 0})

        response = api.get('/api/student/lessons')
        self.assertEqual(response.json(), {'success': True, 'data': None})


class PortalLessonsTest(PortalAPITestBase):

    def setUp(self):
        super().setUp()
        self.lesson_day = self.make_day(datetime.datetime(2024, 3, 4), [
            Period(
                teacher_id=self.teacher.id, memo='1단원', homework_description=' 문제집 ',
                homework_due_date=datetime.datetime(2024, 3, 6),
                records=[self.record(attendance='O', homework='O', note='잘함')],
            ),
            Period(teacher_id=self.teacher.id, records=[self.record(homework='X')]),
        ])

    def test_one_row_per_period(self):
        rows = self.api.get('/api/student/lessons').json()['data']['lessons']
        self.assertEqual(rows[0], {
            'id': f'{self.lesson_day.id}-0',
            'date': '2024-03-04',
            'period': 1,
            'progress': '1단원',
            'homework': '제출',
            'homeworkDone': True,
            'attendanceStatus': 'O',
            'homeworkDescription': '문제집',
            'homeworkDueDate': '2024-03-06',
            'teacherName': '김강사',
            'note': '잘함',
        })
        self.assertEqual((rows[1]['period'], rows[1]['homework']), (2, '미제출'))

    def test_date_filter(self):
        rows = self.api.get('/api/student/lessons', {'from': '2024-03-05'}).json()['data']['lessons']
        self.assertEqual(rows, [])

    def test_monthly_statistics(self):
        self.make_test(datetime.datetime(2024, 3, 5))
        self.make_test(datetime.datetime(2024, 4, 1), my_score=2)
        data = self.api.get('/api/student/statistics/monthly', {'year': 2024, 'month': 3}).json()['data']
        self.assertEqual(data['attendance'], {'total': 2, 'attended': 1, 'rate': 50.0})
        self.assertEqual(data['homework'], {'total': 2, 'done': 1, 'rate': 50.0})
        self.assertEqual((data['testAverage'], data['testCount']), (8.0, 1))

    def test_calendar(self):
        data = self.api.get('/api/student/statistics/calendar', {'year': 2024, 'month': 3}).json()['data']
        # 2024-03-01 is a Friday
        self.assertEqual(data['cells'][:6], [None] * 5 + [1])
        self.assertEqual(data['marks'], {'2024-03-04': {'attendance': 'O', 'homework': 'X'}})

    def test_bad_month(self):
        response = self.api.get('/api/student/statistics/monthly', {'year': 2024, 'month': 13})
        self.assertEqual(response.status_code, 400)
        response = self.parent_api.get('/api/parent/statistics/calendar', {'year': 1999, 'month': 1})
        self.assertEqual(response.status_code, 400)


class PortalTestsTest(PortalAPITestBase):

    def setUp(self):
        super().setUp()
        self.make_test(datetime.datetime(2024, 3, 5), subject='중1-1', big_unit='소인수분해', small_unit='소인수분해')
        self.make_test(datetime.datetime(2024, 4, 2), my_score=10, other_score=4)

    def test_tests_with_class_average(self):
        rows = self.api.get('/api/student/tests').json()['data']['tests']
        self.assertEqual([row['date'] for row in rows], ['2024-04-02', '2024-03-05'])
        self.assertEqual((rows[1]['myScore'], rows[1]['average'], rows[1]['maxScore']), (8.0, 7.0, 8.0))
        self.assertEqual(rows[1]['title'], '중1-1 · 소인수분해')

    def test_trend_oldest_first(self):
        series = self.api.get('/api/student/tests/trend').json()['data']
        self.assertEqual([point['label'] for point in series], ['3.05', '4.02'])
        self.assertEqual(series[0], {
            'date': '2024-03-05', 'label': '3.05', 'title': '중1-1 · 소인수분해',
            'myScore': 80, 'average': 70, 'maxScore': 80,
        })

    def test_trend_for_one_month(self):
        series = self.api.get('/api/student/tests/trend', {'year': 2024, 'month': 4}).json()['data']
        self.assertEqual([point['myScore'] for point in series], [100])

    def test_monthly_report(self):
        data = self.parent_api.get('/api/parent/statistics/report', {'year': 2024, 'month': 3}).json()['data']
        self.assertEqual((data['year'], data['month']), (2024, 3))
        self.assertEqual((data['className'], data['studentName']), ('A반', '홍길동'))
        self.assertEqual(data['testCount'], 1)
        self.assertEqual(data['strongUnits'][0]['smallUnit'], '소인수분해')


class PortalDashboardTest(PortalAPITestBase):

    def test_recent_feeds(self):
        today = datetime.datetime.combine(datetime.date.today(), datetime.time.min)
        self.make_day(today, [Period(
            teacher_id=self.teacher.id, homework_description='오답노트',
            records=[self.record(attendance='O', homework='O', note='집중 잘함')],
        )])
        self.make_day(today - datetime.timedelta(days=30), [Period(
            teacher_id=self.teacher.id, homework_description='예전 숙제', records=[self.record(note='예전 코멘트')],
        )])
        self.make_test(today)

        data = self.api.get('/api/student/dashboard').json()['data']
        self.assertEqual(data['class']['name'], 'A반')
        self.assertEqual(data['teacherNames'], ['김강사'])
        self.assertEqual(len(data['recentLessons']), 2)
        self.assertEqual([item['homeworkDescription'] for item in data['recentHomework']], ['오답노트'])
        self.assertEqual([item['note'] for item in data['recentComments']], ['집중 잘함'])
        self.assertEqual(data['recentTests'][0]['myScore'], 8.0)
        self.assertEqual(data['attendanceSummary'], {'total': 2, 'attended': 1, 'rate': 50.0})
