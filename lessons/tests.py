"""
Tests for the lessons app.
Tests: lesson days, their periods and records, CSV upload and the teacher lesson log.
"""
import datetime

from django.test import override_settings
from rest_framework.exceptions import ValidationError

from lessons.models import Lesson, LessonDay, Period, StudentRecord
from lessons.services import create_from_row
from test_helpers import MongoTestCase


def day(year, month, date):
    return datetime.datetime(year, month, date)


class LessonDayAPITestBase(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.api = self.client_for(self.make_admin())
        self.teacher = self.make_teacher()
        self.student = self.make_student()
        self.classroom = self.make_classroom(teachers=[self.teacher], students=[self.student])

    def make_day(self, date=None, classroom=None, periods=()):
        lesson_day = LessonDay(
            classroom=classroom or self.classroom, date=date or day(2024, 3, 4), periods=list(periods)
        )
        lesson_day.save()
        return lesson_day

    def period(self, teacher=None, **fields):
        return Period(teacher_id=(teacher or self.teacher).id, **fields)


class LessonDayCrudAPITest(LessonDayAPITestBase):

    def test_create(self):
        response = self.api.post(
            '/api/admin/lesson-days', {'classId': str(self.classroom.id), 'date': '2024-03-04'}, format='json'
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['date'], '2024-03-04')
        self.assertEqual(data['className'], 'A반')
        self.assertEqual(data['periods'], [])
        self.assertEqual([s['name'] for s in data['students']], ['홍길동'])

    def test_second_day_for_same_date_is_rejected(self):
        self.make_day()
        response = self.api.post(
            '/api/admin/lesson-days', {'classId': str(self.classroom.id), 'date': '2024-03-04'}, format='json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(LessonDay.objects.count(), 1)

    def test_create_for_unknown_class(self):
        response = self.api.post(
            '/api/admin/lesson-days', {'classId': '64b000000000000000000009', 'date': '2024-03-04'}, format='json'
        )
        self.assertEqual(response.status_code, 400)

    def test_create_with_bad_date(self):
        response = self.api.post(
            '/api/admin/lesson-days', {'classId': str(self.classroom.id), 'date': '04/03/2024'}, format='json'
        )
        self.assertEqual(response.status_code, 400)

    def test_list_filters(self):
        other_teacher = self.make_teacher(name='이강사', login_id='lee')
        other_class = self.make_classroom('B반')
        self.make_day(day(2024, 3, 1), periods=[self.period()])
        self.make_day(day(2024, 3, 4), periods=[self.period(other_teacher)])
        self.make_day(day(2024, 3, 4), classroom=other_class)

        rows = self.api.get('/api/admin/lesson-days').json()['data']
        self.assertEqual([row['date'] for row in rows], ['2024-03-04', '2024-03-04', '2024-03-01'])

        rows = self.api.get('/api/admin/lesson-days', {'dateFrom': '2024-03-02', 'dateTo': '2024-03-04'}).json()['data']
        self.assertEqual(len(rows), 2)

        rows = self.api.get('/api/admin/lesson-days', {'classId': str(other_class.id)}).json()['data']
        self.assertEqual([row['className'] for row in rows], ['B반'])

        rows = self.api.get('/api/admin/lesson-days', {'teacherId': str(other_teacher.id)}).json()['data']
        self.assertEqual([(row['date'], row['periodCount']) for row in rows], [('2024-03-04', 1)])

    def test_by_class_date(self):
        lesson_day = self.make_day()
        response = self.api.get(
            '/api/admin/lesson-days/by-class-date', {'classId': str(self.classroom.id), 'date': '2024-03-04'}
        )
        self.assertEqual(response.json()['data']['id'], str(lesson_day.id))

    def test_by_class_date_without_a_day_is_null(self):
        response = self.api.get(
            '/api/admin/lesson-days/by-class-date', {'classId': str(self.classroom.id), 'date': '2024-03-05'}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'success': True, 'data': None})

    def test_move_onto_an_existing_date(self):
        self.make_day(day(2024, 3, 4))
        moved = self.make_day(day(2024, 3, 5))
        response = self.api.put(f'/api/admin/lesson-days/{moved.id}', {'date': '2024-03-04'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_update_date(self):
        lesson_day = self.make_day()
        data = self.api.put(
            f'/api/admin/lesson-days/{lesson_day.id}', {'date': '2024-03-06'}, format='json'
        ).json()['data']
        self.assertEqual(data['date'], '2024-03-06')

    def test_delete(self):
        lesson_day = self.make_day()
        self.assertEqual(self.api.delete(f'/api/admin/lesson-days/{lesson_day.id}').status_code, 200)
        self.assertEqual(self.api.get(f'/api/admin/lesson-days/{lesson_day.id}').status_code, 404)


class PeriodAPITest(LessonDayAPITestBase):

    def setUp(self):
        super().setUp()
        self.lesson_day = self.make_day()
        self.url = f'/api/admin/lesson-days/{self.lesson_day.id}/periods'

    def test_add_period_with_blank_records(self):
        response = self.api.post(self.url, {'teacherId': str(self.teacher.id)}, format='json')
        self.assertEqual(response.status_code, 201)
        period = response.json()['data']['periods'][0]
        self.assertEqual(period['teacherName'], '김강사')
        self.assertEqual(period['records'], [{
            'studentId': str(self.student.id), 'studentName': '홍길동', 'attendance': '', 'homework': '', 'note': '',
        }])

    def test_add_period_unknown_teacher(self):
        response = self.api.post(self.url, {'teacherId': '64b000000000000000000009'}, format='json')
        self.assertEqual(response.status_code, 404)

    def test_update_period(self):
        self.api.post(self.url, {'teacherId': str(self.teacher.id)}, format='json')
        response = self.api.put(self.url, {
            'periodIndex': 0,
            'memo': '3단원',
            'homeworkDescription': '문제집 10쪽',
            'homeworkDueDate': '2024-03-08',
            'records': [{'studentId': str(self.student.id), 'attendance': 'O', 'homework': 'X', 'note': '지각'}],
        }, format='json')
        period = response.json()['data']['periods'][0]
        self.assertEqual(period['memo'], '3단원')
        self.assertEqual(period['homeworkDueDate'], '2024-03-08')
        self.assertEqual(period['records'][0]['attendance'], 'O')
        self.assertEqual(period['records'][0]['note'], '지각')

    def test_empty_due_date_clears_it(self):
        self.lesson_day.periods.append(self.period(homework_due_date=day(2024, 3, 8)))
        self.lesson_day.save()
        response = self.api.put(self.url, {'periodIndex': 0, 'homeworkDueDate': ''}, format='json')
        self.assertIsNone(response.json()['data']['periods'][0]['homeworkDueDate'])

    def test_invalid_mark(self):
        self.lesson_day.periods.append(self.period())
        self.lesson_day.save()
        response = self.api.put(self.url, {
            'periodIndex': 0, 'records': [{'studentId': str(self.student.id), 'attendance': 'late'}],
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_update_out_of_range(self):
        response = self.api.put(self.url, {'periodIndex': 3, 'memo': 'x'}, format='json')
        self.assertEqual(response.status_code, 404)

    def test_delete_period(self):
        self.lesson_day.periods = [self.period(memo='first'), self.period(memo='second')]
        self.lesson_day.save()
        data = self.api.delete(f'{self.url}?periodIndex=0').json()['data']
        self.assertEqual([p['memo'] for p in data['periods']], ['second'])

    def test_delete_period_errors(self):
        self.assertEqual(self.api.delete(f'{self.url}?periodIndex=0').status_code, 404)
        self.assertEqual(self.api.delete(f'{self.url}?periodIndex=first').status_code, 400)


# ============================================================================
# CSV
# ============================================================================

class LessonCsvTest(LessonDayAPITestBase):

    def test_row_pads_periods_up_to_the_number(self):
        lesson_day = create_from_row({'date': '2024-03-04', 'class_name': 'A반', 'period': '3교시', 'teacher_name': '김강사'})
        self.assertEqual(len(lesson_day.periods), 3)
        self.assertEqual(len(lesson_day.periods[2].records), 1)

    def test_row_reuses_the_day(self):
        other = self.make_teacher(name='이강사', login_id='lee')
        self.make_day(periods=[self.period()])
        lesson_day = create_from_row({'date': '2024-03-04', 'class_name': 'A반', 'period': '1', 'teacher_name': '이강사'})
        self.assertEqual(LessonDay.objects.count(), 1)
        self.assertEqual(len(lesson_day.periods), 1)
        self.assertEqual(lesson_day.periods[0].teacher_id, other.id)

    def test_bulk_upload(self):
        csv_text = (
            '날짜,반,교시,강사\n'
            '2024-03-04,A반,2교시,김강사\n'
            '2024-03-04,A반,,김강사\n'
            '2024-03-05,Z반,1,김강사\n'
        )
        data = self.api.post('/api/admin/lesson-days/bulk', {'csv': csv_text}, format='json').json()['data']
        self.assertEqual((data['success'], data['fail']), (2, 1))
        self.assertEqual(data['errors'][0], {'row': 4, 'message': 'Class "Z반" not found'})
        self.assertEqual(len(LessonDay.objects.get().periods), 3)

    def test_row_rejects_period_beyond_the_limit(self):
        with self.assertRaises(ValidationError):
            create_from_row({'date': '2024-03-04', 'class_name': 'A반', 'period': '500교시', 'teacher_name': '김강사'})
        self.assertEqual(LessonDay.objects.count(), 0)

    @override_settings(LESSON_MAX_PERIODS=2)
    def test_blank_period_stops_at_the_limit(self):
        self.make_day(periods=[self.period(), self.period()])
        with self.assertRaises(ValidationError):
            create_from_row({'date': '2024-03-04', 'class_name': 'A반', 'period': '', 'teacher_name': '김강사'})
        self.assertEqual(len(LessonDay.objects.get().periods), 2)

    def test_bulk_reports_bad_periods_on_their_source_lines(self):
        csv_text = (
            '날짜,반,교시,강사\n'
            '\n'
            '2024-03-04,A반,둘째,김강사\n'
            '2024-03-04,A반,500교시,김강사\n'
            '2024-03-04,A반,1교시,김강사\n'
        )
        data = self.api.post('/api/admin/lesson-days/bulk', {'csv': csv_text}, format='json').json()['data']
        self.assertEqual((data['success'], data['fail']), (1, 2))
        self.assertEqual([error['row'] for error in data['errors']], [3, 4])
        self.assertIn('둘째', data['errors'][0]['message'])
        self.assertEqual(len(LessonDay.objects.get().periods), 1)

    def test_bulk_dry_run_flags_bad_period(self):
        csv_text = '2024-03-04,A반,2a,김강사\n'
        data = self.api.post(
            '/api/admin/lesson-days/bulk', {'csv': csv_text, 'dryRun': 'true'}, format='json'
        ).json()['data']
        self.assertEqual(data['invalid'], 1)
        self.assertEqual(data['rows'][0]['errors'], ['교시 "2a" must be a number such as 3 or 3교시'])

    def test_bulk_dry_run(self):
        csv_text = '2024-03-04,A반,1,없는강사\n'
        data = self.api.post(
            '/api/admin/lesson-days/bulk', {'csv': csv_text, 'dryRun': 'true'}, format='json'
        ).json()['data']
        self.assertEqual(data['rows'][0]['errors'], ['Teacher "없는강사" not found'])
        self.assertEqual(LessonDay.objects.count(), 0)

    def test_template(self):
        response = self.api.get('/api/admin/lesson-days/template')
        self.assertIn('날짜,반,교시,강사', response.content.decode('utf-8'))


# ============================================================================
# Teacher lesson log
# ============================================================================

class TeacherLessonLogTest(LessonDayAPITestBase):

    def setUp(self):
        super().setUp()
        self.teacher_api = self.client_for(self.teacher.user)
        self.other_class = self.make_classroom('B반')

    def lesson_payload(self, classroom=None, **fields):
        payload = {'classId': str((classroom or self.classroom).id), 'date': '2024-03-04', 'period': '1'}
        payload.update(fields)
        return payload

    def test_create_and_list(self):
        self.teacher_api.post('/api/teacher/lessons', self.lesson_payload(period='2', progress='2단원'), format='json')
        self.teacher_api.post('/api/teacher/lessons', self.lesson_payload(period='1'), format='json')
        self.teacher_api.post('/api/teacher/lessons', self.lesson_payload(date='2024-03-05'), format='json')

        rows = self.teacher_api.get(f'/api/teacher/classes/{self.classroom.id}/lessons').json()['data']
        self.assertEqual([(row['date'], row['period']) for row in rows], [
            ('2024-03-05', '1'), ('2024-03-04', '1'), ('2024-03-04', '2'),
        ])

        rows = self.teacher_api.get(
            f'/api/teacher/classes/{self.classroom.id}/lessons', {'from': '2024-03-05'}
        ).json()['data']
        self.assertEqual(len(rows), 1)

    def test_unassigned_class_is_forbidden(self):
        response = self.teacher_api.post('/api/teacher/lessons', self.lesson_payload(self.other_class), format='json')
        self.assertEqual(response.status_code, 403)
        response = self.teacher_api.get(f'/api/teacher/classes/{self.other_class.id}/lessons')
        self.assertEqual(response.status_code, 403)

    def test_update_and_delete(self):
        lesson = Lesson(classroom=self.classroom, date=day(2024, 3, 4), period='1')
        lesson.save()
        url = f'/api/teacher/lessons/{lesson.id}'

        data = self.teacher_api.patch(url, {'homeworkDone': True, 'homeworkDueDate': '2024-03-06'}, format='json').json()['data']
        self.assertTrue(data['homeworkDone'])
        self.assertEqual(data['homeworkDueDate'], '2024-03-06')

        self.assertEqual(self.teacher_api.delete(url).status_code, 200)
        self.assertEqual(Lesson.objects.count(), 0)

    def test_other_class_lesson_is_forbidden(self):
        lesson = Lesson(classroom=self.other_class, date=day(2024, 3, 4), period='1')
        lesson.save()
        self.assertEqual(self.teacher_api.get(f'/api/teacher/lessons/{lesson.id}').status_code, 403)
        # Admins reach every class
        self.assertEqual(self.api.get(f'/api/teacher/lessons/{lesson.id}').status_code, 200)


class StudentRecordModelTest(LessonDayAPITestBase):

    def test_record_for(self):
        period = self.period(records=[StudentRecord(student_id=self.student.id, attendance='O')])
        self.assertEqual(period.record_for(str(self.student.id)).attendance, 'O')
        self.assertIsNone(period.record_for('64b000000000000000000009'))
