"""
Tests for the classrooms app.
Tests: class CRUD, per-page counts, teacher/student membership, cascading deletes,
teacher console access and the admin dashboard.
"""
import datetime

from classrooms.models import Classroom
from exams.models import Exam
from lessons.models import Lesson, LessonDay, Period
from students.models import Student
from test_helpers import MongoTestCase


def today_midnight():
    return datetime.datetime.combine(datetime.date.today(), datetime.time.min)


class ClassroomAPITestBase(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.api = self.client_for(self.make_admin())
        self.teacher = self.make_teacher()


class ClassroomCrudAPITest(ClassroomAPITestBase):

    def test_create(self):
        response = self.api.post('/api/admin/classes', {'name': ' A반 ', 'description': '오전반'}, format='json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['name'], 'A반')
        self.assertEqual(data['studentCount'], 0)
        self.assertEqual(data['students'], [])

    def test_create_requires_name(self):
        response = self.api.post('/api/admin/classes', {'description': 'x'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_list(self):
        self.make_classroom('A반', teachers=[self.teacher])
        rows = self.api.get('/api/admin/classes').json()['data']
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['teachers'], [{'id': str(self.teacher.id), 'name': '김강사'}])
        self.assertEqual(rows[0]['teacherIds'], [str(self.teacher.id)])

    def test_detail_lists_students_by_name(self):
        students = [
            self.make_student(name='최민수', student_phone='010-1', parent_phone='010-2'),
            self.make_student(name='김철수', student_phone='010-3', parent_phone='010-4'),
        ]
        classroom = self.make_classroom(students=students)
        data = self.api.get(f'/api/admin/classes/{classroom.id}').json()['data']
        self.assertEqual([s['name'] for s in data['students']], ['김철수', '최민수'])
        self.assertEqual(data['studentCount'], 2)

    def test_update_replaces_teachers(self):
        other = self.make_teacher(name='이강사', login_id='lee')
        classroom = self.make_classroom(teachers=[self.teacher])
        response = self.api.put(
            f'/api/admin/classes/{classroom.id}', {'name': 'B반', 'teacherIds': [str(other.id)]}, format='json'
        )
        data = response.json()['data']
        self.assertEqual(data['name'], 'B반')
        self.assertEqual(data['teacherIds'], [str(other.id)])

    def test_update_unknown_teacher(self):
        classroom = self.make_classroom()
        response = self.api.put(
            f'/api/admin/classes/{classroom.id}', {'teacherIds': ['64b000000000000000000009']}, format='json'
        )
        self.assertEqual(response.status_code, 404)

    def test_retrieve_unknown(self):
        self.assertEqual(self.api.get('/api/admin/classes/nope').status_code, 404)

    def test_delete_cascades(self):
        student = self.make_student()
        classroom = self.make_classroom(students=[student])
        Student.objects(id=student.id).update(set__classroom=classroom)
        LessonDay(classroom=classroom, date=today_midnight()).save()
        Lesson(classroom=classroom, date=today_midnight(), period='1').save()
        Exam(classroom=classroom, test_type='weeklyTest', date=today_midnight()).save()

        response = self.api.delete(f'/api/admin/classes/{classroom.id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Classroom.objects.count(), 0)
        self.assertEqual(LessonDay.objects.count(), 0)
        self.assertEqual(Lesson.objects.count(), 0)
        self.assertEqual(Exam.objects.count(), 0)
        student.reload()
        self.assertIsNone(student.classroom)


class ClassroomCountsAPITest(ClassroomAPITestBase):

    def setUp(self):
        super().setUp()
        self.a = self.make_classroom('A반')
        self.b = self.make_classroom('B반')

    def periods(self, count):
        return [Period(teacher_id=self.teacher.id) for _ in range(count)]

    def test_for_lessons_counts_todays_periods(self):
        yesterday = today_midnight() - datetime.timedelta(days=1)
        LessonDay(classroom=self.a, date=today_midnight(), periods=self.periods(2)).save()
        LessonDay(classroom=self.b, date=yesterday, periods=self.periods(3)).save()

        rows = self.api.get('/api/admin/classes/for-lessons').json()['data']
        counts = {row['name']: row['todayPeriodCount'] for row in rows}
        self.assertEqual(counts, {'A반': 2, 'B반': 0})

    def test_for_tests_counts_tests(self):
        for _ in range(3):
            Exam(classroom=self.b, test_type='realTest', date=today_midnight()).save()

        rows = self.api.get('/api/admin/classes/for-tests').json()['data']
        counts = {row['name']: row['testCount'] for row in rows}
        self.assertEqual(counts, {'A반': 0, 'B반': 3})
        self.assertNotIn('todayPeriodCount', rows[0])


class ClassroomMembershipAPITest(ClassroomAPITestBase):

    def setUp(self):
        super().setUp()
        self.classroom = self.make_classroom()
        self.url = f'/api/admin/classes/{self.classroom.id}'

    def test_add_teacher_once(self):
        for _ in range(2):
            response = self.api.post(f'{self.url}/teachers', {'teacherId': str(self.teacher.id)}, format='json')
        self.assertEqual(response.json()['data']['teacherIds'], [str(self.teacher.id)])

    def test_remove_teacher(self):
        self.classroom.update(push__teachers=self.teacher)
        response = self.api.delete(f'{self.url}/teachers?teacherId={self.teacher.id}')
        self.assertEqual(response.json()['data']['teacherIds'], [])

    def test_remove_teacher_needs_an_id(self):
        response = self.api.delete(f'{self.url}/teachers')
        self.assertEqual(response.status_code, 400)

    def test_add_students_sets_primary_class(self):
        first = self.make_student()
        second = self.make_student(name='김철수', student_phone='010-4', parent_phone='010-5')
        ids = [str(first.id), str(second.id)]
        self.api.post(f'{self.url}/students', {'studentIds': ids}, format='json')
        response = self.api.post(f'{self.url}/students', {'studentIds': ids}, format='json')

        self.assertEqual(response.json()['data']['studentCount'], 2)
        first.reload()
        self.assertEqual(first.classroom.id, self.classroom.id)

    def test_add_students_rejects_bad_ids(self):
        response = self.api.post(f'{self.url}/students', {'studentIds': ['bad']}, format='json')
        self.assertEqual(response.status_code, 400)
        response = self.api.post(f'{self.url}/students', {'studentIds': []}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_remove_student_clears_primary_class(self):
        student = self.make_student(classroom_id=str(self.classroom.id))
        response = self.api.delete(f'{self.url}/students/{student.id}')
        self.assertEqual(response.json()['data']['studentCount'], 0)
        student.reload()
        self.assertIsNone(student.classroom)


class ClassroomCsvAPITest(ClassroomAPITestBase):

    def test_bulk(self):
        csv_text = '반 이름,비고\nA반,오전\n,빈 이름\nB반,\n'
        data = self.api.post('/api/admin/classes/bulk', {'csv': csv_text}, format='json').json()['data']
        self.assertEqual((data['success'], data['fail']), (2, 1))
        self.assertEqual(sorted(c.name for c in Classroom.objects), ['A반', 'B반'])

    def test_export_filters_by_search(self):
        self.make_classroom('A반', teachers=[self.teacher])
        self.make_classroom('심화반')
        content = self.api.get('/api/admin/classes/export', {'search': 'a'}).content.decode('utf-8')
        self.assertIn('"A반","김강사",0', content)
        self.assertNotIn('심화반', content)


# ============================================================================
# Teacher console
# ============================================================================

class TeacherClassAccessTest(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.teacher = self.make_teacher()
        self.api = self.client_for(self.teacher.user)
        self.student = self.make_student()
        self.mine = self.make_classroom('A반', teachers=[self.teacher], students=[self.student])
        self.other = self.make_classroom('B반')

    def test_teacher_sees_assigned_classes(self):
        rows = self.api.get('/api/teacher/classes').json()['data']
        self.assertEqual([row['name'] for row in rows], ['A반'])

    def test_admin_sees_every_class(self):
        rows = self.client_for(self.make_admin()).get('/api/teacher/classes').json()['data']
        self.assertEqual([row['name'] for row in rows], ['A반', 'B반'])

    def test_students_of_assigned_class(self):
        rows = self.api.get(f'/api/teacher/classes/{self.mine.id}/students').json()['data']
        self.assertEqual(rows[0]['studentPhone'], '010-2222-2222')

    def test_other_class_is_forbidden(self):
        response = self.api.get(f'/api/teacher/classes/{self.other.id}/students')
        self.assertEqual(response.status_code, 403)
        self.assertFalse(response.json()['success'])

    def test_student_role_is_forbidden(self):
        response = self.client_for(self.student.user).get('/api/teacher/classes')
        self.assertEqual(response.status_code, 403)


# ============================================================================
# Admin dashboard
# ============================================================================

class AdminDashboardAPITest(ClassroomAPITestBase):

    def test_counts_and_todays_lessons(self):
        self.make_student()
        classroom = self.make_classroom()
        LessonDay(
            classroom=classroom, date=today_midnight(),
            periods=[Period(teacher_id=self.teacher.id)],
        ).save()

        data = self.api.get('/api/admin/dashboard').json()['data']
        self.assertEqual(data['date'], datetime.date.today().isoformat())
        self.assertEqual((data['studentCount'], data['teacherCount'], data['classCount']), (1, 1, 1))
        self.assertEqual(data['todayPeriodCount'], 1)
        self.assertEqual(data['todayLessonDays'][0]['className'], 'A반')
