"""
Tests for the teachers app.
Tests: teacher accounts, search, class counts, deletes and CSV endpoints.
"""
from accounts.models import User
from classrooms.models import Classroom
from teachers.models import Teacher
from teachers.services import find_by_name, teacher_names
from test_helpers import MongoTestCase


class TeacherAPITestBase(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.api = self.client_for(self.make_admin())


class TeacherCreateAPITest(TeacherAPITestBase):

    payload = {
        'name': '김강사',
        'loginId': 'kim',
        'password': 'pass1234',
        'phone': '010-1111-1111',
        'description': '수학',
    }

    def test_create(self):
        response = self.api.post('/api/admin/teachers', self.payload, format='json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['loginId'], 'kim')
        self.assertEqual(data['phone'], '010-1111-1111')
        self.assertEqual(data['description'], '수학')

        user = User.objects.get(login_id='kim')
        self.assertEqual(user.role, 'teacher')
        self.assertTrue(user.check_password('pass1234'))

    def test_duplicate_login_id(self):
        self.api.post('/api/admin/teachers', self.payload, format='json')
        response = self.api.post('/api/admin/teachers', dict(self.payload, name='이강사'), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Teacher.objects.count(), 1)

    def test_password_too_short(self):
        response = self.api.post('/api/admin/teachers', dict(self.payload, password='abc'), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()['message'].startswith('password'))


class TeacherListAPITest(TeacherAPITestBase):

    def setUp(self):
        super().setUp()
        self.kim = self.make_teacher()
        self.lee = self.make_teacher(name='이강사', login_id='lee-math', phone='010-4444-4444')

    def test_list_with_class_counts(self):
        self.make_classroom('A반', teachers=[self.kim])
        self.make_classroom('B반', teachers=[self.kim, self.lee])
        rows = self.api.get('/api/admin/teachers').json()['data']
        counts = {row['name']: row['classCount'] for row in rows}
        self.assertEqual(counts, {'김강사': 2, '이강사': 1})

    def test_search_by_login_id(self):
        rows = self.api.get('/api/admin/teachers', {'search': 'MATH'}).json()['data']
        self.assertEqual([row['name'] for row in rows], ['이강사'])

    def test_search_by_name(self):
        rows = self.api.get('/api/admin/teachers', {'search': '김'}).json()['data']
        self.assertEqual([row['name'] for row in rows], ['김강사'])

    def test_retrieve(self):
        data = self.api.get(f'/api/admin/teachers/{self.kim.id}').json()['data']
        self.assertEqual(data['user']['loginId'], 'teacher1')

    def test_name_lookups(self):
        self.assertEqual(find_by_name(' 이강사 ').id, self.lee.id)
        self.assertIsNone(find_by_name('없는강사'))
        self.assertEqual(
            teacher_names([self.kim.id, 'bogus', None]),
            {str(self.kim.id): '김강사'},
        )


class TeacherUpdateDeleteAPITest(TeacherAPITestBase):

    def setUp(self):
        super().setUp()
        self.teacher = self.make_teacher()
        self.url = f'/api/admin/teachers/{self.teacher.id}'

    def test_update_syncs_account(self):
        self.api.put(self.url, {'name': '김선생', 'loginId': 'kim2', 'phone': '010-9999-9999'}, format='json')
        self.teacher.reload()
        user = self.teacher.user
        self.assertEqual(self.teacher.name, '김선생')
        self.assertEqual((user.name, user.login_id, user.phone), ('김선생', 'kim2', '010-9999-9999'))

    def test_blank_password_keeps_the_old_one(self):
        self.api.put(self.url, {'password': ''}, format='json')
        self.teacher.reload()
        self.assertTrue(self.teacher.user.check_password('pass1234'))

    def test_login_id_taken(self):
        self.make_admin(login_id='boss')
        response = self.api.put(self.url, {'loginId': 'boss'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_delete_unassigns_classes(self):
        classroom = self.make_classroom(teachers=[self.teacher])
        user_id = self.teacher.user.id

        response = self.api.delete(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Teacher.objects.count(), 0)
        self.assertIsNone(User.objects(id=user_id).first())
        self.assertEqual(Classroom.objects.get(id=classroom.id).teachers, [])

    def test_parent_is_forbidden(self):
        student = self.make_student()
        response = self.client_for(student.parent_user).delete(self.url)
        self.assertEqual(response.status_code, 403)


class TeacherCsvAPITest(TeacherAPITestBase):

    def test_bulk(self):
        csv_text = (
            '이름,로그인 ID,비밀번호,전화번호,비고\n'
            '김강사,kim,pass1234,010-1111-1111,수학\n'
            '이강사,,pass1234,,\n'
        )
        data = self.api.post('/api/admin/teachers/bulk', {'csv': csv_text}, format='json').json()['data']
        self.assertEqual((data['success'], data['fail']), (1, 1))
        self.assertEqual(data['errors'][0], {'row': 3, 'message': '로그인 ID is required'})
        self.assertEqual(Teacher.objects.get().description, '수학')

    def test_export(self):
        self.make_teacher()
        content = self.api.get('/api/admin/teachers/export').content.decode('utf-8')
        self.assertIn('"김강사","teacher1","010-1111-1111",0,""', content)

    def test_template(self):
        response = self.api.get('/api/admin/teachers/template')
        self.assertIn('attachment', response['Content-Disposition'])
