"""
Tests for the students app.
Tests: utility functions, registration with logins, search, cascading updates and deletes, CSV endpoints.
"""
from types import SimpleNamespace

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase

from academy.csv_utils import BOM
from accounts.models import User
from classrooms.models import Classroom
from students.models import Student
from students.utils import export_rows, sort_students_by_name
from test_helpers import MongoTestCase


def mock_student(name, school='한빛중'):
    return SimpleNamespace(name=name, school=school)


class SortStudentsByNameTest(SimpleTestCase):
    """Test the sort_students_by_name utility"""

    def test_sort_alphabetically(self):
        students = [mock_student('최민수'), mock_student('김철수'), mock_student('박영희')]
        names = [s.name for s in sort_students_by_name(students)]
        self.assertEqual(names, ['김철수', '박영희', '최민수'])

    def test_same_name_sorted_by_school(self):
        students = [mock_student('김철수', '누리중'), mock_student('김철수', '가람중')]
        schools = [s.school for s in sort_students_by_name(students)]
        self.assertEqual(schools, ['가람중', '누리중'])

    def test_sort_empty_list(self):
        self.assertEqual(sort_students_by_name([]), [])


class ExportRowsTest(SimpleTestCase):

    def test_class_count_column(self):
        student = SimpleNamespace(
            id='s1', name='홍길동', school='한빛중', grade='중2',
            student_phone='010-1', parent_phone='010-2',
        )
        self.assertEqual(
            export_rows([student], {'s1': 3}),
            [['홍길동', '한빛중', '중2', '010-1', '010-2', 3]],
        )


# ============================================================================
# API
# ============================================================================

class StudentAPITestBase(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.api = self.client_for(self.make_admin())


class StudentCreateAPITest(StudentAPITestBase):

    payload = {
        'name': '홍길동',
        'school': '한빛중',
        'grade': '중2',
        'studentPhone': '010-2222-2222',
        'parentPhone': '010-3333-3333',
    }

    def test_create_with_default_logins(self):
        response = self.api.post('/api/admin/students', self.payload, format='json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['user']['loginId'], '010-2222-2222')
        self.assertEqual(data['parentUser']['loginId'], '010-3333-3333')
        self.assertIsNone(data['classId'])

        student_user = User.objects.get(login_id='010-2222-2222')
        parent_user = User.objects.get(login_id='010-3333-3333')
        self.assertEqual(student_user.role, 'student')
        self.assertEqual(parent_user.role, 'parent')
        self.assertEqual(parent_user.name, '홍길동 학부모')
        self.assertTrue(student_user.check_password('010-2222-2222'))

    def test_create_with_custom_logins(self):
        payload = dict(self.payload, studentLoginId='gildong', studentPassword='pw1234',
                       parentLoginId='gildong-mom', parentPassword='pw5678')
        self.api.post('/api/admin/students', payload, format='json')
        self.assertTrue(User.objects.get(login_id='gildong').check_password('pw1234'))
        self.assertTrue(User.objects.get(login_id='gildong-mom').check_password('pw5678'))

    def test_create_into_class(self):
        classroom = self.make_classroom()
        response = self.api.post(
            '/api/admin/students', dict(self.payload, classId=str(classroom.id)), format='json'
        )
        self.assertEqual(response.json()['data']['classId'], str(classroom.id))
        classroom.reload()
        self.assertEqual(len(classroom.students), 1)

    def test_duplicate_login_id(self):
        self.api.post('/api/admin/students', self.payload, format='json')
        response = self.api.post(
            '/api/admin/students', dict(self.payload, name='김철수'), format='json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('already in use', response.json()['message'])
        self.assertEqual(Student.objects.count(), 1)

    def test_same_login_for_student_and_parent(self):
        payload = dict(self.payload, parentPhone='010-2222-2222')
        response = self.api.post('/api/admin/students', payload, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(User.objects(role='student').count(), 0)

    def test_invalid_phone(self):
        response = self.api.post(
            '/api/admin/students', dict(self.payload, studentPhone='call me'), format='json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()['message'].startswith('studentPhone'))

    def test_missing_field(self):
        payload = dict(self.payload)
        del payload['school']
        response = self.api.post('/api/admin/students', payload, format='json')
        self.assertEqual(response.status_code, 400)

    def test_unknown_class(self):
        response = self.api.post(
            '/api/admin/students', dict(self.payload, classId='64b000000000000000000009'), format='json'
        )
        self.assertEqual(response.status_code, 400)


class StudentListAPITest(StudentAPITestBase):

    def setUp(self):
        super().setUp()
        self.gildong = self.make_student()
        self.cheolsu = self.make_student(
            name='김철수', student_phone='010-4444-4444', parent_phone='010-5555-5555', grade='중3'
        )

    def test_list_shape(self):
        data = self.api.get('/api/admin/students').json()['data']
        self.assertEqual(data['total'], 2)
        self.assertEqual(data['page'], 1)
        self.assertEqual(data['limit'], 20)
        self.assertEqual(data['totalPages'], 1)
        self.assertEqual(len(data['list']), 2)

    def test_pagination(self):
        data = self.api.get('/api/admin/students', {'page': 2, 'limit': 1}).json()['data']
        self.assertEqual(data['totalPages'], 2)
        self.assertEqual(len(data['list']), 1)

    def test_search_matches_phone(self):
        data = self.api.get('/api/admin/students', {'search': '4444'}).json()['data']
        self.assertEqual([row['name'] for row in data['list']], ['김철수'])

    def test_search_is_case_insensitive(self):
        self.make_student(name='Alice', student_phone='010-7777-7777', parent_phone='010-8888-8888')
        data = self.api.get('/api/admin/students', {'search': 'aLiCe'}).json()['data']
        self.assertEqual(data['total'], 1)

    def test_grade_filter(self):
        data = self.api.get('/api/admin/students', {'grade': '중3'}).json()['data']
        self.assertEqual(data['total'], 1)

    def test_class_count(self):
        self.make_classroom('A반', students=[self.gildong])
        self.make_classroom('B반', students=[self.gildong])
        rows = self.api.get('/api/admin/students').json()['data']['list']
        counts = {row['name']: row['classCount'] for row in rows}
        self.assertEqual(counts, {'홍길동': 2, '김철수': 0})

    def test_retrieve_unknown(self):
        self.assertEqual(self.api.get('/api/admin/students/not-an-id').status_code, 404)
        self.assertEqual(self.api.get('/api/admin/students/64b000000000000000000009').status_code, 404)

    def test_teacher_may_list(self):
        teacher = self.make_teacher()
        response = self.client_for(teacher.user).get('/api/admin/students')
        self.assertEqual(response.status_code, 200)


class StudentUpdateDeleteAPITest(StudentAPITestBase):

    def setUp(self):
        super().setUp()
        self.student = self.make_student()
        self.url = f'/api/admin/students/{self.student.id}'

    def test_rename_syncs_accounts(self):
        self.api.put(self.url, {'name': '홍길순'}, format='json')
        self.student.reload()
        self.assertEqual(self.student.user.name, '홍길순')
        self.assertEqual(self.student.parent_user.name, '홍길순 학부모')

    def test_phone_change_syncs_account_phone(self):
        self.api.put(self.url, {'parentPhone': '010-9999-9999'}, format='json')
        self.student.reload()
        self.assertEqual(self.student.parent_user.phone, '010-9999-9999')
        # The login id does not follow the phone number
        self.assertEqual(self.student.parent_user.login_id, '010-3333-3333')

    def test_new_password(self):
        self.api.put(self.url, {'studentPassword': 'fresh'}, format='json')
        self.student.reload()
        self.assertTrue(self.student.user.check_password('fresh'))

    def test_login_id_taken(self):
        self.make_teacher(login_id='taken')
        response = self.api.put(self.url, {'studentLoginId': 'taken'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_set_and_clear_class(self):
        classroom = self.make_classroom()
        response = self.api.patch(self.url, {'classId': str(classroom.id)}, format='json')
        self.assertEqual(response.json()['data']['classId'], str(classroom.id))
        classroom.reload()
        self.assertEqual([s.id for s in classroom.students], [self.student.id])

        response = self.api.patch(self.url, {'classId': None}, format='json')
        self.assertIsNone(response.json()['data']['classId'])

    def test_delete_cascades(self):
        classroom = self.make_classroom(students=[self.student])
        user_ids = [self.student.user.id, self.student.parent_user.id]

        response = self.api.delete(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Student.objects.count(), 0)
        self.assertEqual(User.objects(id__in=user_ids).count(), 0)
        self.assertEqual(Classroom.objects.get(id=classroom.id).students, [])

    def test_delete_unknown(self):
        self.assertEqual(self.api.delete('/api/admin/students/64b000000000000000000009').status_code, 404)


# ============================================================================
# CSV
# ============================================================================

class StudentCsvAPITest(StudentAPITestBase):

    csv_text = (
        '이름,학교,학년,학생 전화번호,학부모 전화번호\n'
        '홍길동,한빛중,중2,010-2222-2222,010-3333-3333\n'
        '김철수,누리중,,010-4444-4444,010-5555-5555\n'
        '박영희,가람중,중1,010-6666-6666,010-7777-7777\n'
    )

    def test_dry_run_creates_nothing(self):
        response = self.api.post(
            '/api/admin/students/bulk', {'csv': self.csv_text, 'dryRun': True}, format='json'
        )
        data = response.json()['data']
        self.assertEqual((data['valid'], data['invalid']), (2, 1))
        self.assertEqual(data['rows'][1]['row'], 3)
        self.assertEqual(Student.objects.count(), 0)

    def test_bulk_upload_file(self):
        upload = SimpleUploadedFile('students.csv', self.csv_text.encode('utf-8-sig'), content_type='text/csv')
        response = self.api.post('/api/admin/students/bulk', {'file': upload}, format='multipart')
        data = response.json()['data']
        self.assertEqual(data['success'], 2)
        self.assertEqual(data['fail'], 1)
        self.assertEqual(data['errors'][0]['row'], 3)
        self.assertEqual(Student.objects.count(), 2)

    def test_bulk_reports_duplicate_logins(self):
        self.make_student()
        response = self.api.post('/api/admin/students/bulk', {'csv': self.csv_text}, format='json')
        data = response.json()['data']
        self.assertEqual(data['success'], 1)
        self.assertEqual([error['row'] for error in data['errors']], [2, 3])

    def test_bulk_without_file(self):
        response = self.api.post('/api/admin/students/bulk', {}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_export(self):
        self.make_student()
        response = self.api.get('/api/admin/students/export')
        self.assertEqual(response['Content-Type'], 'text/csv; charset=utf-8')
        lines = response.content.decode('utf-8').lstrip(BOM).split('\r\n')
        self.assertEqual(lines[0], '"이름","학교","학년","학생 전화번호","학부모 전화번호","소속 반 수"')
        self.assertTrue(lines[1].startswith('"홍길동"'))

    def test_export_selection(self):
        self.make_student()
        other = self.make_student(name='김철수', student_phone='010-4444-4444', parent_phone='010-5555-5555')
        response = self.api.get('/api/admin/students/export', {'ids': str(other.id)})
        content = response.content.decode('utf-8')
        self.assertIn('김철수', content)
        self.assertNotIn('홍길동', content)

    def test_template(self):
        response = self.api.get('/api/admin/students/template')
        self.assertEqual(response.content.decode('utf-8'), BOM + '이름,학교,학년,학생 전화번호,학부모 전화번호')
