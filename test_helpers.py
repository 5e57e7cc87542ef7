"""
Shared fixtures for the API tests.

Every test runs against the in-memory mongomock connection set up in
academy.settings_test; MongoTestCase empties it around each test.
"""
from django.test import TestCase
from mongoengine.connection import get_db
from rest_framework.test import APIClient

from accounts.models import User
from accounts.tokens import issue_token


class MongoTestCase(TestCase):
    """TestCase that starts and ends with empty MongoDB collections"""

    def setUp(self):
        super().setUp()
        self._drop_collections()

    def tearDown(self):
        self._drop_collections()
        super().tearDown()

    @staticmethod
    def _drop_collections():
        db = get_db()
        for name in db.list_collection_names():
            db.drop_collection(name)

    # ==================== FIXTURES ====================

    def make_admin(self, login_id='admin', password='admin1234'):
        return User.create_user(login_id, password, 'admin', '관리자', '010-0000-0000')

    def make_teacher(self, name='김강사', login_id='teacher1', password='pass1234', phone='010-1111-1111'):
        from teachers.services import create_teacher
        return create_teacher({'name': name, 'login_id': login_id, 'password': password, 'phone': phone})

    def make_student(self, name='홍길동', student_phone='010-2222-2222', parent_phone='010-3333-3333', **extra):
        from students.services import create_student
        data = {
            'name': name,
            'school': '한빛중',
            'grade': '중2',
            'student_phone': student_phone,
            'parent_phone': parent_phone,
        }
        data.update(extra)
        return create_student(data)

    def make_classroom(self, name='A반', teachers=(), students=()):
        from classrooms.models import Classroom
        classroom = Classroom(name=name, teachers=list(teachers), students=list(students))
        classroom.save()
        return classroom

    # ==================== CLIENTS ====================

    def client_for(self, user):
        """APIClient sending a bearer token for the given account"""
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')
        return client
