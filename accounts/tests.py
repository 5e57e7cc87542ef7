"""
Tests for the accounts app.
Tests: route guard, bearer tokens, login, login-id recovery, my-account endpoints.
"""
import datetime
from io import StringIO

from django.core.management import call_command
from django.test import SimpleTestCase

from accounts.guards import (
    ADMIN_DASHBOARD, LOGIN_PATH, STUDENT_DASHBOARD, landing_path_for_role, resolve_route,
)
from accounts.models import User
from accounts.services import normalize_phone
from accounts.tokens import TokenError, decode_token, issue_token
from test_helpers import MongoTestCase


class MockUser:
    """Just enough of a User for issuing tokens"""
    def __init__(self, user_id='64b000000000000000000001', role='admin'):
        self.id = user_id
        self.role = role


# ============================================================================
# Route guard
# ============================================================================

class RouteGuardTest(SimpleTestCase):

    def test_login_is_public(self):
        self.assertEqual(resolve_route('/login'), (True, None))
        self.assertEqual(resolve_route('/login', 'student'), (True, None))

    def test_unknown_paths_go_to_login(self):
        for role in (None, 'admin', 'student'):
            self.assertEqual(resolve_route('/', role), (False, LOGIN_PATH))
            self.assertEqual(resolve_route('/nowhere', role), (False, LOGIN_PATH))

    def test_guarded_route_without_role_goes_to_login(self):
        self.assertEqual(resolve_route('/admin/students'), (False, LOGIN_PATH))
        self.assertEqual(resolve_route('/student/dashboard'), (False, LOGIN_PATH))

    def test_admin_section_roles(self):
        self.assertEqual(resolve_route('/admin/students', 'admin'), (True, None))
        self.assertEqual(resolve_route('/admin/students', 'teacher'), (True, None))
        self.assertEqual(resolve_route('/admin/students', 'student'), (False, STUDENT_DASHBOARD))
        self.assertEqual(resolve_route('/admin/students', 'parent'), (False, STUDENT_DASHBOARD))

    def test_student_section_roles(self):
        self.assertEqual(resolve_route('/student/tests', 'student'), (True, None))
        self.assertEqual(resolve_route('/student/tests', 'parent'), (True, None))
        self.assertEqual(resolve_route('/student/tests', 'admin'), (False, ADMIN_DASHBOARD))
        self.assertEqual(resolve_route('/student/tests', 'teacher'), (False, ADMIN_DASHBOARD))

    def test_section_root_redirects_to_dashboard(self):
        self.assertEqual(resolve_route('/admin', 'admin'), (True, ADMIN_DASHBOARD))
        self.assertEqual(resolve_route('/student/', 'parent'), (True, STUDENT_DASHBOARD))

    def test_prefix_must_be_a_whole_segment(self):
        self.assertEqual(resolve_route('/administrator', 'admin'), (False, LOGIN_PATH))

    def test_query_string_is_ignored(self):
        self.assertEqual(resolve_route('/admin/classes?tab=1', 'teacher'), (True, None))

    def test_landing_paths(self):
        self.assertEqual(landing_path_for_role('admin'), ADMIN_DASHBOARD)
        self.assertEqual(landing_path_for_role('teacher'), ADMIN_DASHBOARD)
        self.assertEqual(landing_path_for_role('student'), STUDENT_DASHBOARD)
        self.assertEqual(landing_path_for_role('parent'), STUDENT_DASHBOARD)


# ============================================================================
# Tokens
# ============================================================================

class TokenTest(SimpleTestCase):

    def test_round_trip_claims(self):
        claims = decode_token(issue_token(MockUser(role='teacher')))
        self.assertEqual(claims['sub'], '64b000000000000000000001')
        self.assertEqual(claims['role'], 'teacher')

    def test_expired_token(self):
        issued = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(days=2)
        token = issue_token(MockUser(), now=issued)
        with self.assertRaisesMessage(TokenError, 'expired'):
            decode_token(token)

    def test_tampered_token(self):
        header, payload, signature = issue_token(MockUser()).split('.')
        with self.assertRaises(TokenError):
            decode_token('.'.join([header, payload[::-1], signature]))

    def test_token_signed_with_other_secret(self):
        with self.settings(JWT_SECRET='another-secret'):
            token = issue_token(MockUser())
        with self.assertRaises(TokenError):
            decode_token(token)

    def test_normalize_phone(self):
        self.assertEqual(normalize_phone('010-1234 5678'), '01012345678')
        self.assertEqual(normalize_phone(None), '')


# ============================================================================
# API
# ============================================================================

class LoginAPITest(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.admin = self.make_admin()

    def test_login_success(self):
        response = self.client.post(
            '/api/auth/login', {'loginId': 'admin', 'password': 'admin1234'}, content_type='application/json'
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['user']['role'], 'admin')
        self.assertEqual(body['data']['redirectTo'], ADMIN_DASHBOARD)
        self.assertEqual(decode_token(body['data']['token'])['sub'], str(self.admin.id))

    def test_login_wrong_password(self):
        response = self.client.post(
            '/api/auth/login', {'loginId': 'admin', 'password': 'nope'}, content_type='application/json'
        )
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_login_missing_field(self):
        response = self.client.post('/api/auth/login', {'loginId': 'admin'}, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()['message'].startswith('password'))

    def test_student_login_lands_on_portal(self):
        self.make_student()
        response = self.client.post(
            '/api/auth/login', {'loginId': '010-2222-2222', 'password': '010-2222-2222'},
            content_type='application/json',
        )
        self.assertEqual(response.json()['data']['redirectTo'], STUDENT_DASHBOARD)


class AuthRequiredTest(MongoTestCase):

    def test_missing_token_is_401(self):
        response = self.client.get('/api/me')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'success': False, 'message': 'Authentication required'})

    def test_invalid_token_is_401(self):
        response = self.client.get('/api/me', HTTP_AUTHORIZATION='Bearer not-a-token')
        self.assertEqual(response.status_code, 401)

    def test_wrong_role_is_403(self):
        student = self.make_student()
        response = self.client_for(student.user).get('/api/admin/students')
        self.assertEqual(response.status_code, 403)
        self.assertFalse(response.json()['success'])

    def test_route_check_without_token(self):
        response = self.client.get('/api/auth/route', {'path': '/admin/students'})
        self.assertEqual(response.json()['data'], {'allowed': False, 'redirectTo': LOGIN_PATH})

    def test_route_check_with_invalid_token_is_anonymous(self):
        response = self.client.get(
            '/api/auth/route', {'path': '/admin/students'}, HTTP_AUTHORIZATION='Bearer not-a-token'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'], {'allowed': False, 'redirectTo': LOGIN_PATH})

    def test_route_check_with_expired_token_is_anonymous(self):
        issued = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(days=2)
        token = issue_token(self.make_admin(), now=issued)
        response = self.client.get('/api/auth/route', {'path': '/login'}, HTTP_AUTHORIZATION=f'Bearer {token}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'], {'allowed': True, 'redirectTo': None})

    def test_route_check_with_token(self):
        client = self.client_for(self.make_admin())
        response = client.get('/api/auth/route', {'path': '/student/dashboard'})
        self.assertEqual(response.json()['data'], {'allowed': False, 'redirectTo': ADMIN_DASHBOARD})


class FindLoginIdTest(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.make_student(student_login_id='gildong', parent_login_id='gildong-mom')

    def test_find_student_login_id(self):
        response = self.client.post(
            '/api/auth/find-login-id', {'type': 'student', 'name': '홍길동', 'phone': '01022222222'},
            content_type='application/json',
        )
        self.assertEqual(response.json()['data'], {'loginId': 'gildong'})

    def test_find_parent_login_id(self):
        response = self.client.post(
            '/api/auth/find-login-id', {'type': 'parent', 'name': '홍길동', 'phone': '010 3333 3333'},
            content_type='application/json',
        )
        self.assertEqual(response.json()['data'], {'loginId': 'gildong-mom'})

    def test_no_match_is_404(self):
        response = self.client.post(
            '/api/auth/find-login-id', {'type': 'student', 'name': '홍길동', 'phone': '010-9999-9999'},
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 404)


class MyAccountTest(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.user = self.make_admin()
        self.api = self.client_for(self.user)

    def test_me(self):
        data = self.api.get('/api/me').json()['data']
        self.assertEqual(data['loginId'], 'admin')
        self.assertNotIn('password', data)

    def test_change_password(self):
        response = self.api.put(
            '/api/me/password', {'currentPassword': 'admin1234', 'newPassword': 'fresh-pass'}, format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(User.objects.get(id=self.user.id).check_password('fresh-pass'))

    def test_change_password_wrong_current(self):
        response = self.api.put(
            '/api/me/password', {'currentPassword': 'wrong', 'newPassword': 'fresh-pass'}, format='json'
        )
        self.assertEqual(response.status_code, 400)

    def test_change_password_too_short(self):
        response = self.api.put(
            '/api/me/password', {'currentPassword': 'admin1234', 'newPassword': 'abc'}, format='json'
        )
        self.assertEqual(response.status_code, 400)

    def test_change_login_id_taken(self):
        User.create_user('taken', 'pw12', 'teacher', 'Other')
        response = self.api.put('/api/me/loginId', {'newLoginId': 'taken'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_change_login_id(self):
        response = self.api.put('/api/me/loginId', {'newLoginId': 'boss'}, format='json')
        self.assertEqual(response.json()['data'], {'loginId': 'boss'})

    def test_change_phone(self):
        response = self.api.put('/api/me/phone', {'newPhone': '010-5555-5555'}, format='json')
        self.assertEqual(response.json()['data'], {'phone': '010-5555-5555'})


class CreateAdminCommandTest(MongoTestCase):

    def test_creates_admin(self):
        out = StringIO()
        call_command('create_admin', 'root', 'secret1', stdout=out)
        self.assertEqual(User.objects.get(login_id='root').role, 'admin')
        self.assertIn('created', out.getvalue())

    def test_reset_password(self):
        self.make_admin()
        call_command('create_admin', 'admin', 'newsecret', '--reset', stdout=StringIO())
        self.assertTrue(User.objects.get(login_id='admin').check_password('newsecret'))
