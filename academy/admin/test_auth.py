"""
Authentication tests - sign-up, sign-in, session resolution and the sign-up throttle
"""
import time
import uuid

import jwt
from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.cache import cache
from django.test import RequestFactory, override_settings
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from admin.auth import resolve_session
from admin.auth_backend import issue_token
from admin.models import Role, UserProfile

NO_COOLDOWN = {**settings.ACADEMY, 'SIGNUP_COOLDOWN_SECONDS': 0}


@override_settings(ACADEMY=NO_COOLDOWN)
class AuthFlowTest(APITestCase):
    """Register, login and /me"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.student = UserProfile.objects.create(
            name='Test Student',
            email='student@test.com',
            password_hash=make_password('test123'),
            role=Role.STUDENT,
            status='active'
        )

    def test_01_register_returns_token_and_profile(self):
        response = self.client.post('/api/auth/register/', {
            'name': 'New Teacher',
            'email': 'New.Teacher@Test.com',
            'password': 'secret1',
            'role': 'teacher',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('token', response.data)
        self.assertEqual(response.data['user']['email'], 'new.teacher@test.com')
        self.assertEqual(response.data['user']['role'], 'teacher')
        self.assertTrue(UserProfile.objects.filter(email='new.teacher@test.com').exists())

    def test_02_register_defaults_to_student(self):
        response = self.client.post('/api/auth/register/', {
            'name': 'Default Role',
            'email': 'default@test.com',
            'password': 'secret1',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], Role.STUDENT)

    def test_03_register_duplicate_email_conflicts(self):
        response = self.client.post('/api/auth/register/', {
            'name': 'Again',
            'email': 'STUDENT@test.com',
            'password': 'secret1',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_04_register_rejects_short_password_and_bad_role(self):
        response = self.client.post('/api/auth/register/', {
            'name': 'Short',
            'email': 'short@test.com',
            'password': '123',
            'role': 'superuser',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)
        self.assertIn('role', response.data)

    def test_05_login(self):
        response = self.client.post('/api/auth/login/', {
            'email': 'Student@Test.com',
            'password': 'test123',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], str(self.student.id))
        self.student.refresh_from_db()
        self.assertIsNotNone(self.student.last_login)

    def test_06_login_wrong_password(self):
        response = self.client.post('/api/auth/login/', {
            'email': 'student@test.com',
            'password': 'wrong-password',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_07_login_inactive_account(self):
        self.student.status = 'inactive'
        self.student.save()

        response = self.client.post('/api/auth/login/', {
            'email': 'student@test.com',
            'password': 'test123',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_08_me_returns_session_identity(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(self.student)}')
        response = self.client.get('/api/auth/me/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['session'], {
            'id': str(self.student.id),
            'name': 'Test Student',
            'email': 'student@test.com',
            'role': 'student',
        })

    def test_09_me_requires_token(self):
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_10_me_patch_updates_profile(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(self.student)}')
        response = self.client.patch('/api/auth/me/', {'bio': 'أحب البرمجة', 'role': 'admin'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.student.refresh_from_db()
        self.assertEqual(self.student.bio, 'أحب البرمجة')
        # role is not editable through the profile endpoint
        self.assertEqual(self.student.role, Role.STUDENT)

    def test_11_resolve_session_anonymous(self):
        request = RequestFactory().get('/')
        self.assertIsNone(resolve_session(request))


class SessionTokenTest(APITestCase):
    """Token validation and profile self-healing"""

    def setUp(self):
        self.client = APIClient()

    def _token(self, **claims):
        payload = {
            'user_id': str(uuid.uuid4()),
            'email': 'ghost@test.com',
            'name': 'Ghost',
            'role': 'teacher',
            'exp': int(time.time()) + 3600,
        }
        payload.update(claims)
        return jwt.encode(payload, settings.SECRET_KEY, algorithm='HS256')

    def test_missing_profile_is_created_from_claims(self):
        user_id = str(uuid.uuid4())
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self._token(user_id=user_id)}')

        response = self.client.get('/api/auth/me/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        profile = UserProfile.objects.get(id=user_id)
        self.assertEqual(profile.email, 'ghost@test.com')
        self.assertEqual(profile.role, Role.TEACHER)

    def test_self_healing_is_idempotent(self):
        token = self._token()
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        self.client.get('/api/auth/me/')
        self.client.get('/api/auth/me/')

        self.assertEqual(UserProfile.objects.filter(email='ghost@test.com').count(), 1)

    def test_unknown_role_defaults_to_student(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self._token(role="owner")}')

        response = self.client.get('/api/auth/me/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['session']['role'], Role.STUDENT)

    def test_email_taken_by_other_profile_is_rejected(self):
        UserProfile.objects.create(name='Owner', email='ghost@test.com', role=Role.STUDENT)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self._token()}')

        response = self.client.get('/api/auth/me/')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_expired_token(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self._token(exp=int(time.time()) - 10)}')
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_tampered_token(self):
        token = jwt.encode({'user_id': str(uuid.uuid4()), 'email': 'x@test.com'}, 'another-secret-key-of-enough-length!!', algorithm='HS256')
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_inactive_profile_rejected(self):
        profile = UserProfile.objects.create(name='Off', email='off@test.com', role=Role.STUDENT, status='inactive')
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(profile)}')
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class SignUpThrottleTest(APITestCase):
    """One sign-up attempt per cooldown window, per IP and per email"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def _register(self, email, ip='10.0.0.1'):
        return self.client.post('/api/auth/register/', {
            'name': 'Throttle',
            'email': email,
            'password': 'secret1',
        }, format='json', REMOTE_ADDR=ip)

    def test_second_attempt_from_same_ip_is_throttled(self):
        self.assertEqual(self._register('first@test.com').status_code, status.HTTP_201_CREATED)

        response = self._register('second@test.com')

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertIn('Retry-After', response)
        self.assertFalse(UserProfile.objects.filter(email='second@test.com').exists())

    def test_same_email_from_another_ip_is_throttled(self):
        self._register('same@test.com', ip='10.0.0.1')

        response = self._register('SAME@test.com', ip='10.0.0.2')

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)

    def test_different_ip_and_email_are_independent(self):
        self._register('one@test.com', ip='10.0.0.1')

        response = self._register('two@test.com', ip='10.0.0.2')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    @override_settings(ACADEMY=NO_COOLDOWN)
    def test_zero_cooldown_disables_throttle(self):
        self._register('a@test.com')
        response = self._register('b@test.com')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_login_is_not_throttled(self):
        UserProfile.objects.create(
            name='L', email='login@test.com', password_hash=make_password('secret1'), role=Role.STUDENT
        )
        for _ in range(3):
            response = self.client.post('/api/auth/login/', {'email': 'login@test.com', 'password': 'secret1'}, format='json')
            self.assertEqual(response.status_code, status.HTTP_200_OK)
