"""
Access gating tests - course ownership and lesson visibility
"""
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from admin.auth_backend import issue_token
from admin.models import Role, UserProfile
from teacher.models import Course, CourseEnrollment, Lesson
from teacher.permissions import can_edit_course, can_view_lesson


class AccessPredicateTest(TestCase):
    """can_edit_course / can_view_lesson for each role"""

    def setUp(self):
        self.admin = UserProfile.objects.create(name='Admin', email='admin@test.com', role=Role.ADMIN)
        self.owner = UserProfile.objects.create(name='Owner', email='owner@test.com', role=Role.TEACHER)
        self.other_teacher = UserProfile.objects.create(name='Other', email='other@test.com', role=Role.TEACHER)
        self.student = UserProfile.objects.create(name='Student', email='student@test.com', role=Role.STUDENT)

        self.course = Course.objects.create(teacher=self.owner, title='Course', status=Course.STATUS_PUBLISHED)
        self.free_lesson = Lesson.objects.create(course=self.course, title='Intro', order_index=1, is_free=True)
        self.paid_lesson = Lesson.objects.create(course=self.course, title='Deep dive', order_index=2)

    def test_admin_edits_any_course(self):
        self.assertTrue(can_edit_course(self.admin, self.course))

    def test_owner_edits_own_course(self):
        self.assertTrue(can_edit_course(self.owner, self.course))

    def test_other_teacher_cannot_edit(self):
        self.assertFalse(can_edit_course(self.other_teacher, self.course))

    def test_student_never_edits(self):
        self.assertFalse(can_edit_course(self.student, self.course))

    def test_anonymous_never_edits(self):
        self.assertFalse(can_edit_course(None, self.course))

    def test_free_lesson_visible_to_everyone_signed_in(self):
        for user in (self.admin, self.owner, self.other_teacher, self.student):
            self.assertTrue(can_view_lesson(user, self.free_lesson))

    def test_paid_lesson_needs_enrollment(self):
        self.assertFalse(can_view_lesson(self.student, self.paid_lesson))
        CourseEnrollment.objects.create(course=self.course, student=self.student)
        self.assertTrue(can_view_lesson(self.student, self.paid_lesson))

    def test_paid_lesson_visible_to_owner_and_admin_only(self):
        self.assertTrue(can_view_lesson(self.owner, self.paid_lesson))
        self.assertTrue(can_view_lesson(self.admin, self.paid_lesson))
        self.assertFalse(can_view_lesson(self.other_teacher, self.paid_lesson))


class CourseOwnershipAPITest(APITestCase):
    """Teacher endpoints answer 403 for courses the caller does not own"""

    def setUp(self):
        self.client = APIClient()
        self.owner = UserProfile.objects.create(name='Owner', email='owner@test.com', role=Role.TEACHER)
        self.other_teacher = UserProfile.objects.create(name='Other', email='other@test.com', role=Role.TEACHER)
        self.student = UserProfile.objects.create(name='Student', email='student@test.com', role=Role.STUDENT)
        self.admin = UserProfile.objects.create(name='Admin', email='admin@test.com', role=Role.ADMIN)
        self.course = Course.objects.create(teacher=self.owner, title='Owned course')
        self.lesson = Lesson.objects.create(course=self.course, title='Lesson', order_index=1)

    def _login(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')

    def test_01_owner_can_edit(self):
        self._login(self.owner)
        response = self.client.patch(f'/api/teacher/courses/{self.course.id}/', {'title': 'Renamed'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], 'Renamed')

    def test_02_other_teacher_gets_403_on_read(self):
        self._login(self.other_teacher)
        response = self.client.get(f'/api/teacher/courses/{self.course.id}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertNotIn('title', response.data)

    def test_03_other_teacher_gets_403_on_update_and_delete(self):
        self._login(self.other_teacher)

        response = self.client.patch(f'/api/teacher/courses/{self.course.id}/', {'title': 'Hijacked'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.delete(f'/api/teacher/courses/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.course.refresh_from_db()
        self.assertEqual(self.course.title, 'Owned course')

    def test_04_other_teacher_cannot_publish(self):
        self._login(self.other_teacher)
        response = self.client.post(f'/api/teacher/courses/{self.course.id}/publish/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.course.refresh_from_db()
        self.assertEqual(self.course.status, Course.STATUS_DRAFT)

    def test_05_other_teacher_cannot_touch_lessons(self):
        self._login(self.other_teacher)

        response = self.client.patch(f'/api/teacher/lessons/{self.lesson.id}/', {'title': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.post('/api/teacher/lessons/', {
            'course_id': str(self.course.id),
            'title': 'Injected lesson',
            'order_index': 2,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.course.lessons.count(), 1)

    def test_06_other_teacher_list_excludes_foreign_courses(self):
        self._login(self.other_teacher)
        response = self.client.get('/api/teacher/courses/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_07_student_is_refused(self):
        self._login(self.student)
        response = self.client.get('/api/teacher/courses/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_08_admin_can_edit_any_course(self):
        self._login(self.admin)
        response = self.client.patch(f'/api/teacher/courses/{self.course.id}/', {'category': 'البرمجة'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_09_anonymous_is_unauthorized(self):
        response = self.client.get('/api/teacher/courses/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
