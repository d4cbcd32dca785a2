"""
Course editor tests - course/lesson CRUD, counters, uploads, dashboard and notifications
"""
import io
import shutil
import tempfile
from decimal import Decimal

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from PIL import Image
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from admin.auth_backend import issue_token
from admin.models import Payment, Role, UserProfile
from teacher.models import Course, CourseEnrollment, Lesson, Notification

MEDIA_ROOT = tempfile.mkdtemp(prefix='academy-test-media-')


def make_image(name='thumb.png'):
    buffer = io.BytesIO()
    Image.new('RGB', (32, 32), color=(73, 187, 189)).save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class TeacherCourseTest(APITestCase):
    """End-to-end course editing as the owning teacher"""

    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    def setUp(self):
        self.client = APIClient()
        self.teacher = UserProfile.objects.create(name='Teacher', email='teacher@test.com', role=Role.TEACHER)
        self.student = UserProfile.objects.create(name='Student', email='student@test.com', role=Role.STUDENT)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(self.teacher)}')

    def _create_course(self, **data):
        payload = {'title': 'Python', 'description': 'Basics', 'price': '199.00', 'level': 'beginner'}
        payload.update(data)
        response = self.client.post('/api/teacher/courses/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return Course.objects.get(id=response.data['id'])

    def test_01_create_course_is_owned_draft(self):
        course = self._create_course()

        self.assertEqual(course.teacher_id, self.teacher.id)
        self.assertEqual(course.status, Course.STATUS_DRAFT)
        self.assertEqual(course.price, Decimal('199.00'))

    def test_02_status_and_counters_are_read_only(self):
        response = self.client.post('/api/teacher/courses/', {
            'title': 'Sneaky',
            'status': 'published',
            'enrollment_count': 999,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Course.STATUS_DRAFT)
        self.assertEqual(response.data['enrollment_count'], 0)

    def test_03_publish_and_archive(self):
        course = self._create_course()

        response = self.client.post(f'/api/teacher/courses/{course.id}/publish/')
        self.assertEqual(response.data['status'], Course.STATUS_PUBLISHED)

        CourseEnrollment.objects.create(course=course, student=self.student)
        response = self.client.post(f'/api/teacher/courses/{course.id}/archive/')

        self.assertEqual(response.data['status'], Course.STATUS_ARCHIVED)
        self.assertTrue(Notification.objects.filter(user=self.student, related_id=str(course.id)).exists())

    def test_04_lesson_crud_recomputes_counters(self):
        course = self._create_course()

        for index, minutes in enumerate((45, 30, 60), start=1):
            response = self.client.post('/api/teacher/lessons/', {
                'course_id': str(course.id),
                'title': f'Lesson {index}',
                'duration_minutes': minutes,
                'order_index': index,
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        course.refresh_from_db()
        self.assertEqual(course.total_lessons, 3)
        self.assertEqual(course.duration_hours, Decimal('2.3'))

        lesson = course.lessons.get(order_index=3)
        self.client.patch(f'/api/teacher/lessons/{lesson.id}/', {'duration_minutes': 15}, format='json')
        course.refresh_from_db()
        self.assertEqual(course.duration_hours, Decimal('1.5'))

        response = self.client.delete(f'/api/teacher/lessons/{lesson.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        course.refresh_from_db()
        self.assertEqual(course.total_lessons, 2)
        self.assertEqual(course.duration_hours, Decimal('1.3'))

    def test_05_new_lesson_in_published_course_notifies_students(self):
        course = self._create_course()
        course.status = Course.STATUS_PUBLISHED
        course.save()
        CourseEnrollment.objects.create(course=course, student=self.student)

        self.client.post('/api/teacher/lessons/', {
            'course_id': str(course.id),
            'title': 'Fresh lesson',
            'order_index': 1,
        }, format='json')

        self.assertEqual(Notification.objects.filter(user=self.student, related_type='lesson').count(), 1)

    def test_06_negative_duration_rejected(self):
        course = self._create_course()
        response = self.client.post('/api/teacher/lessons/', {
            'course_id': str(course.id),
            'title': 'Broken',
            'duration_minutes': -5,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_07_lessons_filtered_by_course(self):
        first = self._create_course(title='First')
        second = self._create_course(title='Second')
        Lesson.objects.create(course=first, title='A', order_index=1)
        Lesson.objects.create(course=second, title='B', order_index=1)

        response = self.client.get('/api/teacher/lessons/', {'course': str(first.id)})

        self.assertEqual([row['title'] for row in response.data], ['A'])

    def test_08_thumbnail_upload(self):
        course = self._create_course()

        response = self.client.post(
            f'/api/teacher/courses/{course.id}/thumbnail/',
            {'thumbnail': make_image()},
            format='multipart',
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('/media/course-thumbnails/', response.data['thumbnail_url'])
        course.refresh_from_db()
        self.assertEqual(course.thumbnail_url, response.data['thumbnail_url'])

    def test_09_thumbnail_must_be_an_image(self):
        course = self._create_course()
        fake = SimpleUploadedFile('notes.txt', b'not an image', content_type='text/plain')

        response = self.client.post(f'/api/teacher/courses/{course.id}/thumbnail/', {'thumbnail': fake}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_10_video_upload(self):
        course = self._create_course()
        lesson = Lesson.objects.create(course=course, title='Video lesson', order_index=1)
        video = SimpleUploadedFile('intro.mp4', b'\x00\x00\x00\x18ftypmp42', content_type='video/mp4')

        response = self.client.post(f'/api/teacher/lessons/{lesson.id}/video/', {'video': video}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['video_url'].endswith('.mp4'))

    def test_11_video_rejects_wrong_content_type(self):
        course = self._create_course()
        lesson = Lesson.objects.create(course=course, title='Video lesson', order_index=1)
        upload = SimpleUploadedFile('intro.pdf', b'%PDF-1.4', content_type='application/pdf')

        response = self.client.post(f'/api/teacher/lessons/{lesson.id}/video/', {'video': upload}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_12_course_students(self):
        course = self._create_course()
        CourseEnrollment.objects.create(course=course, student=self.student, progress=40)

        response = self.client.get(f'/api/teacher/courses/{course.id}/students/')

        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['student_email'], 'student@test.com')
        self.assertEqual(response.data[0]['progress'], 40)

    def test_13_media_urls_are_not_client_writable(self):
        victim_name = default_storage.save('avatars/victim.png', ContentFile(b'avatar bytes'))
        victim_url = f'http://testserver/media/{victim_name}'

        response = self.client.post('/api/teacher/courses/', {
            'title': 'Borrowed thumbnail',
            'thumbnail_url': victim_url,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['thumbnail_url'])
        course = Course.objects.get(id=response.data['id'])

        response = self.client.post('/api/teacher/lessons/', {
            'course_id': str(course.id),
            'title': 'Borrowed video',
            'video_url': victim_url,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['video_url'])

        response = self.client.patch(f'/api/teacher/courses/{course.id}/', {'thumbnail_url': victim_url}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        course.refresh_from_db()
        self.assertIsNone(course.thumbnail_url)

        self.assertTrue(default_storage.exists(victim_name))

    def test_14_delete_only_touches_own_bucket(self):
        """A stored URL pointing into another bucket is never removed"""
        victim_name = default_storage.save('avatars/victim.png', ContentFile(b'avatar bytes'))
        victim_url = f'http://testserver/media/{victim_name}'
        course = self._create_course()
        Course.objects.filter(id=course.id).update(thumbnail_url=victim_url)
        lesson = Lesson.objects.create(course=course, title='Old', order_index=1, video_url=victim_url)

        self.assertEqual(self.client.delete(f'/api/teacher/lessons/{lesson.id}/').status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.post(
            f'/api/teacher/courses/{course.id}/thumbnail/', {'thumbnail': make_image()}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.client.delete(f'/api/teacher/courses/{course.id}/').status_code, status.HTTP_204_NO_CONTENT)

        self.assertTrue(default_storage.exists(victim_name))


class TeacherDashboardTest(APITestCase):
    """Dashboard, analytics and student roster"""

    def setUp(self):
        self.client = APIClient()
        self.teacher = UserProfile.objects.create(name='Teacher', email='teacher@test.com', role=Role.TEACHER)
        self.student = UserProfile.objects.create(name='Student', email='student@test.com', role=Role.STUDENT)
        self.course = Course.objects.create(
            teacher=self.teacher, title='Paid', price=Decimal('100'), status=Course.STATUS_PUBLISHED
        )
        Lesson.objects.create(course=self.course, title='L1', order_index=1)
        CourseEnrollment.objects.create(course=self.course, student=self.student, progress=50)
        Payment.objects.create(
            user=self.student, course=self.course, amount=Decimal('100'), status=Payment.STATUS_COMPLETED
        )
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(self.teacher)}')

    def test_dashboard(self):
        response = self.client.get('/api/teacher/dashboard/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_courses'], 1)
        self.assertEqual(response.data['total_students'], 1)
        self.assertEqual(response.data['total_lessons'], 1)
        self.assertEqual(response.data['total_revenue'], 100.0)
        self.assertEqual(len(response.data['recent_courses']), 1)

    def test_analytics_range(self):
        response = self.client.get('/api/teacher/analytics/', {'range': 'week'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['range'], 'week')
        self.assertEqual(response.data['period_revenue'], 100.0)
        self.assertEqual(response.data['recent_enrollments'], 1)
        self.assertEqual(response.data['top_performing_course']['title'], 'Paid')

    def test_analytics_invalid_range(self):
        response = self.client.get('/api/teacher/analytics/', {'range': 'decade'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_students_roster(self):
        response = self.client.get('/api/teacher/students/')

        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['email'], 'student@test.com')
        self.assertEqual(response.data[0]['average_progress'], 50)

    def test_dashboard_is_teacher_only(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(self.student)}')
        response = self.client.get('/api/teacher/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class NotificationAPITest(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = UserProfile.objects.create(name='User', email='user@test.com', role=Role.STUDENT)
        self.other = UserProfile.objects.create(name='Other', email='other@test.com', role=Role.STUDENT)
        self.first = Notification.objects.create(user=self.user, title='One', message='m1')
        self.second = Notification.objects.create(user=self.user, title='Two', message='m2')
        Notification.objects.create(user=self.other, title='Not mine', message='m3')
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(self.user)}')

    def test_list_only_own(self):
        response = self.client.get('/api/notifications/')
        self.assertEqual({row['title'] for row in response.data}, {'One', 'Two'})

    def test_mark_one_read(self):
        response = self.client.post(f'/api/notifications/{self.first.id}/read/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])
        response = self.client.get('/api/notifications/unread-count/')
        self.assertEqual(response.data['unread_count'], 1)

    def test_mark_all_read(self):
        response = self.client.post('/api/notifications/read-all/')

        self.assertEqual(response.data['updated'], 2)
        self.assertFalse(Notification.objects.filter(user=self.user, is_read=False).exists())
        self.assertTrue(Notification.objects.filter(user=self.other, is_read=False).exists())

    def test_cannot_read_someone_elses(self):
        foreign = Notification.objects.get(user=self.other)
        response = self.client.post(f'/api/notifications/{foreign.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete(self):
        response = self.client.delete(f'/api/notifications/{self.second.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Notification.objects.filter(id=self.second.id).exists())
