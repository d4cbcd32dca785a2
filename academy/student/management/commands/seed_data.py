"""
Django management command to populate sample academy data
Creates an admin, a teacher and a student, published courses with ordered
lessons, and a couple of enrollments. Safe to run more than once.
"""
from decimal import Decimal

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction

from admin.models import Payment, Role, UserProfile
from student.services.course_stats import CourseStatsService
from student.services.enrollment import enroll
from teacher.models import Course, Lesson

SAMPLE_PASSWORD = 'password123'

SAMPLE_USERS = [
    {'email': 'admin@academy.local', 'name': 'مدير المنصة', 'role': Role.ADMIN},
    {'email': 'teacher@academy.local', 'name': 'أحمد المعلم', 'role': Role.TEACHER},
    {'email': 'student@academy.local', 'name': 'سارة الطالبة', 'role': Role.STUDENT},
]

SAMPLE_VIDEO = 'https://www.youtube.com/watch?v=dQw4w9WgXcQ'

SAMPLE_COURSES = [
    {
        'title': 'أساسيات البرمجة بلغة Python',
        'description': 'تعلم أساسيات البرمجة باستخدام لغة Python من الصفر حتى الاحتراف',
        'price': Decimal('199'),
        'level': 'beginner',
        'category': 'البرمجة',
        'is_free': False,
        'thumbnail_url': 'https://images.unsplash.com/photo-1526379095098-d400fd0bf935?w=400',
        'lessons': [
            ('مقدمة في البرمجة', 'تعرف على أساسيات البرمجة ومفاهيمها الأساسية', 45, True),
            ('تثبيت Python وبيئة التطوير', 'تعلم كيفية تثبيت Python وإعداد بيئة التطوير', 30, True),
            ('المتغيرات وأنواع البيانات', 'تعلم المتغيرات وأنواع البيانات الأساسية في Python', 60, False),
        ],
    },
    {
        'title': 'تطوير تطبيقات الويب باستخدام React',
        'description': 'تعلم تطوير تطبيقات الويب الحديثة باستخدام مكتبة React',
        'price': Decimal('299'),
        'level': 'intermediate',
        'category': 'تطوير الويب',
        'is_free': False,
        'thumbnail_url': 'https://images.unsplash.com/photo-1633356122544-f134324a6cee?w=400',
        'lessons': [
            ('مقدمة في React', 'تعرف على مكتبة React وأهميتها في تطوير الويب', 50, True),
            ('إعداد مشروع React', 'تعلم كيفية إنشاء وإعداد مشروع React جديد', 40, True),
            ('المكونات (Components)', 'تعلم كيفية إنشاء واستخدام المكونات في React', 70, False),
        ],
    },
    {
        'title': 'أساسيات الرياضيات للمبتدئين',
        'description': 'دورة شاملة في أساسيات الرياضيات للمبتدئين',
        'price': Decimal('0'),
        'level': 'beginner',
        'category': 'الرياضيات',
        'is_free': True,
        'thumbnail_url': 'https://images.unsplash.com/photo-1635070041078-e363dbe005cb?w=400',
        'lessons': [],
    },
    {
        'title': 'تعلم اللغة الإنجليزية للمبتدئين',
        'description': 'دورة شاملة لتعلم اللغة الإنجليزية من الصفر',
        'price': Decimal('149'),
        'level': 'beginner',
        'category': 'اللغات',
        'is_free': False,
        'thumbnail_url': 'https://images.unsplash.com/photo-1546410531-bb4caa6b424d?w=400',
        'lessons': [],
    },
    {
        'title': 'أساسيات الفيزياء',
        'description': 'تعلم أساسيات الفيزياء بطريقة مبسطة ومفهومة',
        'price': Decimal('0'),
        'level': 'beginner',
        'category': 'العلوم',
        'is_free': True,
        'thumbnail_url': 'https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=400',
        'lessons': [],
    },
]


class Command(BaseCommand):
    help = 'Populate the academy database with sample users, courses and lessons'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Delete the sample teacher\'s courses before seeding'
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('[SEED] Populating sample data...'))

        with transaction.atomic():
            users = self.create_users()
            teacher, student = users[Role.TEACHER], users[Role.STUDENT]

            if options.get('reset'):
                deleted, _ = Course.objects.filter(teacher=teacher).delete()
                self.stdout.write(self.style.WARNING(f'[RESET] Deleted {deleted} rows of sample course data'))

            courses = self.create_courses(teacher)
            self.create_enrollments(courses, student)

        self.stdout.write(self.style.SUCCESS(
            f'[SUCCESS] {len(users)} users, {len(courses)} courses ready. Password: {SAMPLE_PASSWORD}'
        ))

    def create_users(self):
        users = {}
        for data in SAMPLE_USERS:
            user, created = UserProfile.objects.get_or_create(
                email=data['email'],
                defaults={
                    'name': data['name'],
                    'role': data['role'],
                    'password_hash': make_password(SAMPLE_PASSWORD),
                    'status': 'active',
                }
            )
            users[data['role']] = user
            self.stdout.write(f"  {'+' if created else '='} {user.email} ({user.role})")
        return users

    def create_courses(self, teacher):
        courses = []
        for data in SAMPLE_COURSES:
            data = dict(data)
            lessons = data.pop('lessons')
            course, created = Course.objects.get_or_create(
                teacher=teacher,
                title=data['title'],
                defaults={**data, 'status': Course.STATUS_PUBLISHED},
            )
            for index, (title, description, minutes, is_free) in enumerate(lessons, start=1):
                Lesson.objects.get_or_create(
                    course=course,
                    order_index=index,
                    defaults={
                        'title': title,
                        'description': description,
                        'content': description,
                        'video_url': SAMPLE_VIDEO,
                        'duration_minutes': minutes,
                        'is_free': is_free,
                    }
                )
            CourseStatsService.update_course_stats(course)
            courses.append(course)
            self.stdout.write(f"  {'+' if created else '='} {course.title} ({course.total_lessons} lessons)")
        return courses

    def create_enrollments(self, courses, student):
        """Enroll the sample student in the first free course and the Python course (paid)"""
        free_course = next(course for course in courses if course.is_free)
        python_course = courses[0]

        Payment.objects.get_or_create(
            user=student,
            course=python_course,
            status=Payment.STATUS_COMPLETED,
            defaults={'amount': python_course.price, 'payment_method': 'card'},
        )

        for course in (free_course, python_course):
            _, created = enroll(course, student)
            self.stdout.write(f"  {'+' if created else '='} {student.email} -> {course.title}")
