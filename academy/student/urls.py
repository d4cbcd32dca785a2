"""
URL Configuration for the student API and the public course catalog
"""
from django.urls import path

from student.services.catalog_views import course_detail, course_lessons, course_list, lesson_detail
from student.services.dashboard_views import dashboard
from student.services.enrollment_views import course_enrollment, enrollment_list, payment_list
from student.services.progress_views import complete_lesson, course_progress, lesson_progress, watch_lesson

# Mounted under /api/courses/
catalog_urls = [
    path('', course_list, name='catalog-course-list'),
    path('<uuid:course_id>/', course_detail, name='catalog-course-detail'),
    path('<uuid:course_id>/lessons/', course_lessons, name='catalog-course-lessons'),
    path('<uuid:course_id>/lessons/<uuid:lesson_id>/', lesson_detail, name='catalog-lesson-detail'),
]

# Mounted under /api/student/
urlpatterns = [
    path('dashboard/', dashboard, name='student-dashboard'),

    # Enrollment
    path('enrollments/', enrollment_list, name='student-enrollments'),
    path('courses/<uuid:course_id>/enroll/', course_enrollment, name='student-course-enroll'),

    # Progress tracking
    path('courses/<uuid:course_id>/progress/', course_progress, name='student-course-progress'),
    path('lessons/<uuid:lesson_id>/progress/', lesson_progress, name='student-lesson-progress'),
    path('lessons/<uuid:lesson_id>/complete/', complete_lesson, name='student-lesson-complete'),
    path('lessons/<uuid:lesson_id>/watch/', watch_lesson, name='student-lesson-watch'),

    # Payments
    path('payments/', payment_list, name='student-payments'),
]
