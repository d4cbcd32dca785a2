"""
Teacher app URL configuration - course/lesson editing, dashboard, notifications and health
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter, SimpleRouter
from .views import (
    NotificationViewSet, TeacherCourseViewSet, TeacherLessonViewSet,
    analytics, dashboard_stats, students,
)
from .health_check import (
    health_check, liveness_check, readiness_check, system_status
)

# Mounted under /api/teacher/
router = DefaultRouter()
router.register(r'courses', TeacherCourseViewSet, basename='teacher-course')
router.register(r'lessons', TeacherLessonViewSet, basename='teacher-lesson')

urlpatterns = [
    path('', include(router.urls)),
    path('dashboard/', dashboard_stats, name='teacher-dashboard'),
    path('analytics/', analytics, name='teacher-analytics'),
    path('students/', students, name='teacher-students'),
]

# Mounted under /api/
notification_router = SimpleRouter()
notification_router.register(r'notifications', NotificationViewSet, basename='notification')
notification_urls = notification_router.urls

# Mounted under /api/health/
health_urls = [
    path('', health_check, name='health-check'),
    path('status/', system_status, name='system-status'),
    path('ready/', readiness_check, name='readiness-check'),
    path('alive/', liveness_check, name='liveness-check'),
]
