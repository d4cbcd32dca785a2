"""
URL configuration for the academy project.

/api/auth/           sign-up, sign-in, session
/api/courses/        public catalog
/api/student/        enrollments, progress, payments
/api/teacher/        course/lesson editor, dashboard
/api/admin/          moderation and analytics
/api/notifications/  in-app notifications
/api/health/         liveness/readiness
"""
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from admin.auth import login, me, register, upload_avatar
from student.urls import catalog_urls
from teacher.urls import health_urls, notification_urls

auth_urls = [
    path('register/', register, name='auth-register'),
    path('login/', login, name='auth-login'),
    path('me/', me, name='auth-me'),
    path('me/avatar/', upload_avatar, name='auth-avatar'),
]

urlpatterns = [
    path('django-admin/', admin.site.urls),
    path('api/auth/', include(auth_urls)),
    path('api/courses/', include(catalog_urls)),
    path('api/student/', include('student.urls')),
    path('api/teacher/', include('teacher.urls')),
    path('api/admin/', include('admin.urls')),
    path('api/', include(notification_urls)),
    path('api/health/', include(health_urls)),
]

# Serve uploaded media in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
