from django.urls import path, include
from rest_framework import routers
from .views import (
    AdminCourseViewSet, AdminPaymentViewSet, AdminUserViewSet,
    course_performance, dashboard, payment_stats, user_growth,
)

router = routers.DefaultRouter()
router.register(r'users', AdminUserViewSet, basename='admin-users')
router.register(r'payments', AdminPaymentViewSet, basename='admin-payments')
router.register(r'courses', AdminCourseViewSet, basename='admin-courses')

urlpatterns = [
    path('', include(router.urls)),
    path('analytics/dashboard/', dashboard, name='admin-analytics-dashboard'),
    path('analytics/user-growth/', user_growth, name='admin-analytics-user-growth'),
    path('analytics/course-performance/', course_performance, name='admin-analytics-course-performance'),
    path('analytics/payments/', payment_stats, name='admin-analytics-payments'),
]
