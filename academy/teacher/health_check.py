"""
Health Check Views

Liveness/readiness endpoints for the academy backend:
- Database connectivity
- Academy tables present (users, courses, lessons, ...)
- Storage buckets present under MEDIA_ROOT
"""
import logging
import os

from django.apps import apps
from django.conf import settings
from django.db import DatabaseError, connection
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)

ACADEMY_APP_LABELS = ('academy_admin', 'teacher')


class HealthCheckService:
    """Checks on the components the API depends on."""

    @staticmethod
    def check_database():
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
            return {'status': 'healthy', 'database': connection.vendor}
        except DatabaseError as e:
            logger.error("Database health check failed: %s", e)
            return {'status': 'unhealthy', 'database': connection.vendor, 'error': str(e)}

    @staticmethod
    def check_tables():
        """
        Compare the academy models' tables with what the database holds.

        Returns:
            dict: status plus the list of missing tables
        """
        required = sorted(
            model._meta.db_table
            for label in ACADEMY_APP_LABELS
            for model in apps.get_app_config(label).get_models()
        )
        try:
            existing = set(connection.introspection.table_names())
        except DatabaseError as e:
            logger.error("Table health check failed: %s", e)
            return {'status': 'unhealthy', 'error': str(e)}

        missing = [table for table in required if table not in existing]
        return {
            'status': 'degraded' if missing else 'healthy',
            'required': required,
            'missing': missing,
        }

    @staticmethod
    def check_storage():
        missing = [
            bucket for bucket in settings.ACADEMY['STORAGE_BUCKETS']
            if not os.path.isdir(os.path.join(settings.MEDIA_ROOT, bucket))
        ]
        return {'status': 'degraded' if missing else 'healthy', 'missing_buckets': missing}

    @staticmethod
    def get_system_status():
        checks = {
            'database': HealthCheckService.check_database(),
            'tables': HealthCheckService.check_tables(),
            'storage': HealthCheckService.check_storage(),
        }
        statuses = [check['status'] for check in checks.values()]

        # Overall status is the worst status among checks
        if 'unhealthy' in statuses:
            overall = 'unhealthy'
        elif 'degraded' in statuses:
            overall = 'degraded'
        else:
            overall = 'healthy'

        return {'status': overall, 'timestamp': timezone.now().isoformat(), 'checks': checks}


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    health = HealthCheckService.check_database()
    code = status.HTTP_200_OK if health['status'] == 'healthy' else status.HTTP_503_SERVICE_UNAVAILABLE
    return Response(health, status=code)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def system_status(request):
    """Full report; degraded still answers 200"""
    data = HealthCheckService.get_system_status()
    code = status.HTTP_503_SERVICE_UNAVAILABLE if data['status'] == 'unhealthy' else status.HTTP_200_OK
    return Response(data, status=code)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def readiness_check(request):
    """
    Kubernetes-style readiness check.

    Ready when the database answers and every academy table exists.
    """
    data = HealthCheckService.get_system_status()
    is_ready = (
        data['checks']['database']['status'] == 'healthy' and
        not data['checks']['tables'].get('missing')
    )
    if is_ready:
        return Response({'ready': True}, status=status.HTTP_200_OK)
    return Response({'ready': False, 'status': data}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def liveness_check(request):
    return Response({'alive': True}, status=status.HTTP_200_OK)
