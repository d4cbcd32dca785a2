"""
Service-layer errors and the DRF exception handler

Services raise these; DRF renders them as {"detail": ..., "code": ...}
with the matching status code.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class AcademyError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'حدث خطأ غير متوقع'
    default_code = 'error'


class NotFound(AcademyError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'العنصر المطلوب غير موجود'
    default_code = 'not_found'


class PermissionDenied(AcademyError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'ليس لديك صلاحية للقيام بهذا الإجراء'
    default_code = 'permission_denied'


class ValidationFailed(AcademyError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'البيانات المرسلة غير صحيحة'
    default_code = 'invalid'


class Conflict(AcademyError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'العنصر موجود بالفعل'
    default_code = 'conflict'


def academy_exception_handler(exc, context):
    """DRF default handling plus logging of server-side failures"""
    response = exception_handler(exc, context)

    view = context.get('view')
    view_name = view.__class__.__name__ if view is not None else 'unknown'

    if response is None:
        logger.exception('Unhandled error in %s: %s', view_name, exc)
        return None

    if response.status_code >= 500:
        logger.error('Server error in %s: %s', view_name, exc)

    return response
