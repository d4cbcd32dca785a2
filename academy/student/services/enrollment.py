"""
Enrollment service - enroll/unenroll students and list their courses
"""
import logging

from django.db import IntegrityError, transaction

from academy.exceptions import PermissionDenied, ValidationFailed
from admin.models import Payment
from teacher.models import CourseEnrollment
from .course_stats import CourseStatsService
from .notifications import create_notification

logger = logging.getLogger(__name__)


def _requires_payment(course):
    return not course.is_free and course.price > 0


def has_completed_payment(course, student):
    return Payment.objects.filter(
        user=student, course=course, status=Payment.STATUS_COMPLETED
    ).exists()


def enroll(course, student, skip_payment_check=False):
    """
    Enroll a student in a published course. Returns (enrollment, created).

    A second call for the same pair returns the existing row, even when the
    course has since been archived or the payment refunded.
    """
    existing = CourseEnrollment.objects.filter(course=course, student=student).first()
    if existing is not None:
        return existing, False

    if not course.is_published:
        raise ValidationFailed('لا يمكن التسجيل في كورس غير منشور')

    if _requires_payment(course) and not skip_payment_check and not has_completed_payment(course, student):
        raise PermissionDenied('يجب إتمام الدفع قبل التسجيل في هذا الكورس')

    try:
        with transaction.atomic():
            enrollment, created = CourseEnrollment.objects.get_or_create(course=course, student=student)
    except IntegrityError:
        enrollment, created = CourseEnrollment.objects.get(course=course, student=student), False

    if created:
        CourseStatsService.update_course_stats(course)
        create_notification(
            course.teacher,
            title='تسجيل جديد',
            message=f'سجل {student.name} في الكورس "{course.title}"',
            related_type='course',
            related_id=course.id,
        )
        logger.info('Student %s enrolled in course %s', student.pk, course.pk)

    return enrollment, created


def unenroll(course, student):
    deleted, _ = CourseEnrollment.objects.filter(course=course, student=student).delete()
    if deleted:
        CourseStatsService.update_course_stats(course)
        logger.info('Student %s unenrolled from course %s', student.pk, course.pk)
    return bool(deleted)


def get_student_enrollments(student):
    return (
        CourseEnrollment.objects.filter(student=student)
        .select_related('course', 'course__teacher')
        .order_by('-enrolled_at')
    )


def is_enrolled(course, student):
    return CourseEnrollment.objects.filter(course=course, student=student).exists()
