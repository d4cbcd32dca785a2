"""
Notification helpers - in-app notifications for enrollments, lessons and payments
"""
import logging

from teacher.models import CourseEnrollment, Notification

logger = logging.getLogger(__name__)


def create_notification(user, title, message, type='info', related_type=None, related_id=None):
    notification = Notification.objects.create(
        user=user,
        title=title,
        message=message,
        type=type,
        related_type=related_type,
        related_id=str(related_id) if related_id is not None else None,
    )
    logger.debug('Notification %s -> %s', notification.pk, user.pk)
    return notification


def notify_enrolled_students(course, title, message, related_type=None, related_id=None):
    """Bulk insert one notification per enrolled student. Returns the count."""
    student_ids = CourseEnrollment.objects.filter(course=course).values_list('student_id', flat=True)
    notifications = [
        Notification(
            user_id=student_id,
            title=title,
            message=message,
            type='info',
            related_type=related_type,
            related_id=str(related_id) if related_id is not None else None,
        )
        for student_id in student_ids
    ]
    Notification.objects.bulk_create(notifications)
    logger.info('Notified %d students of course %s', len(notifications), course.pk)
    return len(notifications)


def notify_payment_completed(payment):
    return create_notification(
        payment.user,
        title='تم الدفع بنجاح',
        message=f'تم تأكيد دفعتك بقيمة {payment.amount} {payment.currency} للكورس "{payment.course.title}"',
        type='success',
        related_type='payment',
        related_id=payment.id,
    )
