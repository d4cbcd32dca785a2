"""
Payment status overrides made by admins
"""
import logging

from django.db import transaction

from academy.exceptions import ValidationFailed
from student.services.enrollment import enroll
from student.services.notifications import notify_payment_completed
from .models import Payment

logger = logging.getLogger(__name__)

# Forward order of the payment lifecycle; moving to a lower rank is a reversal
STATUS_RANK = {
    Payment.STATUS_PENDING: 0,
    Payment.STATUS_FAILED: 1,
    Payment.STATUS_COMPLETED: 1,
    Payment.STATUS_REFUNDED: 2,
}


def is_backward_transition(old_status, new_status):
    return STATUS_RANK[new_status] < STATUS_RANK[old_status]


def change_payment_status(payment, new_status, actor):
    """
    Apply an admin status override. Any transition between known statuses is
    accepted; reversals are logged. Completing a payment notifies the payer
    and enrolls them in the course.
    """
    if new_status not in STATUS_RANK:
        raise ValidationFailed(f'حالة الدفع غير صالحة: {new_status}')

    old_status = payment.status
    if old_status == new_status:
        return payment

    if is_backward_transition(old_status, new_status):
        logger.warning(
            'Admin %s moved payment %s backwards: %s -> %s',
            actor.pk, payment.pk, old_status, new_status,
        )
    else:
        logger.info('Admin %s moved payment %s: %s -> %s', actor.pk, payment.pk, old_status, new_status)

    with transaction.atomic():
        payment.status = new_status
        payment.save(update_fields=['status', 'updated_at'])

        if new_status == Payment.STATUS_COMPLETED:
            notify_payment_completed(payment)
            if payment.course.is_published:
                enroll(payment.course, payment.user, skip_payment_check=True)
            else:
                logger.warning('Payment %s completed for unpublished course %s; no enrollment', payment.pk, payment.course_id)

    return payment
