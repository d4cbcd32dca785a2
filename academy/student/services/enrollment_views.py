"""
Enrollment and payment endpoints for students
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from academy.exceptions import NotFound, ValidationFailed
from admin.models import Payment
from admin.serializers import PaymentCreateSerializer, PaymentSerializer
from teacher.models import Course
from ..serializers.enrollment import EnrollmentSerializer
from . import enrollment as enrollment_service

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def enrollment_list(request):
    enrollments = enrollment_service.get_student_enrollments(request.user)
    return Response(EnrollmentSerializer(enrollments, many=True).data)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def course_enrollment(request, course_id):
    """POST enrolls the current user, DELETE removes the enrollment"""
    course = get_object_or_404(Course.objects.select_related('teacher'), id=course_id)

    if request.method == 'DELETE':
        if not enrollment_service.unenroll(course, request.user):
            raise NotFound('أنت غير مسجل في هذا الكورس')
        return Response(status=status.HTTP_204_NO_CONTENT)

    enrollment, created = enrollment_service.enroll(
        course, request.user, skip_payment_check=request.user.is_admin
    )
    return Response(
        {'created': created, 'enrollment': EnrollmentSerializer(enrollment).data},
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def payment_list(request):
    """
    GET: the current user's payments
    POST: record a pending payment for a course (amount defaults to the course price)
    """
    if request.method == 'GET':
        payments = Payment.objects.filter(user=request.user).select_related('course', 'user')
        return Response(PaymentSerializer(payments, many=True).data)

    serializer = PaymentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    course = Course.objects.filter(id=data['course']).first()
    if course is None:
        raise ValidationFailed('الكورس غير موجود')

    payment = Payment.objects.create(
        user=request.user,
        course=course,
        amount=data.get('amount', course.price),
        currency=data.get('currency') or 'USD',
        payment_method=data.get('payment_method') or None,
        transaction_id=data.get('transaction_id') or None,
        status=Payment.STATUS_PENDING,
    )
    logger.info('Pending payment %s recorded by %s for course %s', payment.pk, request.user.pk, course.pk)
    return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)
