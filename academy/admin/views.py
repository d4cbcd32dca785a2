import logging

from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from academy.exceptions import ValidationFailed
from teacher.models import Course
from teacher.permissions import IsAdmin
from teacher.serializers import AdminCourseSerializer
from .analytics import AnalyticsService
from .models import Payment, Role, UserProfile
from .payments import change_payment_status
from .serializers import PaymentSerializer, PaymentStatusSerializer, UserCreateSerializer, UserSerializer

logger = logging.getLogger(__name__)


class AdminUserViewSet(viewsets.ModelViewSet):
    """ViewSet to list/create/update/delete users for the admin UI."""
    serializer_class = UserSerializer
    permission_classes = [IsAdmin]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'email']
    ordering_fields = ['created_at', 'email', 'name']

    def get_queryset(self):
        qs = UserProfile.objects.all().order_by('-created_at')
        role = self.request.query_params.get('role')
        if role:
            qs = qs.filter(role=role)
        user_status = self.request.query_params.get('status')
        if user_status:
            qs = qs.filter(status=user_status)
        return qs

    def get_serializer_class(self):
        if self.action == 'create':
            return UserCreateSerializer
        return UserSerializer

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info('Admin %s created user %s (%s)', self.request.user.pk, user.email, user.role)

    def perform_update(self, serializer):
        user = serializer.save()
        logger.info('Admin %s updated user %s', self.request.user.pk, user.email)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        if instance.pk == request.user.pk:
            raise ValidationFailed('لا يمكنك حذف حسابك الخاص')
        logger.info('Admin %s deleted user %s', request.user.pk, instance.email)
        instance.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminPaymentViewSet(viewsets.ReadOnlyModelViewSet):
    """Payments moderation: list/filter and status overrides"""
    serializer_class = PaymentSerializer
    permission_classes = [IsAdmin]
    filter_backends = [filters.SearchFilter]
    search_fields = ['user__name', 'user__email', 'course__title', 'transaction_id']

    def get_queryset(self):
        qs = Payment.objects.select_related('user', 'course').order_by('-created_at')
        payment_status = self.request.query_params.get('status')
        if payment_status:
            qs = qs.filter(status=payment_status)
        return qs

    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        """Body: {"status": "pending|completed|failed|refunded"}"""
        payment = self.get_object()
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        change_payment_status(payment, serializer.validated_data['status'], request.user)
        return Response(PaymentSerializer(payment).data)


class AdminCourseViewSet(mixins.ListModelMixin,
                         mixins.RetrieveModelMixin,
                         mixins.UpdateModelMixin,
                         mixins.DestroyModelMixin,
                         viewsets.GenericViewSet):
    """Course moderation, including direct status edits"""
    serializer_class = AdminCourseSerializer
    permission_classes = [IsAdmin]
    filter_backends = [filters.SearchFilter]
    search_fields = ['title', 'description', 'category', 'teacher__name']

    def get_queryset(self):
        qs = Course.objects.select_related('teacher').order_by('-created_at')
        course_status = self.request.query_params.get('status')
        if course_status:
            qs = qs.filter(status=course_status)
        return qs

    def perform_update(self, serializer):
        course = serializer.save()
        logger.info('Admin %s updated course %s (status=%s)', self.request.user.pk, course.pk, course.status)

    def perform_destroy(self, instance):
        logger.info('Admin %s deleted course %s', self.request.user.pk, instance.pk)
        instance.delete()


@api_view(['GET'])
@permission_classes([IsAdmin])
def dashboard(request):
    return Response(AnalyticsService.dashboard_stats(Role.ADMIN, request.user))


@api_view(['GET'])
@permission_classes([IsAdmin])
def user_growth(request):
    return Response(AnalyticsService.user_growth_stats())


@api_view(['GET'])
@permission_classes([IsAdmin])
def course_performance(request):
    return Response(AnalyticsService.course_performance_stats())


@api_view(['GET'])
@permission_classes([IsAdmin])
def payment_stats(request):
    return Response(AnalyticsService.payment_stats())
