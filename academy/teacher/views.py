"""
Teacher app views - course and lesson editing, dashboard and notifications
"""
import logging

from django.db.models import Avg, Count, Max
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from academy.exceptions import PermissionDenied
from admin.analytics import AnalyticsService
from admin.models import Role
from admin.storage import COURSE_THUMBNAILS_BUCKET, LESSON_VIDEOS_BUCKET, delete_from_bucket, upload_to_bucket
from student.services.course_stats import CourseStatsService
from student.services.notifications import notify_enrolled_students
from .models import Course, CourseEnrollment, Lesson, Notification
from .permissions import CanEditCourse, IsTeacher, can_edit_course
from .serializers import (
    CourseDetailSerializer, CourseSerializer, CourseStudentSerializer, LessonSerializer,
    NotificationSerializer, ThumbnailUploadSerializer, VideoUploadSerializer,
)

logger = logging.getLogger(__name__)


class TeacherCourseViewSet(viewsets.ModelViewSet):
    """
    Courses owned by the requesting teacher (admins see every course).

    Detail routes resolve any course and rely on CanEditCourse, so a teacher
    touching someone else's course gets 403 rather than 404.
    """
    permission_classes = [CanEditCourse]
    serializer_class = CourseSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    filter_backends = [filters.SearchFilter]
    search_fields = ['title', 'description', 'category']

    def get_queryset(self):
        qs = Course.objects.select_related('teacher').order_by('-created_at')
        if self.action == 'list':
            if not self.request.user.is_admin:
                qs = qs.filter(teacher=self.request.user)
            course_status = self.request.query_params.get('status')
            if course_status:
                qs = qs.filter(status=course_status)
        return qs

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return CourseDetailSerializer
        return CourseSerializer

    def perform_create(self, serializer):
        course = serializer.save(teacher=self.request.user)
        logger.info('Teacher %s created course %s', self.request.user.pk, course.pk)

    def perform_update(self, serializer):
        course = serializer.save()
        logger.info('Course %s updated by %s', course.pk, self.request.user.pk)

    def perform_destroy(self, instance):
        delete_from_bucket(instance.thumbnail_url, COURSE_THUMBNAILS_BUCKET)
        logger.info('Course %s deleted by %s', instance.pk, self.request.user.pk)
        instance.delete()

    @action(detail=True, methods=['post'])
    def publish(self, request, pk=None):
        course = self.get_object()
        course.status = Course.STATUS_PUBLISHED
        course.save(update_fields=['status', 'updated_at'])
        logger.info('Course %s published', course.pk)
        return Response(CourseSerializer(course).data)

    @action(detail=True, methods=['post'])
    def archive(self, request, pk=None):
        """Hide the course from the catalog; enrolled students keep access"""
        course = self.get_object()
        course.status = Course.STATUS_ARCHIVED
        course.save(update_fields=['status', 'updated_at'])
        notify_enrolled_students(
            course,
            title='تمت أرشفة الكورس',
            message=f'تمت أرشفة الكورس "{course.title}" ولن يظهر في قائمة الكورسات',
            related_type='course',
            related_id=course.id,
        )
        logger.info('Course %s archived', course.pk)
        return Response(CourseSerializer(course).data)

    @action(detail=True, methods=['get'])
    def students(self, request, pk=None):
        """Students enrolled in this course with their progress"""
        course = self.get_object()
        enrollments = CourseEnrollment.objects.filter(course=course).select_related('student')
        return Response(CourseStudentSerializer(enrollments, many=True).data)

    @action(detail=True, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def thumbnail(self, request, pk=None):
        course = self.get_object()
        serializer = ThumbnailUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        previous = course.thumbnail_url
        course.thumbnail_url = upload_to_bucket(
            COURSE_THUMBNAILS_BUCKET, serializer.validated_data['thumbnail'], request=request
        )
        course.save(update_fields=['thumbnail_url', 'updated_at'])
        delete_from_bucket(previous, COURSE_THUMBNAILS_BUCKET)

        return Response({'thumbnail_url': course.thumbnail_url}, status=status.HTTP_201_CREATED)


class TeacherLessonViewSet(viewsets.ModelViewSet):
    """Lessons of courses the requesting user can edit. Filter with ?course=<id>."""
    permission_classes = [CanEditCourse]
    serializer_class = LessonSerializer

    def get_queryset(self):
        qs = Lesson.objects.select_related('course').order_by('course', 'order_index', 'created_at')
        if self.action == 'list':
            if not self.request.user.is_admin:
                qs = qs.filter(course__teacher=self.request.user)
            course_id = self.request.query_params.get('course')
            if course_id:
                qs = qs.filter(course_id=course_id)
        return qs

    def _check_course(self, course):
        if not can_edit_course(self.request.user, course):
            raise PermissionDenied('ليس لديك صلاحية لتعديل هذا الكورس')

    def perform_create(self, serializer):
        course = serializer.validated_data['course']
        self._check_course(course)

        lesson = serializer.save()
        CourseStatsService.update_course_stats(course)

        if course.is_published:
            notify_enrolled_students(
                course,
                title='درس جديد',
                message=f'تمت إضافة الدرس "{lesson.title}" إلى الكورس "{course.title}"',
                related_type='lesson',
                related_id=lesson.id,
            )
        logger.info('Lesson %s added to course %s', lesson.pk, course.pk)

    def perform_update(self, serializer):
        previous_course = serializer.instance.course
        target_course = serializer.validated_data.get('course', previous_course)
        if target_course.pk != previous_course.pk:
            self._check_course(target_course)

        lesson = serializer.save()
        CourseStatsService.update_course_stats(lesson.course)
        if target_course.pk != previous_course.pk:
            CourseStatsService.update_course_stats(previous_course)

    def perform_destroy(self, instance):
        course = instance.course
        delete_from_bucket(instance.video_url, LESSON_VIDEOS_BUCKET)
        instance.delete()
        CourseStatsService.update_course_stats(course)
        logger.info('Lesson %s removed from course %s', instance.pk, course.pk)

    @action(detail=True, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def video(self, request, pk=None):
        """Upload the lesson video to the lesson-videos bucket"""
        lesson = self.get_object()
        serializer = VideoUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        previous = lesson.video_url
        lesson.video_url = upload_to_bucket(LESSON_VIDEOS_BUCKET, serializer.validated_data['video'], request=request)
        lesson.save(update_fields=['video_url', 'updated_at'])
        delete_from_bucket(previous, LESSON_VIDEOS_BUCKET)

        return Response({'video_url': lesson.video_url}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsTeacher])
def dashboard_stats(request):
    """Headline numbers plus the teacher's latest courses"""
    data = AnalyticsService.dashboard_stats(Role.TEACHER, request.user)
    recent = Course.objects.filter(teacher=request.user).order_by('-created_at')[:5]
    data['recent_courses'] = CourseSerializer(recent, many=True).data
    return Response(data)


@api_view(['GET'])
@permission_classes([IsTeacher])
def analytics(request):
    """?range=week|month|year (default month)"""
    range_name = request.query_params.get('range', 'month')
    return Response(AnalyticsService.teacher_analytics(request.user, range_name))


@api_view(['GET'])
@permission_classes([IsTeacher])
def students(request):
    """Every student enrolled in any of the teacher's courses"""
    rows = (
        CourseEnrollment.objects.filter(course__teacher=request.user)
        .values('student_id', 'student__name', 'student__email', 'student__avatar_url')
        .annotate(
            courses=Count('course', distinct=True),
            average_progress=Avg('progress'),
            last_enrolled_at=Max('enrolled_at'),
        )
        .order_by('-last_enrolled_at')
    )
    return Response([
        {
            'id': str(row['student_id']),
            'name': row['student__name'],
            'email': row['student__email'],
            'avatar_url': row['student__avatar_url'],
            'courses': row['courses'],
            'average_progress': round(row['average_progress'] or 0),
            'last_enrolled_at': row['last_enrolled_at'],
        }
        for row in rows
    ])


class NotificationViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):
    """The current user's notifications, newest first"""
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Notification.objects.filter(user=self.request.user).order_by('-created_at')
        if self.request.query_params.get('unread') in ('1', 'true'):
            qs = qs.filter(is_read=False)
        return qs

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        count = Notification.objects.filter(user=request.user, is_read=False).count()
        return Response({'unread_count': count})

    @action(detail=True, methods=['post'], url_path='read')
    def mark_as_read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_as_read()
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def mark_all_as_read(self, request):
        updated = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
        return Response({'updated': updated})
