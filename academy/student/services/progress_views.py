"""
Progress tracking endpoints for students
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from academy.exceptions import NotFound, PermissionDenied
from teacher.models import Course, Lesson
from teacher.permissions import can_view_course, can_view_lesson
from ..serializers.progress import LessonProgressSerializer, WatchTimeSerializer
from . import catalog, progress

logger = logging.getLogger(__name__)


def _lesson_for(request, lesson_id):
    lesson = get_object_or_404(Lesson.objects.select_related('course'), id=lesson_id)
    if not can_view_course(request.user, lesson.course):
        raise NotFound('الدرس غير موجود')
    if not can_view_lesson(request.user, lesson):
        raise PermissionDenied('يجب التسجيل في الكورس لمشاهدة هذا الدرس')
    return lesson


def _progress_payload(lesson_id, row):
    return {
        'lesson_id': str(lesson_id),
        'state': progress.get_progress_state(row),
        'progress': LessonProgressSerializer(row).data if row is not None else None,
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def course_progress(request, course_id):
    """Per-lesson state for the whole course, fetched in one query"""
    course = get_object_or_404(Course, id=course_id)
    lessons = catalog.get_course_lessons(course.id)
    rows = progress.get_course_progress_map(course, request.user)

    return Response({
        'course_id': str(course.id),
        'completion_percentage': progress.get_course_completion_percentage(course, request.user),
        'lessons': [_progress_payload(lesson.id, rows.get(lesson.id)) for lesson in lessons],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lesson_progress(request, lesson_id):
    lesson = get_object_or_404(Lesson, id=lesson_id)
    row = progress.get_lesson_progress(lesson, request.user)
    return Response(_progress_payload(lesson.id, row))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def complete_lesson(request, lesson_id):
    """Called when the lesson video reaches its end"""
    lesson = _lesson_for(request, lesson_id)
    row = progress.mark_lesson_completed(lesson, request.user)

    payload = _progress_payload(lesson.id, row)
    payload['completion_percentage'] = progress.get_course_completion_percentage(lesson.course, request.user)
    return Response(payload)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def watch_lesson(request, lesson_id):
    """Body: {"seconds": n} - furthest playback position reached"""
    lesson = _lesson_for(request, lesson_id)

    serializer = WatchTimeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    row = progress.record_watch_time(lesson, request.user, serializer.validated_data['seconds'])
    return Response(_progress_payload(lesson.id, row))
