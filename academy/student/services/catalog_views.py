"""
Course catalog endpoints - published courses, course detail and the lesson page
"""
import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from academy.exceptions import NotFound, PermissionDenied
from admin.models import UserProfile
from teacher.permissions import can_view_course, can_view_lesson
from teacher.serializers import LessonSummarySerializer
from ..serializers.course import CatalogCourseDetailSerializer, CatalogCourseSerializer, LessonPageSerializer
from . import catalog
from .enrollment import is_enrolled

logger = logging.getLogger(__name__)


def _visible_course(request, course_id):
    course = catalog.get_course(course_id)
    if course is None:
        raise NotFound('الكورس غير موجود')
    if not can_view_course(request.user, course):
        raise NotFound('الكورس غير موجود')
    return course


@api_view(['GET'])
@permission_classes([AllowAny])
def course_list(request):
    """
    Published catalog

    Query params: q, category, level
    """
    courses = catalog.search_published_courses(
        query=request.query_params.get('q', ''),
        category=request.query_params.get('category') or None,
        level=request.query_params.get('level') or None,
    )
    return Response(CatalogCourseSerializer(courses, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def course_detail(request, course_id):
    course = _visible_course(request, course_id)

    enrolled = isinstance(request.user, UserProfile) and is_enrolled(course, request.user)
    serializer = CatalogCourseDetailSerializer(course, context={'is_enrolled': enrolled})
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([AllowAny])
def course_lessons(request, course_id):
    course = _visible_course(request, course_id)
    lessons = catalog.get_course_lessons(course.id)
    return Response(LessonSummarySerializer(lessons, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lesson_detail(request, course_id, lesson_id):
    """Lesson body plus previous/next navigation; paid lessons need enrollment"""
    course = _visible_course(request, course_id)

    lesson, previous_lesson, next_lesson = catalog.get_lesson_with_neighbours(course.id, lesson_id)
    if lesson is None:
        raise NotFound('الدرس غير موجود')
    if not can_view_lesson(request.user, lesson):
        raise PermissionDenied('يجب التسجيل في الكورس لمشاهدة هذا الدرس')

    serializer = LessonPageSerializer(lesson, context={
        'previous_lesson': previous_lesson,
        'next_lesson': next_lesson,
    })
    return Response(serializer.data)
