"""
Course catalog accessor - course, ordered lessons and published-course search
"""
import logging

from django.core.exceptions import ValidationError
from django.db.models import Q

from teacher.models import Course, Lesson

logger = logging.getLogger(__name__)


def get_course(course_id):
    """Single course with its teacher joined, or None"""
    try:
        return Course.objects.select_related('teacher').get(id=course_id)
    except (Course.DoesNotExist, ValidationError, ValueError):
        return None


def get_course_lessons(course_id):
    """Lessons of a course ordered by order_index"""
    return list(
        Lesson.objects.filter(course_id=course_id).order_by('order_index', 'created_at')
    )


def get_lesson_with_neighbours(course_id, lesson_id):
    """
    Return (lesson, previous_lesson, next_lesson) within the course order.
    lesson is None when it does not belong to the course.
    """
    lessons = get_course_lessons(course_id)
    for index, lesson in enumerate(lessons):
        if str(lesson.id) == str(lesson_id):
            prev_lesson = lessons[index - 1] if index > 0 else None
            next_lesson = lessons[index + 1] if index < len(lessons) - 1 else None
            return lesson, prev_lesson, next_lesson
    return None, None, None


def get_published_courses():
    return Course.objects.filter(status=Course.STATUS_PUBLISHED).select_related('teacher').order_by('-created_at')


def get_courses_by_teacher(teacher_id):
    return Course.objects.filter(teacher_id=teacher_id).order_by('-created_at')


def search_published_courses(query='', category=None, level=None):
    """Case-insensitive match on title, description or category"""
    qs = get_published_courses()

    query = (query or '').strip()
    if query:
        qs = qs.filter(
            Q(title__icontains=query) |
            Q(description__icontains=query) |
            Q(category__icontains=query)
        )
    if category:
        qs = qs.filter(category__iexact=category)
    if level:
        qs = qs.filter(level=level)

    logger.debug('Catalog search q=%r category=%r level=%r', query, category, level)
    return qs
