"""
Course statistics service - recomputes the denormalized course counters
from the lessons and enrollments tables
"""
import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Count, Sum

from teacher.models import Course, CourseEnrollment, Lesson

logger = logging.getLogger(__name__)


class CourseStatsService:
    """Aggregate queries behind the courses table counters"""

    @staticmethod
    def get_course_stats(course):
        lesson_totals = Lesson.objects.filter(course=course).aggregate(
            lessons=Count('id'),
            minutes=Sum('duration_minutes'),
        )
        total_lessons = lesson_totals['lessons'] or 0
        total_minutes = lesson_totals['minutes'] or 0

        enrollments = CourseEnrollment.objects.filter(course=course)
        enrollment_count = enrollments.count()
        completed = enrollments.filter(completed_at__isnull=False).count()

        return {
            'total_lessons': total_lessons,
            'duration_hours': (Decimal(total_minutes) / 60).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP),
            'enrollment_count': enrollment_count,
            'completion_rate': round(completed / enrollment_count * 100) if enrollment_count else 0,
        }

    @staticmethod
    def update_course_stats(course):
        """Write the recomputed counters back to the course row"""
        stats = CourseStatsService.get_course_stats(course)

        Course.objects.filter(pk=course.pk).update(
            total_lessons=stats['total_lessons'],
            duration_hours=stats['duration_hours'],
            enrollment_count=stats['enrollment_count'],
        )
        course.total_lessons = stats['total_lessons']
        course.duration_hours = stats['duration_hours']
        course.enrollment_count = stats['enrollment_count']

        logger.debug('Course %s stats refreshed: %s', course.pk, stats)
        return stats
