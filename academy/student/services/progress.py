"""
Progress recorder - per-lesson completion and watch time for a student

A missing lesson_progress row means "not started". Rows only move forward:
completion is terminal and watch time never decreases.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from academy.exceptions import ValidationFailed
from teacher.models import CourseEnrollment, Lesson, LessonProgress

logger = logging.getLogger(__name__)

NOT_STARTED = 'not_started'
IN_PROGRESS = 'in_progress'
COMPLETED = 'completed'

PATCH_FIELDS = ('is_completed', 'watch_time_seconds', 'completed_at')


def _apply_patch(progress, patch):
    """Apply a forward-only patch in place. Returns the list of changed fields."""
    changed = []

    if patch.get('is_completed') and not progress.is_completed:
        progress.is_completed = True
        changed.append('is_completed')

    if progress.is_completed and progress.completed_at is None:
        progress.completed_at = patch.get('completed_at') or timezone.now()
        changed.append('completed_at')

    if patch.get('watch_time_seconds') is not None:
        seconds = int(patch['watch_time_seconds'])
        if seconds > progress.watch_time_seconds:
            progress.watch_time_seconds = seconds
            changed.append('watch_time_seconds')

    return changed


def _locked_upsert(lesson, student, patch):
    with transaction.atomic():
        progress = (
            LessonProgress.objects.select_for_update()
            .filter(lesson=lesson, student=student)
            .first()
        )
        if progress is None:
            progress = LessonProgress(lesson=lesson, student=student)
            _apply_patch(progress, patch)
            progress.save(force_insert=True)
            return progress

        changed = _apply_patch(progress, patch)
        if changed:
            progress.save(update_fields=changed + ['updated_at'])
        return progress


def get_lesson_progress(lesson, student):
    """Point lookup; None when the student has not started the lesson"""
    return LessonProgress.objects.filter(lesson=lesson, student=student).first()


def get_progress_state(progress):
    if progress is None:
        return NOT_STARTED
    return progress.state


def update_lesson_progress(lesson, student, **patch):
    """
    Insert-or-update the (lesson, student) progress row.

    Runs under a row lock; when a concurrent request inserted the row first
    the unique constraint fires and the patch is re-applied to the winner.
    """
    unknown = set(patch) - set(PATCH_FIELDS)
    if unknown:
        raise ValidationFailed(f"Unsupported progress fields: {', '.join(sorted(unknown))}")

    if patch.get('watch_time_seconds') is not None and int(patch['watch_time_seconds']) < 0:
        raise ValidationFailed('وقت المشاهدة غير صالح')

    try:
        return _locked_upsert(lesson, student, patch)
    except IntegrityError:
        logger.debug('Concurrent progress insert for lesson=%s student=%s, retrying', lesson.pk, student.pk)
        return _locked_upsert(lesson, student, patch)


def mark_lesson_completed(lesson, student):
    """Video-end transition. Idempotent; the first completed_at is kept."""
    already_completed = is_lesson_completed(lesson, student)
    progress = update_lesson_progress(lesson, student, is_completed=True)

    if not already_completed:
        logger.info('Student %s completed lesson %s', student.pk, lesson.pk)

    refresh_enrollment_progress(lesson.course, student)
    return progress


def record_watch_time(lesson, student, seconds):
    try:
        seconds = int(seconds)
    except (TypeError, ValueError):
        raise ValidationFailed('وقت المشاهدة غير صالح')
    return update_lesson_progress(lesson, student, watch_time_seconds=seconds)


def is_lesson_completed(lesson, student):
    return LessonProgress.objects.filter(lesson=lesson, student=student, is_completed=True).exists()


def get_course_progress_map(course, student):
    """All progress rows of a course for one student in a single query, keyed by lesson id"""
    rows = LessonProgress.objects.filter(lesson__course=course, student=student)
    return {row.lesson_id: row for row in rows}


def get_course_completion_percentage(course, student):
    total = Lesson.objects.filter(course=course).count()
    if total == 0:
        return 0
    completed = LessonProgress.objects.filter(
        lesson__course=course, student=student, is_completed=True
    ).count()
    return round(completed / total * 100)


def refresh_enrollment_progress(course, student):
    """Write the completion percentage to the enrollment row, if the student is enrolled"""
    enrollment = CourseEnrollment.objects.filter(course=course, student=student).first()
    if enrollment is None:
        return None

    percentage = get_course_completion_percentage(course, student)
    fields = []
    if enrollment.progress != percentage:
        enrollment.progress = percentage
        fields.append('progress')
    if percentage >= 100 and enrollment.completed_at is None:
        enrollment.completed_at = timezone.now()
        fields.append('completed_at')
        logger.info('Student %s completed course %s', student.pk, course.pk)

    if fields:
        enrollment.save(update_fields=fields)
    return enrollment
