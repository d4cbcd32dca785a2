"""
Teacher app models - courses, ordered lessons, enrollments and lesson progress
"""
from django.db import models
from django.utils import timezone
import uuid

from admin.models import UserProfile


class Course(models.Model):
    """Maps to the courses table. Owned by exactly one teacher."""

    LEVEL_CHOICES = [
        ('beginner', 'Beginner'),
        ('intermediate', 'Intermediate'),
        ('advanced', 'Advanced'),
    ]

    STATUS_DRAFT = 'draft'
    STATUS_PUBLISHED = 'published'
    STATUS_ARCHIVED = 'archived'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_PUBLISHED, 'Published'),
        (STATUS_ARCHIVED, 'Archived'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, db_column='id')
    teacher = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name='courses', db_column='teacher_id')
    title = models.CharField(max_length=500, db_column='title')
    description = models.TextField(blank=True, default='', db_column='description')
    thumbnail_url = models.TextField(blank=True, null=True, db_column='thumbnail_url')
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0, db_column='price')
    level = models.CharField(max_length=20, choices=LEVEL_CHOICES, default='beginner', db_column='level')
    category = models.CharField(max_length=100, blank=True, default='', db_column='category')
    language = models.CharField(max_length=10, default='ar', db_column='language')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_column='status')
    is_free = models.BooleanField(default=False, db_column='is_free')

    # Denormalized counters, recomputed by student.services.course_stats
    duration_hours = models.DecimalField(max_digits=6, decimal_places=1, default=0, db_column='duration_hours')
    total_lessons = models.IntegerField(default=0, db_column='total_lessons')
    enrollment_count = models.IntegerField(default=0, db_column='enrollment_count')
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0, db_column='rating')

    created_at = models.DateTimeField(default=timezone.now, db_column='created_at')
    updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

    class Meta:
        db_table = 'courses'
        managed = True
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def is_published(self):
        return self.status == self.STATUS_PUBLISHED


class Lesson(models.Model):
    """Maps to the lessons table. `order_index` is a sort key only."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, db_column='id')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='lessons', db_column='course_id')
    title = models.CharField(max_length=255, db_column='title')
    description = models.TextField(blank=True, default='', db_column='description')
    content = models.TextField(blank=True, default='', db_column='content')
    video_url = models.TextField(blank=True, null=True, db_column='video_url')
    duration_minutes = models.IntegerField(default=0, db_column='duration_minutes')
    order_index = models.IntegerField(default=0, db_column='order_index')
    is_free = models.BooleanField(default=False, db_column='is_free')
    resources_urls = models.JSONField(default=list, blank=True, db_column='resources_urls')
    created_at = models.DateTimeField(default=timezone.now, db_column='created_at')
    updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

    class Meta:
        db_table = 'lessons'
        managed = True
        ordering = ['course', 'order_index', 'created_at']

    def __str__(self):
        return self.title


class CourseEnrollment(models.Model):
    """Student enrollments in courses"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, db_column='id')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='enrollments', db_column='course_id')
    student = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name='enrollments', db_column='student_id')
    enrolled_at = models.DateTimeField(default=timezone.now, db_column='enrolled_at')
    progress = models.IntegerField(default=0, db_column='progress')
    completed_at = models.DateTimeField(blank=True, null=True, db_column='completed_at')
    certificate_url = models.TextField(blank=True, null=True, db_column='certificate_url')

    class Meta:
        db_table = 'course_enrollments'
        managed = True
        ordering = ['-enrolled_at']
        constraints = [
            models.UniqueConstraint(fields=['course', 'student'], name='uniq_enrollment_course_student'),
        ]

    def __str__(self):
        return f"{self.student.email} in {self.course.title}"


class LessonProgress(models.Model):
    """Track student progress per lesson"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, db_column='id')
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name='progress', db_column='lesson_id')
    student = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name='lesson_progress', db_column='student_id')
    is_completed = models.BooleanField(default=False, db_column='is_completed')
    watch_time_seconds = models.IntegerField(default=0, db_column='watch_time_seconds')
    completed_at = models.DateTimeField(blank=True, null=True, db_column='completed_at')
    created_at = models.DateTimeField(default=timezone.now, db_column='created_at')
    updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

    class Meta:
        db_table = 'lesson_progress'
        managed = True
        constraints = [
            models.UniqueConstraint(fields=['lesson', 'student'], name='uniq_progress_lesson_student'),
        ]

    @property
    def state(self):
        if self.is_completed:
            return 'completed'
        return 'in_progress'


class Notification(models.Model):
    """In-app notifications for users"""
    TYPE_CHOICES = [
        ('info', 'Info'),
        ('success', 'Success'),
        ('warning', 'Warning'),
        ('error', 'Error'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, db_column='id')
    user = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name='notifications', db_column='user_id')
    title = models.CharField(max_length=500, db_column='title')
    message = models.TextField(db_column='message')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='info', db_column='type')
    related_type = models.CharField(max_length=50, blank=True, null=True, db_column='related_type')
    related_id = models.CharField(max_length=64, blank=True, null=True, db_column='related_id')
    is_read = models.BooleanField(default=False, db_column='is_read')
    created_at = models.DateTimeField(default=timezone.now, db_column='created_at')

    class Meta:
        db_table = 'notifications'
        managed = True
        ordering = ['-created_at']

    def mark_as_read(self):
        """Mark notification as read"""
        if not self.is_read:
            self.is_read = True
            self.save(update_fields=['is_read'])
