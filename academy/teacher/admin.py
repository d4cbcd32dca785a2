from django.contrib import admin
from .models import Course, CourseEnrollment, Lesson, LessonProgress, Notification


class LessonInline(admin.TabularInline):
    model = Lesson
    fields = ('order_index', 'title', 'duration_minutes', 'is_free')
    extra = 0


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('title', 'teacher', 'status', 'price', 'total_lessons', 'enrollment_count', 'created_at')
    list_filter = ('status', 'level', 'is_free')
    search_fields = ('title', 'category', 'teacher__email')
    readonly_fields = ('duration_hours', 'total_lessons', 'enrollment_count')
    inlines = [LessonInline]


@admin.register(CourseEnrollment)
class CourseEnrollmentAdmin(admin.ModelAdmin):
    list_display = ('course', 'student', 'progress', 'enrolled_at', 'completed_at')
    search_fields = ('course__title', 'student__email')


@admin.register(LessonProgress)
class LessonProgressAdmin(admin.ModelAdmin):
    list_display = ('lesson', 'student', 'is_completed', 'watch_time_seconds', 'completed_at')
    list_filter = ('is_completed',)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('title', 'user', 'type', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')
