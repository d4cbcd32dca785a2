"""
Teacher app serializers - courses, lessons, enrollments and notifications
"""
from rest_framework import serializers

from .models import Course, CourseEnrollment, Lesson, Notification


class LessonSerializer(serializers.ModelSerializer):
    course_id = serializers.PrimaryKeyRelatedField(source='course', queryset=Course.objects.all())

    class Meta:
        model = Lesson
        fields = [
            'id', 'course_id', 'title', 'description', 'content', 'video_url',
            'duration_minutes', 'order_index', 'is_free', 'resources_urls',
            'created_at', 'updated_at',
        ]
        # Set through the video upload action only
        read_only_fields = ['id', 'video_url', 'created_at', 'updated_at']

    def validate_duration_minutes(self, value):
        if value < 0:
            raise serializers.ValidationError('مدة الدرس لا يمكن أن تكون سالبة')
        return value

    def validate_resources_urls(self, value):
        if not isinstance(value, list) or not all(isinstance(url, str) for url in value):
            raise serializers.ValidationError('resources_urls must be a list of URLs')
        return value


class LessonSummarySerializer(serializers.ModelSerializer):
    """Lesson row without body content, used in course listings"""

    class Meta:
        model = Lesson
        fields = ['id', 'title', 'duration_minutes', 'order_index', 'is_free']


class CourseSerializer(serializers.ModelSerializer):
    teacher_id = serializers.UUIDField(read_only=True)
    teacher_name = serializers.CharField(source='teacher.name', read_only=True)

    class Meta:
        model = Course
        fields = [
            'id', 'teacher_id', 'teacher_name', 'title', 'description', 'thumbnail_url',
            'price', 'level', 'category', 'language', 'status', 'is_free',
            'duration_hours', 'total_lessons', 'enrollment_count', 'rating',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'thumbnail_url', 'status', 'duration_hours', 'total_lessons',
            'enrollment_count', 'rating', 'created_at', 'updated_at',
        ]

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('عنوان الكورس مطلوب')
        return value

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError('السعر لا يمكن أن يكون سالبًا')
        return value


class CourseDetailSerializer(CourseSerializer):
    lessons = serializers.SerializerMethodField()

    class Meta(CourseSerializer.Meta):
        fields = CourseSerializer.Meta.fields + ['lessons']

    def get_lessons(self, obj):
        lessons = obj.lessons.order_by('order_index', 'created_at')
        return LessonSummarySerializer(lessons, many=True).data


class AdminCourseSerializer(CourseSerializer):
    """Admin moderation may edit the status directly"""

    class Meta(CourseSerializer.Meta):
        read_only_fields = [f for f in CourseSerializer.Meta.read_only_fields if f != 'status']


class CourseStudentSerializer(serializers.ModelSerializer):
    """Enrollment row as seen by the course owner"""
    student_id = serializers.UUIDField(read_only=True)
    student_name = serializers.CharField(source='student.name', read_only=True)
    student_email = serializers.EmailField(source='student.email', read_only=True)
    avatar_url = serializers.CharField(source='student.avatar_url', read_only=True)

    class Meta:
        model = CourseEnrollment
        fields = [
            'id', 'student_id', 'student_name', 'student_email', 'avatar_url',
            'enrolled_at', 'progress', 'completed_at',
        ]


class ThumbnailUploadSerializer(serializers.Serializer):
    thumbnail = serializers.ImageField()


class VideoUploadSerializer(serializers.Serializer):
    video = serializers.FileField()


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'title', 'message', 'type', 'related_type', 'related_id', 'is_read', 'created_at']
        read_only_fields = fields
