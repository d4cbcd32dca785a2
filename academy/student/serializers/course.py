"""
Serializers for the public course catalog and the lesson page
"""
from rest_framework import serializers

from teacher.models import Lesson
from teacher.serializers import CourseDetailSerializer, CourseSerializer, LessonSummarySerializer


class CatalogCourseSerializer(CourseSerializer):
    """Published course card"""

    class Meta(CourseSerializer.Meta):
        read_only_fields = CourseSerializer.Meta.fields


class CatalogCourseDetailSerializer(CourseDetailSerializer):
    is_enrolled = serializers.SerializerMethodField()

    class Meta(CourseDetailSerializer.Meta):
        fields = CourseDetailSerializer.Meta.fields + ['is_enrolled']

    def get_is_enrolled(self, obj):
        return self.context.get('is_enrolled', False)


class LessonPageSerializer(serializers.ModelSerializer):
    """A single lesson with its previous/next neighbours in course order"""
    course_id = serializers.UUIDField(read_only=True)
    previous_lesson = serializers.SerializerMethodField()
    next_lesson = serializers.SerializerMethodField()

    class Meta:
        model = Lesson
        fields = [
            'id', 'course_id', 'title', 'description', 'content', 'video_url',
            'duration_minutes', 'order_index', 'is_free', 'resources_urls',
            'previous_lesson', 'next_lesson',
        ]

    def _neighbour(self, key):
        lesson = self.context.get(key)
        return LessonSummarySerializer(lesson).data if lesson is not None else None

    def get_previous_lesson(self, obj):
        return self._neighbour('previous_lesson')

    def get_next_lesson(self, obj):
        return self._neighbour('next_lesson')
