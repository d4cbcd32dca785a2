"""
Serializers for lesson progress
"""
from rest_framework import serializers

from teacher.models import LessonProgress


class LessonProgressSerializer(serializers.ModelSerializer):
    lesson_id = serializers.UUIDField(read_only=True)
    state = serializers.CharField(read_only=True)

    class Meta:
        model = LessonProgress
        fields = ['id', 'lesson_id', 'is_completed', 'watch_time_seconds', 'completed_at', 'state', 'updated_at']
        read_only_fields = fields


class WatchTimeSerializer(serializers.Serializer):
    seconds = serializers.IntegerField(min_value=0)
