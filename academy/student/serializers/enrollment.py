"""
Serializers for student enrollments and payments
"""
from rest_framework import serializers

from teacher.models import CourseEnrollment
from teacher.serializers import CourseSerializer


class EnrollmentSerializer(serializers.ModelSerializer):
    course = CourseSerializer(read_only=True)

    class Meta:
        model = CourseEnrollment
        fields = ['id', 'course', 'enrolled_at', 'progress', 'completed_at', 'certificate_url']
        read_only_fields = fields
