"""
Student dashboard endpoint
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from admin.analytics import AnalyticsService
from admin.models import Role
from teacher.permissions import IsStudent
from ..serializers.enrollment import EnrollmentSerializer
from .enrollment import get_student_enrollments


@api_view(['GET'])
@permission_classes([IsStudent])
def dashboard(request):
    """Learning totals plus the three most recent enrollments"""
    data = AnalyticsService.dashboard_stats(Role.STUDENT, request.user)
    recent = get_student_enrollments(request.user)[:3]
    data['recent_courses'] = EnrollmentSerializer(recent, many=True).data
    return Response(data)
