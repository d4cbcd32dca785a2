"""
Analytics Service - server-side aggregations behind the admin and teacher dashboards
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone

from academy.exceptions import ValidationFailed
from teacher.models import Course, CourseEnrollment, Lesson, LessonProgress
from .models import Payment, Role, UserProfile

logger = logging.getLogger(__name__)

RANGE_DAYS = {
    'week': 7,
    'month': 30,
    'year': 365,
}


def _month_start(moment):
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _previous_month_start(month_start):
    return _month_start(month_start - timedelta(days=1))


def _growth(current, previous):
    """Percentage change, one decimal"""
    if not previous:
        return 100.0 if current else 0.0
    return round((current - previous) / previous * 100, 1)


def _money(value):
    return float(value or Decimal('0'))


class AnalyticsService:
    """Aggregate queries for dashboards"""

    @staticmethod
    def dashboard_stats(role, user=None):
        """Headline numbers for one role's dashboard"""
        role = Role(role)
        handlers = {
            Role.ADMIN: lambda: AnalyticsService._admin_dashboard(),
            Role.TEACHER: lambda: AnalyticsService._teacher_dashboard(user),
            Role.STUDENT: lambda: AnalyticsService._student_dashboard(user),
        }
        return handlers[role]()

    @staticmethod
    def _admin_dashboard():
        users = UserProfile.objects.aggregate(
            total=Count('id'),
            students=Count('id', filter=Q(role=Role.STUDENT)),
            teachers=Count('id', filter=Q(role=Role.TEACHER)),
            admins=Count('id', filter=Q(role=Role.ADMIN)),
        )
        courses = Course.objects.aggregate(
            total=Count('id'),
            published=Count('id', filter=Q(status=Course.STATUS_PUBLISHED)),
            drafts=Count('id', filter=Q(status=Course.STATUS_DRAFT)),
        )
        payments = Payment.objects.aggregate(
            revenue=Sum('amount', filter=Q(status=Payment.STATUS_COMPLETED)),
            pending=Count('id', filter=Q(status=Payment.STATUS_PENDING)),
        )
        return {
            'total_users': users['total'],
            'total_students': users['students'],
            'total_teachers': users['teachers'],
            'total_admins': users['admins'],
            'total_courses': courses['total'],
            'published_courses': courses['published'],
            'draft_courses': courses['drafts'],
            'total_enrollments': CourseEnrollment.objects.count(),
            'total_revenue': _money(payments['revenue']),
            'pending_payments': payments['pending'],
        }

    @staticmethod
    def _teacher_dashboard(teacher):
        courses = Course.objects.filter(teacher=teacher)
        enrollments = CourseEnrollment.objects.filter(course__teacher=teacher)

        course_totals = courses.aggregate(
            total=Count('id'),
            published=Count('id', filter=Q(status=Course.STATUS_PUBLISHED)),
        )
        revenue = Payment.objects.filter(
            course__teacher=teacher, status=Payment.STATUS_COMPLETED
        ).aggregate(total=Sum('amount'))['total']

        return {
            'total_courses': course_totals['total'],
            'published_courses': course_totals['published'],
            'total_lessons': Lesson.objects.filter(course__teacher=teacher).count(),
            'total_students': enrollments.values('student').distinct().count(),
            'total_enrollments': enrollments.count(),
            'average_progress': round(enrollments.aggregate(avg=Avg('progress'))['avg'] or 0),
            'total_revenue': _money(revenue),
        }

    @staticmethod
    def _student_dashboard(student):
        enrollments = CourseEnrollment.objects.filter(student=student)
        progress = LessonProgress.objects.filter(student=student).aggregate(
            completed=Count('id', filter=Q(is_completed=True)),
            watch_seconds=Sum('watch_time_seconds'),
        )
        return {
            'enrolled_courses': enrollments.count(),
            'completed_courses': enrollments.filter(completed_at__isnull=False).count(),
            'completed_lessons': progress['completed'],
            'watch_time_minutes': round((progress['watch_seconds'] or 0) / 60),
            'average_progress': round(enrollments.aggregate(avg=Avg('progress'))['avg'] or 0),
        }

    @staticmethod
    def user_growth_stats(now=None):
        now = now or timezone.now()
        this_month = _month_start(now)
        last_month = _previous_month_start(this_month)

        current = UserProfile.objects.filter(created_at__gte=this_month).count()
        previous = UserProfile.objects.filter(created_at__gte=last_month, created_at__lt=this_month).count()

        return {
            'total_users': UserProfile.objects.count(),
            'this_month': current,
            'last_month': previous,
            'growth_percentage': _growth(current, previous),
        }

    @staticmethod
    def course_performance_stats(now=None, limit=5):
        now = now or timezone.now()
        this_month = _month_start(now)
        last_month = _previous_month_start(this_month)

        current = Course.objects.filter(created_at__gte=this_month).count()
        previous = Course.objects.filter(created_at__gte=last_month, created_at__lt=this_month).count()

        top_courses = (
            Course.objects.annotate(students=Count('enrollments'))
            .order_by('-students', '-created_at')[:limit]
        )

        return {
            'total_courses': Course.objects.count(),
            'this_month': current,
            'last_month': previous,
            'growth_percentage': _growth(current, previous),
            'top_courses': [
                {
                    'id': str(course.id),
                    'title': course.title,
                    'teacher_id': str(course.teacher_id),
                    'students': course.students,
                    'status': course.status,
                }
                for course in top_courses
            ],
        }

    @staticmethod
    def payment_stats(now=None, months=6):
        """Totals per status and a monthly revenue series, oldest month first"""
        now = now or timezone.now()

        by_status = {
            row['status']: {'count': row['count'], 'amount': _money(row['amount'])}
            for row in Payment.objects.order_by().values('status').annotate(count=Count('id'), amount=Sum('amount'))
        }
        for code, _ in Payment.STATUS_CHOICES:
            by_status.setdefault(code, {'count': 0, 'amount': 0.0})

        completed = Payment.objects.filter(status=Payment.STATUS_COMPLETED)

        starts = [_month_start(now)]
        for _ in range(months - 1):
            starts.append(_previous_month_start(starts[-1]))
        starts.reverse()

        monthly = []
        for index, start in enumerate(starts):
            end = starts[index + 1] if index + 1 < len(starts) else None
            qs = completed.filter(created_at__gte=start)
            if end is not None:
                qs = qs.filter(created_at__lt=end)
            monthly.append({
                'month': start.strftime('%Y-%m'),
                'revenue': _money(qs.aggregate(total=Sum('amount'))['total']),
            })

        return {
            'total_payments': sum(entry['count'] for entry in by_status.values()),
            'total_revenue': by_status[Payment.STATUS_COMPLETED]['amount'],
            'by_status': by_status,
            'monthly_revenue': monthly,
        }

    @staticmethod
    def teacher_analytics(teacher, range_name='month', now=None):
        """Revenue/student figures for one teacher over a week, month or year window"""
        if range_name not in RANGE_DAYS:
            raise ValidationFailed(f"range must be one of: {', '.join(RANGE_DAYS)}")

        now = now or timezone.now()
        window = timedelta(days=RANGE_DAYS[range_name])
        start, previous_start = now - window, now - 2 * window

        payments = Payment.objects.filter(course__teacher=teacher, status=Payment.STATUS_COMPLETED)
        enrollments = CourseEnrollment.objects.filter(course__teacher=teacher)

        def revenue(qs):
            return _money(qs.aggregate(total=Sum('amount'))['total'])

        period_revenue = revenue(payments.filter(created_at__gte=start))
        previous_revenue = revenue(payments.filter(created_at__gte=previous_start, created_at__lt=start))
        period_enrollments = enrollments.filter(enrolled_at__gte=start).count()
        previous_enrollments = enrollments.filter(enrolled_at__gte=previous_start, enrolled_at__lt=start).count()

        active_students = (
            LessonProgress.objects.filter(lesson__course__teacher=teacher, updated_at__gte=start)
            .values('student').distinct().count()
        )

        top = (
            Course.objects.filter(teacher=teacher)
            .annotate(students=Count('enrollments'))
            .order_by('-students', '-created_at')
            .first()
        )

        return {
            'range': range_name,
            'total_revenue': revenue(payments),
            'period_revenue': period_revenue,
            'revenue_growth': _growth(period_revenue, previous_revenue),
            'total_students': enrollments.values('student').distinct().count(),
            'active_students': active_students,
            'recent_enrollments': period_enrollments,
            'student_growth': _growth(period_enrollments, previous_enrollments),
            'total_courses': Course.objects.filter(teacher=teacher).count(),
            'completed_courses': enrollments.filter(completed_at__isnull=False).count(),
            'average_completion_rate': round(enrollments.aggregate(avg=Avg('progress'))['avg'] or 0),
            'top_performing_course': {
                'id': str(top.id),
                'title': top.title,
                'students': top.students,
                'revenue': revenue(payments.filter(course=top)),
            } if top is not None else None,
        }
