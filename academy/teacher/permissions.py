"""
Teacher module permissions - role-based access control and course ownership

`can_edit_course`, `can_view_course` and `can_view_lesson` are the single source of truth for
ownership/visibility; the DRF permission classes below delegate to them.
"""
from rest_framework import permissions

from admin.models import Role, UserProfile
from .models import CourseEnrollment


def _role_of(user):
    if isinstance(user, UserProfile):
        return Role(user.role)
    return None


def _course_of(obj):
    if hasattr(obj, 'teacher_id'):
        return obj
    if hasattr(obj, 'course'):
        return obj.course
    return None


def can_edit_course(user, course):
    """Admins edit any course; teachers only the courses they own."""
    role = _role_of(user)
    if role is None or course is None:
        return False
    rules = {
        Role.ADMIN: lambda: True,
        Role.TEACHER: lambda: course.teacher_id == user.id,
        Role.STUDENT: lambda: False,
    }
    return rules[role]()


def can_view_course(user, course):
    """
    Published courses are public. Drafts and archived courses are visible to
    whoever can edit them; archived ones also to the students enrolled in them.
    """
    if course.is_published or can_edit_course(user, course):
        return True
    if course.status == course.STATUS_ARCHIVED and _role_of(user) is not None:
        return CourseEnrollment.objects.filter(course=course, student=user).exists()
    return False


def can_view_lesson(user, lesson):
    """Free lessons are open to any signed-in user; paid ones need enrollment."""
    role = _role_of(user)
    if role is None:
        return False
    if lesson.is_free or can_edit_course(user, lesson.course):
        return True
    rules = {
        Role.ADMIN: lambda: True,
        Role.TEACHER: lambda: False,
        Role.STUDENT: lambda: CourseEnrollment.objects.filter(course_id=lesson.course_id, student=user).exists(),
    }
    return rules[role]()


class HasRole(permissions.BasePermission):
    """Base class: request principal must hold one of `roles`"""
    roles = ()

    def has_permission(self, request, view):
        role = _role_of(request.user)
        return role is not None and role in self.roles


class IsAdmin(HasRole):
    """Only admins"""
    roles = (Role.ADMIN,)


class IsTeacher(HasRole):
    """Only teachers"""
    roles = (Role.TEACHER,)


class IsStudent(HasRole):
    """Only students"""
    roles = (Role.STUDENT,)


class CanEditCourse(permissions.BasePermission):
    """
    Teacher can only manage courses they created (and their lessons).
    Admin can manage any course.
    """
    message = 'ليس لديك صلاحية لتعديل هذا الكورس'

    def has_permission(self, request, view):
        role = _role_of(request.user)
        return role in (Role.TEACHER, Role.ADMIN)

    def has_object_permission(self, request, view, obj):
        return can_edit_course(request.user, _course_of(obj))
