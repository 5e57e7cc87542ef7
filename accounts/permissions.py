# accounts/permissions.py - Role based access for the API sections

from rest_framework.permissions import BasePermission

from .guards import is_role_allowed


class HasRole(BasePermission):
    """Allow authenticated users whose token role is in `allowed_roles`"""
    allowed_roles = ()
    message = 'You do not have permission to access this resource.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return is_role_allowed(user.role, self.allowed_roles)


class IsAdminOrTeacher(HasRole):
    allowed_roles = ('admin', 'teacher')


class IsStudent(HasRole):
    allowed_roles = ('student',)


class IsParent(HasRole):
    allowed_roles = ('parent',)
