"""
Role based permissions
"""
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Allows access to authenticated users holding the admin role."""
    message = 'Admin access required'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_superuser or getattr(user, 'is_admin', False)
