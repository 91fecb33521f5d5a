"""DRF permissions based on the agency role of the user."""
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Admins (role ``admin``) and superusers only."""

    message = "Solo un administrador puede realizar esta acción."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)


class IsSalesTeam(BasePermission):
    """Setters, closers and admins: the people who work the pipeline."""

    message = "Solo el equipo de ventas puede operar el pipeline."
    roles = ("setter", "closer", "admin")

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_admin or user.role in self.roles
