"""
Custom permission classes for role and approval based access control.
"""
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Allow access only to users with the administrator role."""
    message = 'Administrator role required.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == "admin")


class IsActiveAccount(BasePermission):
    """Approved accounts only; pending users may sign in but not work."""
    message = 'Your account is awaiting administrator approval.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "status", None) == "active")
