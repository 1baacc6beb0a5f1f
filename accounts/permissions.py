from rest_framework import permissions


class IsAdminAuthor(permissions.BasePermission):
    """Signed-in user with the platform ``is_admin`` flag."""

    message = "Admin only"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "is_admin", False))
