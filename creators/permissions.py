from rest_framework.permissions import BasePermission


class IsCreator(BasePermission):
    """Authenticated user with a creator profile."""

    message = "Creator account required."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and hasattr(user, "creator"))
