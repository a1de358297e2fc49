from rest_framework.permissions import BasePermission, SAFE_METHODS


def user_can_edit(user) -> bool:
    """Admins and editors may write; everyone else is read-only"""
    if not user or not user.is_authenticated:
        return False
    return bool(user.is_superuser or getattr(user, "can_edit", False))


class IsEditor(BasePermission):
    """Only admin/editor users"""

    message = "Admin or editor role required."

    def has_permission(self, request, view):
        return user_can_edit(request.user)


class IsEditorOrReadOnly(BasePermission):
    """
    Public reads, admin/editor writes
    """

    message = "Admin or editor role required."

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return user_can_edit(request.user)
