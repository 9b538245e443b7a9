from rest_framework import permissions


class IsStoreAdmin(permissions.BasePermission):
    """
    Bearer token issued by /api/admin/login/ for the staff user that mirrors
    the static ADMIN_USERNAME credentials.
    """

    message = "Admin token required."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and user.is_staff)


ADMIN_PERMISSIONS = [permissions.IsAuthenticated, IsStoreAdmin]
