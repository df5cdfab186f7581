from rest_framework import permissions


class IsAdminUser(permissions.BasePermission):
    """
    Permission to check if user holds the admin role
    """
    message = "You must be an admin to access this resource."

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.is_admin
        )


class IsAdminOrProjectManager(permissions.BasePermission):
    """
    Permission for admin or project manager access
    """
    message = "You must be an admin or project manager to access this resource."

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            (request.user.is_admin or request.user.is_project_manager)
        )
