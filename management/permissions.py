from rest_framework import permissions

from .policies import policy_for


class RowPolicy(permissions.BasePermission):
    """
    Object-level gate backed by the table policy of the view's model.

    Reads are already limited by the policy scope in ``get_queryset``; this
    class checks the stored row before an update or delete reaches it.
    """
    message = "You do not have permission to modify this record."

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        policy = policy_for(type(obj))
        if request.method == 'DELETE':
            return policy.can_delete(request.user, obj)
        return policy.can_update(request.user, obj)
