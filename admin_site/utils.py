import logging

from .models import ActivityLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First hop of X-Forwarded-For, else the socket peer address"""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def log_admin_action(admin_user, action, target_type, target_id, description, request=None):
    """
    Record an admin action in the audit trail.

    Only callers holding the admin role are recorded. Shared code paths
    (a manager editing their own project, an owner deleting a pending log)
    pass through here too and are skipped.

    Args:
        admin_user: profile performing the action
        action: one of ActivityLog.ACTION_TYPES
        target_type: 'user', 'project', 'task', 'time_log', ...
        target_id: primary key of the target row
        description: human-readable summary
        request: optional request, for IP and user agent
    """
    if admin_user is None or not admin_user.is_admin:
        return None

    log_data = {
        'admin_user': admin_user,
        'action': action,
        'target_type': target_type,
        'target_id': target_id,
        'description': description,
    }

    if request is not None:
        log_data['ip_address'] = get_client_ip(request)
        log_data['user_agent'] = request.META.get('HTTP_USER_AGENT', '')[:500]

    logger.info("Admin %s: %s %s#%s", admin_user.pk, action, target_type, target_id)
    return ActivityLog.objects.create(**log_data)
