from django.contrib.auth import get_user_model

from .models import Notification

User = get_user_model()


def notify(user, type, title, message):
    """Create a notification addressed to ``user``."""
    return Notification.objects.create(user=user, type=type, title=title, message=message)


def notify_admins(type, title, message, exclude=None):
    admins = User.objects.filter(role=User.ROLE_ADMIN, status=User.STATUS_ACTIVE)
    if exclude is not None:
        admins = admins.exclude(pk=exclude.pk)
    return Notification.objects.bulk_create([
        Notification(user=admin, type=type, title=title, message=message)
        for admin in admins
    ])
