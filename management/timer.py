"""Timer workflow: one running time log per user, plus manual entries.

A user is either idle (no time log with an open ``end_time``) or running
(exactly one). ``start_timer`` moves idle -> running, ``stop_timer`` moves
running -> idle. Manual entries never touch that state and always wait for
an admin decision.
"""
import logging
from datetime import datetime

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from .exceptions import InvalidTimeRange, NoActiveTimer, TimerAlreadyRunning
from .models import Notification, TimeLog
from .notifications import notify, notify_admins
from .policies import policy_for

User = get_user_model()

logger = logging.getLogger(__name__)


def active_timer(user):
    """Return the user's running time log, or None."""
    return TimeLog.objects.filter(user=user, end_time__isnull=True).select_related('task').first()


def elapsed_seconds(log, now=None):
    """Seconds since a running log started; None once it has stopped."""
    if log.end_time is not None:
        return None
    now = now or timezone.now()
    return max(0, int((now - log.start_time).total_seconds()))


def format_hms(total_seconds):
    if total_seconds is None:
        return None
    h, r = divmod(int(total_seconds), 3600)
    m, s = divmod(r, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def _check_insert(user, log):
    if not policy_for(TimeLog).can_insert(user, log):
        logger.warning("User %s may not log time on task %s", user.pk, log.task_id)
        raise PermissionDenied("You can only log time on tasks you created or are assigned to.")


def start_timer(user, task):
    """Open a new running time log on ``task``.

    The user row is locked for the duration of the check-and-insert, and the
    partial unique index on open logs catches anything that slips past it.
    """
    now = timezone.now()
    with transaction.atomic():
        User.objects.select_for_update().filter(pk=user.pk).first()

        if TimeLog.objects.filter(user=user, end_time__isnull=True).exists():
            raise TimerAlreadyRunning()

        log = TimeLog(
            user=user,
            task=task,
            start_time=now,
            end_time=None,
            date=timezone.localdate(now),
            approval_status=TimeLog.APPROVAL_APPROVED,
        )
        _check_insert(user, log)
        try:
            with transaction.atomic():
                log.save()
        except IntegrityError:
            raise TimerAlreadyRunning()

    logger.info("Timer %s started by user %s on task %s", log.pk, user.pk, task.pk)
    return log


def stop_timer(user):
    """Close the user's running time log; the duration is derived on save."""
    with transaction.atomic():
        log = (
            TimeLog.objects.select_for_update()
            .filter(user=user, end_time__isnull=True)
            .first()
        )
        if log is None:
            raise NoActiveTimer()
        log.end_time = timezone.now()
        log.save()

    logger.info("Timer %s stopped by user %s after %s min", log.pk, user.pk, log.duration_minutes)
    return log


def create_manual_entry(user, task, date, start_time, end_time):
    """Record a past interval. The entry is always ``pending`` approval."""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(date, start_time), tz)
    end = timezone.make_aware(datetime.combine(date, end_time), tz)
    if end <= start:
        raise InvalidTimeRange()

    log = TimeLog(
        user=user,
        task=task,
        start_time=start,
        end_time=end,
        date=date,
        approval_status=TimeLog.APPROVAL_PENDING,
    )
    _check_insert(user, log)
    with transaction.atomic():
        log.save()
        notify_admins(
            Notification.TYPE_APPROVAL_REQUEST,
            "Time entry awaiting approval",
            f"{user.full_name} logged {log.duration_minutes} min on "
            f"\"{task.name}\" for {date.isoformat()}.",
            exclude=user,
        )

    logger.info("Manual entry %s created by user %s (%s min)", log.pk, user.pk, log.duration_minutes)
    return log


def _decide(log, admin, approval_status):
    log.approval_status = approval_status
    log.save(update_fields=['approval_status', 'updated_at'])
    notify(
        log.user,
        Notification.TYPE_STATUS_CHANGE,
        f"Time entry {approval_status}",
        f"Your time entry on \"{log.task.name}\" for {log.date.isoformat()} "
        f"was {approval_status} by {admin.full_name}.",
    )
    logger.info("Time log %s %s by admin %s", log.pk, approval_status, admin.pk)
    return log


def approve(log, admin):
    return _decide(log, admin, TimeLog.APPROVAL_APPROVED)


def reject(log, admin):
    return _decide(log, admin, TimeLog.APPROVAL_REJECTED)
