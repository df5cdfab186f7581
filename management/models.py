# management/models.py
from django.db import models
from django.conf import settings
from django.db.models import Q
from django.utils import timezone


class Project(models.Model):
    STATUS_PLANNED = 'planned'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_PLANNED, 'Planned'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    name = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='managed_projects'
    )
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PLANNED)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class ProjectMember(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='project_memberships'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('project', 'user')

    def __str__(self):
        return f"{self.user.full_name} in {self.project.name}"


class Task(models.Model):
    STATUS_TO_DO = 'to_do'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_ON_HOLD = 'on_hold'
    STATUS_CHOICES = [
        (STATUS_TO_DO, 'To Do'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_ON_HOLD, 'On Hold'),
    ]

    name = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    # No project means a personal task
    project = models.ForeignKey(
        Project, null=True, blank=True,
        on_delete=models.CASCADE, related_name='tasks'
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='assigned_tasks'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_TO_DO, db_index=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_tasks'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.name


def compute_duration_minutes(start_time, end_time):
    """Whole minutes between two instants, or None while still running.

    Fractional seconds are dropped first, then minutes truncate toward zero,
    so 09:00:00 -> 09:01:30 is 1 minute.
    """
    if end_time is None or start_time is None:
        return None
    seconds = int((end_time - start_time).total_seconds())
    return int(seconds / 60)


class TimeLog(models.Model):
    APPROVAL_PENDING = 'pending'
    APPROVAL_APPROVED = 'approved'
    APPROVAL_REJECTED = 'rejected'
    APPROVAL_CHOICES = [
        (APPROVAL_PENDING, 'Pending'),
        (APPROVAL_APPROVED, 'Approved'),
        (APPROVAL_REJECTED, 'Rejected'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='time_logs'
    )
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='time_logs')
    project = models.ForeignKey(
        Project, null=True, blank=True,
        on_delete=models.CASCADE, related_name='time_logs'
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    duration_minutes = models.IntegerField(null=True, blank=True)
    date = models.DateField(db_index=True)
    approval_status = models.CharField(max_length=10, choices=APPROVAL_CHOICES, default=APPROVAL_APPROVED)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_time']
        constraints = [
            models.UniqueConstraint(
                fields=['user'],
                condition=Q(end_time__isnull=True),
                name='one_active_timer_per_user',
            ),
        ]

    def __str__(self):
        return f"{self.user.full_name}: {self.task.name} ({self.date})"

    @property
    def is_running(self):
        return self.end_time is None

    def save(self, *args, **kwargs):
        if self.task_id:
            self.project_id = self.task.project_id
        self.duration_minutes = compute_duration_minutes(self.start_time, self.end_time)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'project', 'duration_minutes'}
        super().save(*args, **kwargs)


class Notification(models.Model):
    TYPE_TASK_ASSIGNMENT = 'task_assignment'
    TYPE_DEADLINE_REMINDER = 'deadline_reminder'
    TYPE_STATUS_CHANGE = 'status_change'
    TYPE_APPROVAL_REQUEST = 'approval_request'
    TYPE_CHOICES = [
        (TYPE_TASK_ASSIGNMENT, 'Task Assignment'),
        (TYPE_DEADLINE_REMINDER, 'Deadline Reminder'),
        (TYPE_STATUS_CHANGE, 'Status Change'),
        (TYPE_APPROVAL_REQUEST, 'Approval Request'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    read = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.full_name}: {self.title}"
