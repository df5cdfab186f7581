from django.db import models
from django.conf import settings


class ActivityLog(models.Model):
    """Track all admin actions for audit trail"""
    ACTION_TYPES = [
        ('user_update', 'User Updated'),
        ('user_delete', 'User Deleted'),
        ('user_suspend', 'User Suspended'),
        ('user_activate', 'User Activated'),
        ('project_create', 'Project Created'),
        ('project_delete', 'Project Deleted'),
        ('member_add', 'Project Member Added'),
        ('member_remove', 'Project Member Removed'),
        ('task_delete', 'Task Deleted'),
        ('timelog_approve', 'Time Log Approved'),
        ('timelog_reject', 'Time Log Rejected'),
        ('timelog_delete', 'Time Log Deleted'),
    ]

    admin_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='admin_actions',
        db_index=True
    )
    action = models.CharField(max_length=50, choices=ACTION_TYPES, db_index=True)
    target_type = models.CharField(max_length=50, blank=True)  # 'user', 'project', 'task', 'time_log'
    target_id = models.IntegerField(null=True, blank=True, db_index=True)
    description = models.TextField()
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['admin_user', 'created_at'], name='admin_site__admin_u_6a1f0e_idx'),
            models.Index(fields=['action', 'created_at'], name='admin_site__action_3c9b2d_idx'),
            models.Index(fields=['target_type', 'target_id'], name='admin_site__target__8e4a71_idx'),
        ]

    def __str__(self):
        return f"{self.admin_user} - {self.action} at {self.created_at}"
