# management/admin.py
from django.contrib import admin
from .models import Project, ProjectMember, Task, TimeLog, Notification


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('name', 'status', 'manager', 'start_date', 'end_date')
    list_filter = ('status',)
    search_fields = ('name', 'manager__email')


@admin.register(ProjectMember)
class ProjectMemberAdmin(admin.ModelAdmin):
    list_display = ('user', 'project', 'created_at')
    list_filter = ('project',)


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('name', 'project', 'assigned_to', 'status', 'end_date')
    list_filter = ('status', 'project')
    search_fields = ('name', 'assigned_to__email', 'created_by__email')


@admin.register(TimeLog)
class TimeLogAdmin(admin.ModelAdmin):
    list_display = ('user', 'task', 'date', 'start_time', 'end_time', 'duration_minutes', 'approval_status')
    list_filter = ('approval_status', 'date')
    search_fields = ('task__name', 'user__email')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'type', 'title', 'read', 'created_at')
    list_filter = ('type', 'read')
