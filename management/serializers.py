from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.utils import timezone

from user.serializers import ProfileSimpleSerializer
from .aggregation import is_overdue
from .models import Project, ProjectMember, Task, TimeLog, Notification
from .policies import policy_for
from .timer import elapsed_seconds, format_hms

User = get_user_model()


def _request_user(serializer):
    request = serializer.context.get('request')
    if request and hasattr(request, 'user') and request.user.is_authenticated:
        return request.user
    return None


class ProjectSerializer(serializers.ModelSerializer):
    manager = ProfileSimpleSerializer(read_only=True)
    manager_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        source='manager',
        allow_null=True,
        required=False
    )
    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            'id', 'name', 'description', 'manager', 'manager_id',
            'start_date', 'end_date', 'status', 'member_count',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'manager', 'created_at', 'updated_at']

    def get_member_count(self, obj):
        return obj.members.count()

    def validate_name(self, value):
        """Ensure project name is not empty"""
        if not value or not value.strip():
            raise serializers.ValidationError("Project name cannot be empty")
        return value.strip()

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end < start:
            raise serializers.ValidationError({'end_date': "End date cannot be before start date"})
        return attrs


class ProjectMemberSerializer(serializers.ModelSerializer):
    user = ProfileSimpleSerializer(read_only=True)
    project_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = ProjectMember
        fields = ['id', 'project_id', 'user', 'created_at']
        read_only_fields = ['id', 'project_id', 'user', 'created_at']


class TaskSerializer(serializers.ModelSerializer):
    project_id = serializers.PrimaryKeyRelatedField(
        queryset=Project.objects.none(),  # Will be set in __init__
        source='project',
        allow_null=True,
        required=False
    )
    project_name = serializers.SerializerMethodField()
    assigned_to = ProfileSimpleSerializer(read_only=True)
    assigned_to_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        source='assigned_to',
        allow_null=True,
        required=False
    )
    created_by = ProfileSimpleSerializer(read_only=True)
    is_overdue = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = [
            'id', 'name', 'description', 'project_id', 'project_name',
            'assigned_to', 'assigned_to_id', 'status', 'start_date', 'end_date',
            'created_by', 'is_overdue', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        user = _request_user(self)
        if user is not None:
            # Only projects the caller can see may be referenced
            self.fields['project_id'].queryset = policy_for(Project).scope(user)

    def get_project_name(self, obj):
        return obj.project.name if obj.project_id else None

    def get_is_overdue(self, obj):
        return is_overdue(obj, timezone.localdate())

    def validate_name(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Task name cannot be empty")
        return value.strip()

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end < start:
            raise serializers.ValidationError({'end_date': "End date cannot be before start date"})
        return attrs


class TimeLogSerializer(serializers.ModelSerializer):
    user = ProfileSimpleSerializer(read_only=True)
    task_id = serializers.PrimaryKeyRelatedField(
        queryset=Task.objects.none(),  # Will be set in __init__
        source='task',
        required=False
    )
    task_name = serializers.CharField(source='task.name', read_only=True)
    project_id = serializers.IntegerField(read_only=True, allow_null=True)
    duration_display = serializers.SerializerMethodField()
    elapsed_seconds = serializers.SerializerMethodField()
    elapsed_display = serializers.SerializerMethodField()
    is_running = serializers.BooleanField(read_only=True)

    class Meta:
        model = TimeLog
        fields = [
            'id', 'user', 'task_id', 'task_name', 'project_id',
            'start_time', 'end_time', 'duration_minutes', 'duration_display',
            'elapsed_seconds', 'elapsed_display', 'is_running',
            'date', 'approval_status', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'user', 'project_id', 'duration_minutes',
            'approval_status', 'created_at', 'updated_at'
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        user = _request_user(self)
        if user is not None:
            self.fields['task_id'].queryset = policy_for(Task).scope(user)

    def get_duration_display(self, obj):
        """Format duration as 'Xh Ym' or 'Ym'"""
        if not obj.duration_minutes:
            return "0m"
        h, m = divmod(obj.duration_minutes, 60)
        return f"{h}h {m}m" if h > 0 else f"{m}m"

    def get_elapsed_seconds(self, obj):
        """Seconds on the clock for a running timer, recomputed per request"""
        return elapsed_seconds(obj)

    def get_elapsed_display(self, obj):
        return format_hms(elapsed_seconds(obj))

    def validate(self, attrs):
        # Stopped logs stay stopped; only the timer endpoints open a log
        if 'end_time' in attrs and attrs['end_time'] is None:
            if self.instance is None or self.instance.end_time is not None:
                raise serializers.ValidationError({'end_time': "A stopped time log cannot be reopened"})
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start and end and end <= start:
            raise serializers.ValidationError({'end_time': "End time must be after start time"})
        return attrs


class TimerStartSerializer(serializers.Serializer):
    task_id = serializers.PrimaryKeyRelatedField(queryset=Task.objects.none())

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        user = _request_user(self)
        if user is not None:
            self.fields['task_id'].queryset = policy_for(Task).scope(user)


class ManualEntrySerializer(TimerStartSerializer):
    """Input for a manual entry; any approval status sent along is ignored."""
    date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()

    def validate(self, attrs):
        if attrs['end_time'] <= attrs['start_time']:
            raise serializers.ValidationError({'end_time': "End time must be after start time"})
        return attrs


class NotificationSerializer(serializers.ModelSerializer):
    user_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        source='user',
        required=False
    )

    class Meta:
        model = Notification
        fields = ['id', 'user_id', 'title', 'message', 'type', 'read', 'created_at']
        read_only_fields = ['id', 'created_at']


class TaskQuerySerializer(serializers.Serializer):
    """List filters; ``project`` also takes 'personal', ``assigned_to`` also takes 'me'."""
    status = serializers.CharField(required=False)
    project = serializers.CharField(required=False)
    assigned_to = serializers.CharField(required=False)

    def _id_or(self, value, keyword):
        if value == keyword:
            return value
        try:
            return int(value)
        except ValueError:
            raise serializers.ValidationError(f"Expected an id or '{keyword}'")

    def validate_project(self, value):
        return self._id_or(value, 'personal')

    def validate_assigned_to(self, value):
        return self._id_or(value, 'me')


class TimeLogQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    approval_status = serializers.ChoiceField(choices=TimeLog.APPROVAL_CHOICES, required=False)
    user = serializers.IntegerField(required=False)


class CalendarQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=1, max_value=9999, required=False)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)
