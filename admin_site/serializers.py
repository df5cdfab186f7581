from rest_framework import serializers
from django.db.models import Sum

# Import models from other apps
from user.models import User

# Import admin models
from .models import ActivityLog


# ==================== USER SERIALIZERS ====================

class AdminUserListSerializer(serializers.ModelSerializer):
    """List view serializer for users in admin panel"""
    time_logs_count = serializers.IntegerField(read_only=True)
    assigned_tasks_count = serializers.IntegerField(read_only=True)
    managed_projects_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'full_name', 'role', 'status', 'last_login', 'created_at',
            'time_logs_count', 'assigned_tasks_count', 'managed_projects_count'
        ]
        read_only_fields = fields


class AdminUserDetailSerializer(serializers.ModelSerializer):
    """Detailed view serializer for individual user"""
    total_minutes_logged = serializers.SerializerMethodField()
    pending_time_logs = serializers.SerializerMethodField()
    projects = serializers.SerializerMethodField()
    managed_projects = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'email', 'full_name', 'role', 'status', 'last_login',
            'created_at', 'updated_at', 'total_minutes_logged',
            'pending_time_logs', 'projects', 'managed_projects'
        ]
        read_only_fields = fields

    def get_total_minutes_logged(self, obj):
        total = obj.time_logs.filter(duration_minutes__isnull=False).aggregate(
            total=Sum('duration_minutes')
        )['total']
        return total or 0

    def get_pending_time_logs(self, obj):
        return obj.time_logs.filter(approval_status='pending').count()

    def get_projects(self, obj):
        memberships = obj.project_memberships.select_related('project').order_by('-created_at')
        return [{
            'id': m.project.id,
            'name': m.project.name,
            'joined_at': m.created_at
        } for m in memberships]

    def get_managed_projects(self, obj):
        return [{'id': p.id, 'name': p.name, 'status': p.status} for p in obj.managed_projects.all()]


class AdminUserUpdateSerializer(serializers.ModelSerializer):
    """Serializer for updating a user's name, role and status"""
    class Meta:
        model = User
        fields = ['full_name', 'role', 'status']


# ==================== ACTIVITY LOG SERIALIZERS ====================

class ActivityLogSerializer(serializers.ModelSerializer):
    """Serializer for activity logs"""
    admin_email = serializers.EmailField(source='admin_user.email', read_only=True)
    admin_name = serializers.CharField(source='admin_user.full_name', read_only=True)

    class Meta:
        model = ActivityLog
        fields = [
            'id', 'admin_user', 'admin_email', 'admin_name',
            'action', 'target_type', 'target_id', 'description',
            'ip_address', 'created_at'
        ]
        read_only_fields = ['id', 'created_at']


class ActivityLogQuerySerializer(serializers.Serializer):
    """Filters for the activity log listing"""
    action = serializers.CharField(required=False)
    admin_id = serializers.IntegerField(required=False)
