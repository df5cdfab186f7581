# management/views.py
import logging
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from admin_site.permissions import IsAdminUser, IsAdminOrProjectManager
from admin_site.utils import log_admin_action
from user.serializers import ProfileSimpleSerializer
from . import aggregation, timer
from .mixins import PolicyScopedMixin
from .models import Project, ProjectMember, Task, TimeLog, Notification
from .navigation import items_for_role
from .notifications import notify
from .permissions import RowPolicy
from .policies import policy_for
from .serializers import (
    ProjectSerializer,
    ProjectMemberSerializer,
    TaskSerializer,
    TimeLogSerializer,
    TimerStartSerializer,
    ManualEntrySerializer,
    NotificationSerializer,
    CalendarQuerySerializer,
    TaskQuerySerializer,
    TimeLogQuerySerializer,
)

User = get_user_model()

logger = logging.getLogger(__name__)


def _parse_user_id(raw):
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError({'user_id': "Invalid user_id format"})


def _query_filters(serializer_class, request):
    """Validated list filters; blank parameters count as absent."""
    query = serializer_class(data={k: v for k, v in request.query_params.items() if v})
    query.is_valid(raise_exception=True)
    return query.validated_data


# PROJECT VIEWSET
class ProjectViewSet(PolicyScopedMixin, viewsets.ModelViewSet):
    queryset = Project.objects.all()
    serializer_class = ProjectSerializer

    def get_queryset(self):
        """Projects visible to the caller, optionally filtered by status"""
        queryset = super().get_queryset().select_related('manager')
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset

    def perform_create(self, serializer):
        project = self.create_with_policy(serializer)
        log_admin_action(
            admin_user=self.request.user,
            action='project_create',
            target_type='project',
            target_id=project.id,
            description=f"Created project {project.name}",
            request=self.request
        )

    def perform_destroy(self, instance):
        log_admin_action(
            admin_user=self.request.user,
            action='project_delete',
            target_type='project',
            target_id=instance.id,
            description=f"Deleted project {instance.name}",
            request=self.request
        )
        instance.delete()

    @action(detail=True, methods=['get'], url_path='members')
    def list_members(self, request, pk=None):
        """List the members of a project"""
        project = self.get_object()
        members = (
            policy_for(ProjectMember).scope(request.user)
            .filter(project=project)
            .select_related('user')
        )
        return Response(ProjectMemberSerializer(members, many=True).data)

    @action(detail=True, methods=['post'], url_path='add-member')
    def add_member(self, request, pk=None):
        """Add a user to the project"""
        project = self.get_object()
        user_id = _parse_user_id(request.data.get('user_id'))

        try:
            member_user = User.objects.get(pk=user_id)
        except User.DoesNotExist:
            return Response({'detail': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

        membership = ProjectMember(project=project, user=member_user)
        if not policy_for(ProjectMember).can_insert(request.user, membership):
            raise PermissionDenied("Only admins can add project members")

        if ProjectMember.objects.filter(project=project, user=member_user).exists():
            return Response(
                {'detail': 'User is already a project member'},
                status=status.HTTP_400_BAD_REQUEST
            )

        membership.save()
        log_admin_action(
            admin_user=request.user,
            action='member_add',
            target_type='project',
            target_id=project.id,
            description=f"Added {member_user.email} to project {project.name}",
            request=request
        )
        return Response(ProjectMemberSerializer(membership).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['delete'], url_path='remove-member')
    def remove_member(self, request, pk=None):
        """Remove a user from the project"""
        project = self.get_object()
        user_id = _parse_user_id(request.data.get('user_id') or request.query_params.get('user_id'))

        try:
            membership = ProjectMember.objects.get(project=project, user_id=user_id)
        except ProjectMember.DoesNotExist:
            return Response(
                {'detail': 'User is not a member of this project'},
                status=status.HTTP_404_NOT_FOUND
            )

        if not policy_for(ProjectMember).can_delete(request.user, membership):
            raise PermissionDenied("Only admins can remove project members")

        membership.delete()
        log_admin_action(
            admin_user=request.user,
            action='member_remove',
            target_type='project',
            target_id=project.id,
            description=f"Removed user {user_id} from project {project.name}",
            request=request
        )
        return Response({'detail': 'Member removed successfully'}, status=status.HTTP_200_OK)


# TASK VIEWSET
class TaskViewSet(PolicyScopedMixin, viewsets.ModelViewSet):
    queryset = Task.objects.all()
    serializer_class = TaskSerializer

    def get_queryset(self):
        """Tasks visible to the caller with optional status/project/assignee filters"""
        queryset = super().get_queryset().select_related('project', 'assigned_to', 'created_by')
        params = _query_filters(TaskQuerySerializer, self.request)

        status_filter = params.get('status')
        if status_filter and status_filter != 'all':
            queryset = queryset.filter(status=status_filter)

        project = params.get('project')
        if project == 'personal':
            queryset = queryset.filter(project__isnull=True)
        elif project is not None:
            queryset = queryset.filter(project_id=project)

        assigned_to = params.get('assigned_to')
        if assigned_to == 'me':
            queryset = queryset.filter(assigned_to=self.request.user)
        elif assigned_to is not None:
            queryset = queryset.filter(assigned_to_id=assigned_to)

        return queryset

    def _notify_assignee(self, task):
        assignee = task.assigned_to
        if assignee is None or assignee.pk == self.request.user.pk:
            return
        notify(
            assignee,
            Notification.TYPE_TASK_ASSIGNMENT,
            "New task assigned",
            f"{self.request.user.full_name} assigned you \"{task.name}\".",
        )

    def perform_create(self, serializer):
        task = self.create_with_policy(serializer, created_by=self.request.user)
        self._notify_assignee(task)

    def perform_update(self, serializer):
        previous_assignee = serializer.instance.assigned_to_id
        previous_status = serializer.instance.status
        task = self.update_with_policy(serializer)

        if task.assigned_to_id != previous_assignee:
            self._notify_assignee(task)
        if task.status != previous_status and task.created_by_id != self.request.user.pk:
            notify(
                task.created_by,
                Notification.TYPE_STATUS_CHANGE,
                "Task status changed",
                f"\"{task.name}\" moved from {previous_status} to {task.status}.",
            )

    def perform_destroy(self, instance):
        log_admin_action(
            admin_user=self.request.user,
            action='task_delete',
            target_type='task',
            target_id=instance.id,
            description=f"Deleted task {instance.name}",
            request=self.request
        )
        instance.delete()


# TIME LOG VIEWSET
class TimeLogViewSet(PolicyScopedMixin,
                     mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.UpdateModelMixin,
                     mixins.DestroyModelMixin,
                     viewsets.GenericViewSet):
    """
    Time logs are created only through ``start`` (timer) and ``manual``.
    """
    queryset = TimeLog.objects.all()
    serializer_class = TimeLogSerializer

    def get_queryset(self):
        queryset = super().get_queryset().select_related('task', 'user')
        params = _query_filters(TimeLogQuerySerializer, self.request)

        if 'date' in params:
            queryset = queryset.filter(date=params['date'])
        if 'approval_status' in params:
            queryset = queryset.filter(approval_status=params['approval_status'])
        if 'user' in params:
            queryset = queryset.filter(user_id=params['user'])
        elif not (self.request.user.is_admin or self.request.user.is_project_manager):
            queryset = queryset.filter(user=self.request.user)

        return queryset

    def _render(self, log, status_code=status.HTTP_200_OK):
        serializer = TimeLogSerializer(log, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)

    @action(detail=False, methods=['get'])
    def active(self, request):
        """Get the currently running timer if any"""
        log = timer.active_timer(request.user)
        if log is None:
            return Response({"detail": "No active timer"}, status=status.HTTP_404_NOT_FOUND)
        return self._render(log)

    @action(detail=False, methods=['post'])
    def start(self, request):
        """Start a timer on a task; rejected while another one is running"""
        serializer = TimerStartSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        log = timer.start_timer(request.user, serializer.validated_data['task_id'])
        return self._render(log, status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def stop(self, request):
        """Stop the currently running timer"""
        log = timer.stop_timer(request.user)
        return self._render(log)

    @action(detail=False, methods=['post'])
    def manual(self, request):
        """Submit a manual time entry for admin approval"""
        serializer = ManualEntrySerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        log = timer.create_manual_entry(
            request.user,
            data['task_id'],
            data['date'],
            data['start_time'],
            data['end_time'],
        )
        return self._render(log, status.HTTP_201_CREATED)

    def _review(self, request, decide, audit_action):
        log = self.get_object()
        if log.is_running:
            return Response(
                {"detail": "A running timer cannot be reviewed"},
                status=status.HTTP_400_BAD_REQUEST
            )
        with transaction.atomic():
            decide(log, request.user)
            log_admin_action(
                admin_user=request.user,
                action=audit_action,
                target_type='time_log',
                target_id=log.id,
                description=f"{log.approval_status.capitalize()} time log of {log.user.email} on {log.date}",
                request=request
            )
        return self._render(log)

    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated, IsAdminUser, RowPolicy])
    def approve(self, request, pk=None):
        return self._review(request, timer.approve, 'timelog_approve')

    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated, IsAdminUser, RowPolicy])
    def reject(self, request, pk=None):
        return self._review(request, timer.reject, 'timelog_reject')

    def perform_destroy(self, instance):
        log_admin_action(
            admin_user=self.request.user,
            action='timelog_delete',
            target_type='time_log',
            target_id=instance.id,
            description=f"Deleted time log of {instance.user.email} on {instance.date}",
            request=self.request
        )
        instance.delete()


# NOTIFICATION VIEWSET
class NotificationViewSet(PolicyScopedMixin, viewsets.ModelViewSet):
    queryset = Notification.objects.all()
    serializer_class = NotificationSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.request.query_params.get('unread') in ('1', 'true', 'True'):
            queryset = queryset.filter(read=False)
        return queryset

    def perform_create(self, serializer):
        """Default the recipient to the caller; admins may address anyone"""
        recipient = serializer.validated_data.get('user', self.request.user)
        self.create_with_policy(serializer, user=recipient)

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        """Mark one notification as read"""
        notification = self.get_object()
        notification.read = True
        notification.save(update_fields=['read'])
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        """Mark every unread notification of the caller as read"""
        updated = self.get_queryset().filter(read=False).update(read=True)
        return Response({"updated": updated})


# DASHBOARD VIEW
class DashboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        """Counters for the caller: own work unless admin, everything for admins"""
        user = request.user
        today = timezone.localdate()

        tasks = policy_for(Task).scope(user)
        projects = policy_for(Project).scope(user)
        time_logs = policy_for(TimeLog).scope(user).filter(date=today)
        if not user.is_admin:
            tasks = tasks.filter(Q(assigned_to=user) | Q(created_by=user))
            projects = projects.filter(manager=user)
            time_logs = time_logs.filter(user=user)

        stats = aggregation.dashboard_stats(
            tasks.only('id', 'status', 'end_date', 'project'),
            projects.count(),
            time_logs.only('id', 'date', 'duration_minutes'),
            today,
        )

        recent = (
            policy_for(Task).scope(user)
            .select_related('project', 'assigned_to', 'created_by')
            .order_by('-created_at')[:5]
        )
        stats['recent_tasks'] = TaskSerializer(recent, many=True, context={'request': request}).data
        return Response(stats)


# REPORTS VIEW
class ReportView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrProjectManager]

    def get(self, request):
        """Task distribution, project progress and team productivity"""
        user = request.user
        tasks = list(policy_for(Task).scope(user).only('id', 'status', 'project'))
        projects = list(policy_for(Project).scope(user).only('id', 'name'))
        time_logs = list(
            policy_for(TimeLog).scope(user).only('id', 'user', 'task', 'duration_minutes')
        )
        profiles = list(policy_for(User).scope(user).only('id', 'full_name'))

        return Response({
            "task_status": aggregation.task_status_distribution(tasks),
            "project_progress": aggregation.project_progress(projects, tasks),
            "total_hours": aggregation.total_hours(time_logs),
            "user_productivity": aggregation.user_productivity(profiles, time_logs),
        })


# CALENDAR VIEW
class CalendarView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        """Caller's tasks bucketed by due date for one month"""
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        today = timezone.localdate()
        year = query.validated_data.get('year', today.year)
        month = query.validated_data.get('month', today.month)

        first, last = aggregation.month_bounds(year, month)
        user = request.user
        tasks = (
            policy_for(Task).scope(user)
            .filter(Q(assigned_to=user) | Q(created_by=user))
            .filter(end_date__gte=first, end_date__lte=last)
            .select_related('project', 'assigned_to', 'created_by')
        )

        month_view = aggregation.calendar_month(tasks, year, month)
        context = {'request': request}
        return Response({
            "year": month_view['year'],
            "month": month_view['month'],
            "leading_blank_days": month_view['leading_blank_days'],
            "days": [
                {
                    "date": day.isoformat(),
                    "tasks": TaskSerializer(day_tasks, many=True, context=context).data,
                }
                for day, day_tasks in month_view['days'].items()
            ],
        })


# NAVIGATION VIEW
class NavigationView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        """Menu entries for the caller's role"""
        return Response({
            "role": request.user.role,
            "profile": ProfileSimpleSerializer(request.user).data,
            "items": items_for_role(request.user.role),
        })
