from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from django.db.models import Count, Q

# Import models from other apps
from user.models import User

# Import admin models and utilities
from .models import ActivityLog
from .serializers import (
    AdminUserListSerializer, AdminUserDetailSerializer, AdminUserUpdateSerializer,
    ActivityLogSerializer, ActivityLogQuerySerializer
)
from .permissions import IsAdminUser
from .utils import log_admin_action


class StandardResultsSetPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# ==================== USER VIEWSET ====================

class AdminUserViewSet(mixins.ListModelMixin,
                       mixins.RetrieveModelMixin,
                       mixins.UpdateModelMixin,
                       mixins.DestroyModelMixin,
                       viewsets.GenericViewSet):
    """
    ViewSet for managing users from admin panel
    """
    permission_classes = [IsAuthenticated, IsAdminUser]
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        queryset = User.objects.annotate(
            time_logs_count=Count('time_logs', distinct=True),
            assigned_tasks_count=Count('assigned_tasks', distinct=True),
            managed_projects_count=Count('managed_projects', distinct=True)
        ).order_by('-created_at')

        # Filters
        role = self.request.query_params.get('role', None)
        status_filter = self.request.query_params.get('status', None)
        search = self.request.query_params.get('search', None)

        if role:
            queryset = queryset.filter(role=role)

        if status_filter:
            queryset = queryset.filter(status=status_filter)

        if search:
            queryset = queryset.filter(
                Q(email__icontains=search) | Q(full_name__icontains=search)
            )

        return queryset

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return AdminUserDetailSerializer
        elif self.action in ['update', 'partial_update']:
            return AdminUserUpdateSerializer
        return AdminUserListSerializer

    def _refuse_self(self, request, user, verb):
        if user.pk == request.user.pk:
            return Response(
                {'detail': f'You cannot {verb} your own account'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return None

    def update(self, request, *args, **kwargs):
        """Update a user; admins cannot demote or deactivate themselves"""
        user = self.get_object()
        if user.pk == request.user.pk:
            role = request.data.get('role', user.role)
            user_status = request.data.get('status', user.status)
            if role != User.ROLE_ADMIN or user_status != User.STATUS_ACTIVE:
                return self._refuse_self(request, user, 'demote or deactivate')
        return super().update(request, *args, **kwargs)

    def perform_update(self, serializer):
        previous = (serializer.instance.role, serializer.instance.status)
        user = serializer.save()

        log_admin_action(
            admin_user=self.request.user,
            action='user_update',
            target_type='user',
            target_id=user.id,
            description=(
                f"Updated user {user.email} "
                f"(role {previous[0]} -> {user.role}, status {previous[1]} -> {user.status})"
            ),
            request=self.request
        )

    def destroy(self, request, *args, **kwargs):
        """Delete user"""
        user = self.get_object()
        refused = self._refuse_self(request, user, 'delete')
        if refused:
            return refused

        # Log before deletion
        log_admin_action(
            admin_user=request.user,
            action='user_delete',
            target_type='user',
            target_id=user.id,
            description=f"Deleted user {user.email}",
            request=request
        )

        return super().destroy(request, *args, **kwargs)

    def _set_status(self, request, new_status, audit_action, verb, past):
        user = self.get_object()
        refused = self._refuse_self(request, user, verb)
        if refused:
            return refused

        user.status = new_status
        user.save(update_fields=['status', 'updated_at'])

        log_admin_action(
            admin_user=request.user,
            action=audit_action,
            target_type='user',
            target_id=user.id,
            description=f"{past.capitalize()} user {user.email}",
            request=request
        )

        return Response({
            'message': f'User {user.email} has been {past}',
            'user': AdminUserDetailSerializer(user).data
        })

    @action(detail=True, methods=['post'])
    def suspend(self, request, pk=None):
        """Suspend a user account"""
        return self._set_status(request, User.STATUS_INACTIVE, 'user_suspend', 'suspend', 'suspended')

    @action(detail=True, methods=['post'])
    def activate(self, request, pk=None):
        """Activate a suspended user account"""
        return self._set_status(request, User.STATUS_ACTIVE, 'user_activate', 'activate', 'activated')


# ==================== ACTIVITY LOG VIEWSET ====================

class AdminActivityLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for viewing activity logs
    """
    permission_classes = [IsAuthenticated, IsAdminUser]
    serializer_class = ActivityLogSerializer
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        queryset = ActivityLog.objects.select_related('admin_user').order_by('-created_at')

        # Filters
        query = ActivityLogQuerySerializer(
            data={k: v for k, v in self.request.query_params.items() if v}
        )
        query.is_valid(raise_exception=True)
        action = query.validated_data.get('action')
        admin_id = query.validated_data.get('admin_id')

        if action:
            queryset = queryset.filter(action=action)

        if admin_id is not None:
            queryset = queryset.filter(admin_user_id=admin_id)

        return queryset
