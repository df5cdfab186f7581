"""Row-level access rules for every table.

Each policy answers the same five questions for a caller:

``scope(user)``
    queryset of rows the caller may read.
``can_insert(user, obj)``
    may the caller create ``obj`` (checked on the built row, before commit).
``can_update(user, obj)``
    may the caller touch the row as it is stored now.
``check_update(user, obj, previous)``
    is the row still acceptable after the caller's changes; ``previous`` maps
    field names to their stored values.
``can_delete(user, obj)``
    may the caller remove the row.

Views never re-implement these predicates; they go through ``policy_for``.
"""
from django.contrib.auth import get_user_model
from django.db.models import Q

from .models import Notification, Project, ProjectMember, Task, TimeLog

User = get_user_model()


def _manages(user, project_id):
    if project_id is None:
        return False
    return Project.objects.filter(pk=project_id, manager=user).exists()


def _member_of(user, project_id):
    if project_id is None:
        return False
    return ProjectMember.objects.filter(project_id=project_id, user=user).exists()


class BasePolicy:
    model = None

    def scope(self, user):
        raise NotImplementedError

    def can_read(self, user, obj):
        return self.scope(user).filter(pk=obj.pk).exists()

    def can_insert(self, user, obj):
        return user.is_admin

    def can_update(self, user, obj):
        return user.is_admin

    def check_update(self, user, obj, previous):
        return self.can_update(user, obj)

    def can_delete(self, user, obj):
        return user.is_admin


class ProfilePolicy(BasePolicy):
    model = User

    def scope(self, user):
        if user.is_admin:
            return User.objects.all()
        managed_members = ProjectMember.objects.filter(project__manager=user).values('user_id')
        return User.objects.filter(Q(pk=user.pk) | Q(pk__in=managed_members))

    def can_update(self, user, obj):
        return user.is_admin or obj.pk == user.pk

    def check_update(self, user, obj, previous):
        # The caller may be the edited row itself, so judge it by the stored role
        caller_role = previous.get('role') if obj.pk == user.pk else user.role
        if caller_role == User.ROLE_ADMIN:
            return True
        # Owners may edit their profile but never their own role or status
        return (
            obj.pk == user.pk
            and obj.role == previous.get('role')
            and obj.status == previous.get('status')
        )


class ProjectPolicy(BasePolicy):
    model = Project

    def scope(self, user):
        if user.is_admin or user.is_project_manager:
            return Project.objects.all()
        return Project.objects.filter(
            Q(manager=user) | Q(members__user=user)
        ).distinct()

    def can_update(self, user, obj):
        return user.is_admin or obj.manager_id == user.pk

    def check_update(self, user, obj, previous):
        # A manager can't hand the project to someone else
        return user.is_admin or obj.manager_id == user.pk


class ProjectMemberPolicy(BasePolicy):
    model = ProjectMember

    def scope(self, user):
        if user.is_admin:
            return ProjectMember.objects.all()
        own_projects = ProjectMember.objects.filter(user=user).values('project_id')
        return ProjectMember.objects.filter(
            Q(user=user) | Q(project__manager=user) | Q(project_id__in=own_projects)
        )

    def can_update(self, user, obj):
        return False


class TaskPolicy(BasePolicy):
    model = Task

    def scope(self, user):
        if user.is_admin:
            return Task.objects.all()
        member_projects = ProjectMember.objects.filter(user=user).values('project_id')
        return Task.objects.filter(
            Q(assigned_to=user)
            | Q(created_by=user)
            | Q(project__manager=user)
            | Q(project_id__in=member_projects)
        )

    def can_insert(self, user, obj):
        if obj.created_by_id != user.pk:
            return False
        return (
            obj.project_id is None
            or user.is_admin
            or _manages(user, obj.project_id)
            or _member_of(user, obj.project_id)
        )

    def can_update(self, user, obj):
        return (
            user.is_admin
            or obj.created_by_id == user.pk
            or obj.assigned_to_id == user.pk
            or _manages(user, obj.project_id)
        )

    def check_update(self, user, obj, previous):
        return self.can_update(user, obj)


class TimeLogPolicy(BasePolicy):
    model = TimeLog

    def scope(self, user):
        if user.is_admin:
            return TimeLog.objects.all()
        return TimeLog.objects.filter(Q(user=user) | Q(project__manager=user))

    def can_insert(self, user, obj):
        if obj.user_id != user.pk:
            return False
        task = obj.task
        return task.assigned_to_id == user.pk or task.created_by_id == user.pk

    def can_update(self, user, obj):
        if user.is_admin:
            return True
        return obj.user_id == user.pk and obj.approval_status != TimeLog.APPROVAL_REJECTED

    def check_update(self, user, obj, previous):
        if user.is_admin:
            return True
        return (
            obj.user_id == user.pk
            and obj.approval_status == previous.get('approval_status')
        )

    def can_delete(self, user, obj):
        if user.is_admin:
            return True
        return obj.user_id == user.pk and obj.approval_status == TimeLog.APPROVAL_PENDING


class NotificationPolicy(BasePolicy):
    model = Notification

    def scope(self, user):
        return Notification.objects.filter(user=user)

    def can_insert(self, user, obj):
        return user.is_admin or obj.user_id == user.pk

    def can_update(self, user, obj):
        return obj.user_id == user.pk

    def can_delete(self, user, obj):
        return obj.user_id == user.pk


POLICIES = {
    User: ProfilePolicy(),
    Project: ProjectPolicy(),
    ProjectMember: ProjectMemberPolicy(),
    Task: TaskPolicy(),
    TimeLog: TimeLogPolicy(),
    Notification: NotificationPolicy(),
}


def policy_for(model):
    return POLICIES[model]
