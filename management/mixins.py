import logging

from django.db import transaction
from django.forms.models import model_to_dict
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated

from .permissions import RowPolicy
from .policies import policy_for

logger = logging.getLogger(__name__)


class PolicyScopedMixin:
    """
    Route every read and write of a model viewset through its table policy.

    Writes run inside a transaction: the row is saved, the policy checks the
    result, and a failed check raises ``PermissionDenied`` which rolls the
    write back.
    """
    permission_classes = [IsAuthenticated, RowPolicy]
    policy_model = None

    @property
    def policy(self):
        return policy_for(self.policy_model or self.queryset.model)

    def get_queryset(self):
        return self.policy.scope(self.request.user)

    def get_serializer_context(self):
        """Pass request context to serializer"""
        context = super().get_serializer_context()
        context['request'] = self.request
        return context

    def _deny(self, action, instance):
        logger.warning(
            "Policy rejected %s of %s %s for user %s",
            action, type(instance).__name__, instance.pk, self.request.user.pk,
        )
        raise PermissionDenied(f"You do not have permission to {action} this record.")

    def create_with_policy(self, serializer, **save_kwargs):
        with transaction.atomic():
            instance = serializer.save(**save_kwargs)
            if not self.policy.can_insert(self.request.user, instance):
                self._deny('create', instance)
        return instance

    def update_with_policy(self, serializer, **save_kwargs):
        previous = model_to_dict(serializer.instance)
        with transaction.atomic():
            instance = serializer.save(**save_kwargs)
            if not self.policy.check_update(self.request.user, instance, previous):
                self._deny('update', instance)
        return instance

    def perform_create(self, serializer):
        self.create_with_policy(serializer)

    def perform_update(self, serializer):
        self.update_with_policy(serializer)
