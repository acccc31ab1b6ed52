"""
Role capabilities and the acting user.

Each role maps to a set of capabilities through the
ROLE_CAPABILITIES setting. Guards check capabilities,
never role names.
"""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from django.conf import settings
from rest_framework.permissions import BasePermission

from apps.accounts.models import Role

logger = logging.getLogger(__name__)


class Capability:
    SUBMIT = 'submit'
    APPROVE = 'approve'
    EDIT_ANY = 'edit_any'
    MANAGE_VEHICLES = 'manage_vehicles'
    MANAGE_RATES = 'manage_rates'
    MANAGE_NOTIFICATIONS = 'manage_notifications'


def capabilities_for_role(role: str) -> FrozenSet[str]:
    """Return the capability set configured for a role."""
    mapping = getattr(settings, 'ROLE_CAPABILITIES', {})
    return frozenset(mapping.get(role, ()))


@dataclass(frozen=True)
class Actor:
    """The user performing an action, with resolved capabilities."""

    user_id: Optional[int]
    role: str = Role.STAFF
    email: str = ''
    capabilities: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def for_role(cls, user_id, role, email=''):
        return cls(
            user_id=user_id,
            role=role,
            email=email,
            capabilities=capabilities_for_role(role),
        )

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


def actor_for_user(user) -> Actor:
    """
    Build an Actor from an authenticated Django user.

    Args:
        user: A Django user instance.

    Returns:
        Actor with the user's role capabilities.
    """
    profile = getattr(user, 'profile', None)
    role = profile.role if profile is not None else Role.STAFF
    return Actor.for_role(user.pk, role, email=user.email or '')


class HasCapability(BasePermission):
    """
    DRF permission granting write access only to actors holding
    ``view.required_capability``. Reads pass through unless the view
    also sets ``read_capability``.
    """

    message = 'Insufficient privilege for this action.'

    def has_permission(self, request, view):
        if request.method in ('GET', 'HEAD', 'OPTIONS'):
            required = getattr(view, 'read_capability', None)
        else:
            required = getattr(view, 'required_capability', None)
        if required is None:
            return True
        allowed = actor_for_user(request.user).can(required)
        if not allowed:
            logger.warning(
                "User %s denied %s on %s: missing capability %s",
                request.user.pk,
                request.method,
                request.path,
                required,
            )
        return allowed
