"""
API permission classes.

Every privileged endpoint asks the AccessGate on each request; nothing
is cached between requests.
"""

import logging

from asgiref.sync import async_to_sync
from rest_framework.permissions import BasePermission

from accounts.infrastructure.repositories.django_principal_repository import (
    DjangoPrincipalRepository,
)
from access_groups.domain.access_gate import AccessGate
from access_groups.infrastructure.repositories.django_group_repository import (
    DjangoGroupRepository,
)
from core.domain.value_objects import FeatureTab
from core.metrics import access_decisions_total

logger = logging.getLogger(__name__)

# Initialize gate (in production, use DI container)
access_gate = AccessGate(DjangoPrincipalRepository(), DjangoGroupRepository())


def check_tab(request, tab: FeatureTab) -> bool:
    """Ask the gate whether the acting principal may use ``tab``."""
    principal_id = getattr(request, "principal_id", None)
    if principal_id is None:
        return False
    allowed = async_to_sync(access_gate.is_allowed)(principal_id, tab)
    access_decisions_total.labels(tab=tab.value, allowed=str(allowed).lower()).inc()
    if not allowed:
        logger.info(f"Principal {principal_id} denied tab {tab.value}")
    return allowed


class TabAccessPermission(BasePermission):
    """
    Allows the request when the principal's group allows ``required_tab``.

    Subclass and set ``required_tab``.
    """

    required_tab: FeatureTab = None
    message = "Your group does not allow this feature"

    def has_permission(self, request, view) -> bool:
        return check_tab(request, self.required_tab)


class AdminTabPermission(TabAccessPermission):
    """Requires the admin tab."""

    required_tab = FeatureTab.ADMIN


class ActivateTabPermission(TabAccessPermission):
    """Requires the activate tab."""

    required_tab = FeatureTab.ACTIVATE


class IsAuthenticatedPrincipal(BasePermission):
    """Any principal with a valid session."""

    message = "Authentication required"

    def has_permission(self, request, view) -> bool:
        return getattr(request, "principal_id", None) is not None


class SuperAdminPermission(BasePermission):
    """Requires the admin tab and the super-admin flag."""

    message = "Only super administrators may change group permissions"

    def has_permission(self, request, view) -> bool:
        principal = getattr(request, "principal", None)
        if principal is None or not principal.is_super_admin:
            return False
        return check_tab(request, FeatureTab.ADMIN)
