# rx_core/common/permissions.py
"""
Role-based access for the scheduling API.

Roles are Django auth Group names. Each permission class maps ViewSet
actions to the roles allowed to run them; ADMIN (and superusers) may do
anything.
"""
from __future__ import annotations

from rest_framework.permissions import SAFE_METHODS, BasePermission

ROLE_ADMIN = "ADMIN"
ROLE_SCHEDULER = "SCHEDULER"
ROLE_PHARMACIST = "PHARMACIST"
ROLE_READONLY = "READONLY"

ALL_ROLES = (ROLE_ADMIN, ROLE_SCHEDULER, ROLE_PHARMACIST, ROLE_READONLY)

READ_ROLES = frozenset(ALL_ROLES)
WRITE_ROLES = frozenset({ROLE_ADMIN, ROLE_SCHEDULER})
ADMIN_ONLY = frozenset({ROLE_ADMIN})

_METHOD_ACTIONS = {
    "POST": "create",
    "PUT": "update",
    "PATCH": "partial_update",
    "DELETE": "destroy",
}


def user_roles(user) -> frozenset[str]:
    """
    Role names held by `user`. Empty for anonymous users; an authenticated
    user without any role group counts as READONLY.
    """
    if user is None or not user.is_authenticated:
        return frozenset()
    if user.is_superuser:
        return frozenset({ROLE_ADMIN})

    names = frozenset(user.groups.filter(name__in=ALL_ROLES).values_list("name", flat=True))
    return names or frozenset({ROLE_READONLY})


class RolePermission(BasePermission):
    """
    Subclasses fill `action_roles`. Unknown write actions are denied;
    unknown safe actions fall back to the list/retrieve rule.
    """
    message = "Your role does not allow this action."
    action_roles: dict[str, frozenset[str]] = {}

    @staticmethod
    def _is_detail(view) -> bool:
        return "pk" in (getattr(view, "kwargs", None) or {})

    def _action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action
        if request.method in SAFE_METHODS:
            return "retrieve" if self._is_detail(view) else "list"
        return _METHOD_ACTIONS.get(request.method)

    def has_permission(self, request, view) -> bool:
        roles = user_roles(request.user)
        if not roles:
            return False
        if ROLE_ADMIN in roles:
            return True

        allowed = self.action_roles.get(self._action(request, view))
        if allowed is None and request.method in SAFE_METHODS:
            allowed = self.action_roles.get("retrieve" if self._is_detail(view) else "list")

        return bool(allowed and roles & allowed)


class ShiftPermission(RolePermission):
    """Everyone reads the calendar; schedulers change it; only admins delete."""
    action_roles = {
        "list": READ_ROLES,
        "retrieve": READ_ROLES,
        "history": READ_ROLES,
        "substitutes": READ_ROLES,
        "availability": READ_ROLES,
        "create": WRITE_ROLES,
        "partial_update": WRITE_ROLES,
        "cancel": WRITE_ROLES,
        "reschedule": WRITE_ROLES,
        "substitute": WRITE_ROLES,
        "destroy": ADMIN_ONLY,
    }


class PharmacistPermission(RolePermission):
    action_roles = {
        "list": READ_ROLES,
        "retrieve": READ_ROLES,
        "stats": READ_ROLES,
    }
