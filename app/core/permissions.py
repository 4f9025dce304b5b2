"""
Role to permission lookup.

Every role-based check in the API goes through ROLE_PERMISSIONS so the
access rules live in one place.
"""

import enum
from typing import Dict, FrozenSet
from app.models.user import UserRole


class Permission(str, enum.Enum):
    VIEW_ROUTES = "view_routes"
    PLAN_ROUTES = "plan_routes"
    EXECUTE_ROUTES = "execute_routes"
    VIEW_VEHICLES = "view_vehicles"


ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Permission]] = {
    UserRole.admin: frozenset(Permission),
    UserRole.fleet_manager: frozenset(Permission),
    UserRole.battery_swapper: frozenset({
        Permission.VIEW_ROUTES,
        Permission.EXECUTE_ROUTES,
        Permission.VIEW_VEHICLES,
    }),
}


def has_permission(role: UserRole, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())
