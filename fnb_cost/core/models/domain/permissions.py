"""
Role and property access permission matrix.

Permissions are dotted strings grouped by area (``users.create``,
``financial.food_costs.read``...). A user's effective global permissions are
the set of their ``UserRole`` plus any explicit extras stored on the user row.
Property access grants map onto the permission set of an equivalent role.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Optional

from .enums import PropertyAccessLevel, UserRole

PERMISSIONS: Dict[str, Dict[str, str]] = {
    "system_admin": {
        "manage_system": "system.manage",
        "view_audit_logs": "system.audit.read",
        "manage_backups": "system.backup.manage",
        "platform_settings": "system.settings.manage",
    },
    "user_management": {
        "create_users": "users.create",
        "read_users": "users.read",
        "update_users": "users.update",
        "delete_users": "users.delete",
        "manage_roles": "users.roles.manage",
        "reset_passwords": "users.password.reset",
        "manage_permissions": "users.permissions.manage",
        "view_all_users": "users.view_all",
        "view_property_users": "users.view_property",
    },
    "property_management": {
        "create_properties": "properties.create",
        "read_properties": "properties.read",
        "update_properties": "properties.update",
        "delete_properties": "properties.delete",
        "manage_property_access": "properties.access.manage",
        "transfer_ownership": "properties.ownership.transfer",
        "view_all_properties": "properties.view_all",
        "view_own_properties": "properties.view_own",
        "manage_property_settings": "properties.settings.manage",
    },
    "financial_data": {
        "create_food_costs": "financial.food_costs.create",
        "read_food_costs": "financial.food_costs.read",
        "update_food_costs": "financial.food_costs.update",
        "delete_food_costs": "financial.food_costs.delete",
        "create_beverage_costs": "financial.beverage_costs.create",
        "read_beverage_costs": "financial.beverage_costs.read",
        "update_beverage_costs": "financial.beverage_costs.update",
        "delete_beverage_costs": "financial.beverage_costs.delete",
        "approve_costs": "financial.costs.approve",
        "create_daily_summary": "financial.daily_summary.create",
        "read_daily_summary": "financial.daily_summary.read",
        "update_daily_summary": "financial.daily_summary.update",
        "delete_daily_summary": "financial.daily_summary.delete",
    },
    "reporting": {
        "view_basic_reports": "reports.basic.read",
        "view_detailed_reports": "reports.detailed.read",
        "view_financial_reports": "reports.financial.read",
        "view_cross_property_reports": "reports.cross_property.read",
        "export_reports": "reports.export",
        "create_custom_reports": "reports.custom.create",
        "schedule_reports": "reports.schedule.manage",
    },
    "outlet_management": {
        "create_outlets": "outlets.create",
        "read_outlets": "outlets.read",
        "update_outlets": "outlets.update",
        "delete_outlets": "outlets.delete",
        "manage_outlet_users": "outlets.users.manage",
    },
    "dashboard_access": {
        "view_dashboard": "dashboard.view",
        "view_property_dashboard": "dashboard.property.view",
        "view_cross_property_dashboard": "dashboard.cross_property.view",
        "manage_dashboard_settings": "dashboard.settings.manage",
    },
}

ALL_PERMISSIONS: FrozenSet[str] = frozenset(p for group in PERMISSIONS.values() for p in group.values())


def _group(name: str) -> List[str]:
    return list(PERMISSIONS[name].values())


def _pick(group: str, *keys: str) -> List[str]:
    return [PERMISSIONS[group][key] for key in keys]


_READ_ONLY = [
    *_pick("financial_data", "read_food_costs", "read_beverage_costs", "read_daily_summary"),
    *_pick("reporting", "view_basic_reports"),
    *_pick("dashboard_access", "view_dashboard"),
]

_MANAGER_FINANCIAL = _pick(
    "financial_data",
    "create_food_costs",
    "read_food_costs",
    "update_food_costs",
    "create_beverage_costs",
    "read_beverage_costs",
    "update_beverage_costs",
    "create_daily_summary",
    "read_daily_summary",
    "update_daily_summary",
)

ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[str]] = {
    UserRole.super_admin: ALL_PERMISSIONS,
    UserRole.property_owner: frozenset(
        [
            *_pick("system_admin", "view_audit_logs"),
            *_pick(
                "user_management",
                "create_users",
                "read_users",
                "update_users",
                "delete_users",
                "reset_passwords",
                "view_property_users",
            ),
            *_group("property_management"),
            *_group("financial_data"),
            *_group("reporting"),
            *_group("outlet_management"),
            *_group("dashboard_access"),
        ]
    ),
    UserRole.property_admin: frozenset(
        [
            *_pick("user_management", "read_users", "update_users", "view_property_users"),
            *_pick(
                "property_management",
                "read_properties",
                "update_properties",
                "manage_property_access",
                "view_own_properties",
                "manage_property_settings",
            ),
            *_group("financial_data"),
            *_pick(
                "reporting",
                "view_basic_reports",
                "view_detailed_reports",
                "view_financial_reports",
                "export_reports",
            ),
            *_group("outlet_management"),
            *_pick("dashboard_access", "view_dashboard", "view_property_dashboard", "manage_dashboard_settings"),
        ]
    ),
    UserRole.regional_manager: frozenset(
        [
            *_pick("user_management", "read_users", "view_property_users"),
            *_pick("property_management", "read_properties", "update_properties", "view_own_properties"),
            *_MANAGER_FINANCIAL,
            *_pick(
                "reporting",
                "view_basic_reports",
                "view_detailed_reports",
                "view_financial_reports",
                "view_cross_property_reports",
                "export_reports",
            ),
            *_pick("outlet_management", "read_outlets", "update_outlets"),
            *_pick(
                "dashboard_access",
                "view_dashboard",
                "view_property_dashboard",
                "view_cross_property_dashboard",
            ),
        ]
    ),
    UserRole.property_manager: frozenset(
        [
            *_pick("user_management", "read_users", "view_property_users"),
            *_pick("property_management", "read_properties", "view_own_properties"),
            *_MANAGER_FINANCIAL,
            *_pick(
                "reporting",
                "view_basic_reports",
                "view_detailed_reports",
                "view_financial_reports",
                "export_reports",
            ),
            *_pick("outlet_management", "read_outlets", "update_outlets"),
            *_pick("dashboard_access", "view_dashboard", "view_property_dashboard"),
        ]
    ),
    UserRole.supervisor: frozenset(
        [
            *_pick(
                "financial_data",
                "create_food_costs",
                "read_food_costs",
                "create_beverage_costs",
                "read_beverage_costs",
                "create_daily_summary",
                "read_daily_summary",
            ),
            *_pick("reporting", "view_basic_reports"),
            *_pick("dashboard_access", "view_dashboard", "view_property_dashboard"),
        ]
    ),
    UserRole.user: frozenset(_READ_ONLY),
    UserRole.readonly: frozenset(_READ_ONLY),
}

ACCESS_LEVEL_PERMISSIONS: Dict[PropertyAccessLevel, FrozenSet[str]] = {
    PropertyAccessLevel.owner: ROLE_PERMISSIONS[UserRole.property_owner],
    PropertyAccessLevel.full_control: ROLE_PERMISSIONS[UserRole.property_admin],
    PropertyAccessLevel.management: ROLE_PERMISSIONS[UserRole.property_manager],
    PropertyAccessLevel.data_entry: ROLE_PERMISSIONS[UserRole.supervisor],
    PropertyAccessLevel.read_only: ROLE_PERMISSIONS[UserRole.readonly],
}


def get_role_permissions(role: UserRole | str) -> FrozenSet[str]:
    """Return the permission set of a role, empty for unknown roles."""
    try:
        return ROLE_PERMISSIONS[UserRole(role)]
    except ValueError:
        return frozenset()


def get_access_level_permissions(level: PropertyAccessLevel | str) -> FrozenSet[str]:
    """Return the permission set granted by a property access level."""
    try:
        return ACCESS_LEVEL_PERMISSIONS[PropertyAccessLevel(level)]
    except ValueError:
        return frozenset()


def has_permission(role: UserRole | str, permission: str, extra: Optional[Iterable[str]] = None) -> bool:
    """
    Check whether a role (plus explicit extra grants) holds a permission.

    Args:
        role: The user's global role
        permission: Dotted permission string
        extra: Additional permissions stored on the user

    Returns:
        True if the permission is granted
    """
    if role == UserRole.super_admin:
        return True
    if permission in get_role_permissions(role):
        return True
    return bool(extra) and permission in set(extra)


def has_property_permission(access_level: PropertyAccessLevel | str | None, permission: str) -> bool:
    """Check whether a property access level grants a permission."""
    if access_level is None:
        return False
    return permission in get_access_level_permissions(access_level)


def is_valid_permission(permission: str) -> bool:
    return permission in ALL_PERMISSIONS
