"""Domain models and enums shared by entities, services and API schemas.

- ``enums``: user roles, property access levels, category and property types,
  threat levels.
- ``permissions``: the role and access-level permission matrix.
"""

from .enums import (
    CategoryType,
    PropertyAccessLevel,
    PropertyType,
    ThreatLevel,
    UserRole,
)
from .permissions import (
    ACCESS_LEVEL_PERMISSIONS,
    ALL_PERMISSIONS,
    PERMISSIONS,
    ROLE_PERMISSIONS,
    get_access_level_permissions,
    get_role_permissions,
    has_permission,
    has_property_permission,
    is_valid_permission,
)

__all__ = [
    "ACCESS_LEVEL_PERMISSIONS",
    "ALL_PERMISSIONS",
    "CategoryType",
    "PERMISSIONS",
    "PropertyAccessLevel",
    "PropertyType",
    "ROLE_PERMISSIONS",
    "ThreatLevel",
    "UserRole",
    "get_access_level_permissions",
    "get_role_permissions",
    "has_permission",
    "has_property_permission",
    "is_valid_permission",
]
