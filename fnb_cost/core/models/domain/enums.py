"""Domain enums for fnb-cost models."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    Global role assigned to a user.

    The role selects a permission set from ``ROLE_PERMISSIONS``. Property-scoped
    rights come from ``PropertyAccessLevel`` grants instead.
    """

    super_admin = "super_admin"  # Every permission on every property.
    property_owner = "property_owner"
    property_admin = "property_admin"
    regional_manager = "regional_manager"
    property_manager = "property_manager"
    supervisor = "supervisor"
    user = "user"
    readonly = "readonly"


class PropertyAccessLevel(str, Enum):
    """Level of access a user holds on a single property."""

    read_only = "read_only"
    data_entry = "data_entry"
    management = "management"
    full_control = "full_control"
    owner = "owner"


# Levels allowed to grant or revoke access for other users.
ACCESS_MANAGING_LEVELS = frozenset(
    {PropertyAccessLevel.owner, PropertyAccessLevel.full_control, PropertyAccessLevel.management}
)


class CategoryType(str, Enum):
    """Cost category family."""

    food = "Food"
    beverage = "Beverage"


class PropertyType(str, Enum):
    """Kind of business a property runs."""

    hotel = "hotel"
    restaurant = "restaurant"
    resort = "resort"
    cafe = "cafe"
    bar = "bar"
    catering = "catering"
    other = "other"


class ThreatLevel(str, Enum):
    """Severity of a detected security threat."""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"
