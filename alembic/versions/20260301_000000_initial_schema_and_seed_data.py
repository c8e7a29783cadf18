"""Initial schema and seed data for fnb-cost

Revision ID: 20260301_000000
Revises: None
Create Date: 2026-03-01 00:00:00.000000

This is the initial migration that creates all tables of the fnb-cost service
and seeds the default cost categories. This includes:
- Users, properties, outlets and per-property access grants
- Cost categories and food/beverage cost entries with their details
- Daily financial summaries
- Audit trail and persisted security events

Revision format: YYYYMMDD_HHMMSS_description

"""

from datetime import datetime, timezone
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op
from fnb_cost.core.database.seed import DEFAULT_CATEGORIES

# revision identifiers, used by Alembic.
revision: str = "20260301_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _cost_tables(prefix: str) -> None:
    op.create_table(
        f"{prefix}_cost_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("outlet_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("total_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["outlet_id"], ["outlets.id"]),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"]),
        sa.Index(f"ix_{prefix}_cost_entries_date", "date"),
        sa.Index(f"ix_{prefix}_cost_entries_outlet_id", "outlet_id"),
        sa.Index(f"ix_{prefix}_cost_entries_property_id", "property_id"),
    )
    op.create_table(
        f"{prefix}_cost_details",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("category_name", sa.String(191), nullable=True),
        sa.Column("cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("description", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["entry_id"], [f"{prefix}_cost_entries.id"]),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"]),
        sa.Index(f"ix_{prefix}_cost_details_entry_id", "entry_id"),
        sa.Index(f"ix_{prefix}_cost_details_category_id", "category_id"),
    )


def upgrade() -> None:
    """Create all tables and seed initial data."""

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(191), nullable=True),
        sa.Column("email", sa.String(191), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", sa.String(32), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("department", sa.String(191), nullable=True),
        sa.Column("phone_number", sa.String(64), nullable=True),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_users_email", "email", unique=True),
        sa.Index("ix_users_role", "role"),
    )

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(191), nullable=False),
        sa.Column("property_code", sa.String(64), nullable=False),
        sa.Column("property_type", sa.String(32), nullable=False, server_default="restaurant"),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(128), nullable=True),
        sa.Column("country", sa.String(128), nullable=True),
        sa.Column("owner_id", sa.Integer(), nullable=True),
        sa.Column("manager_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["manager_id"], ["users.id"]),
        sa.Index("ix_properties_property_code", "property_code", unique=True),
        sa.Index("ix_properties_owner_id", "owner_id"),
        sa.Index("ix_properties_manager_id", "manager_id"),
    )

    op.create_table(
        "outlets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(191), nullable=False),
        sa.Column("outlet_code", sa.String(64), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("email", sa.String(191), nullable=True),
        sa.Column("outlet_type", sa.String(64), nullable=True),
        sa.Column("currency", sa.String(8), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("default_budget_food_cost_pct", sa.Float(), nullable=True),
        sa.Column("default_budget_beverage_cost_pct", sa.Float(), nullable=True),
        sa.Column("target_occupancy", sa.Float(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.Index("ix_outlets_outlet_code", "outlet_code"),
        sa.Index("ix_outlets_property_id", "property_id"),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(191), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("type", sa.String(16), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_categories_type", "type"),
    )

    _cost_tables("food")
    _cost_tables("beverage")

    op.create_table(
        "daily_financial_summaries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        *[
            sa.Column(name, sa.Float(), nullable=False, server_default="0")
            for name in (
                "actual_food_revenue",
                "budget_food_revenue",
                "actual_beverage_revenue",
                "budget_beverage_revenue",
                "budget_food_cost",
                "budget_beverage_cost",
                "budget_food_cost_pct",
                "budget_beverage_cost_pct",
                "ent_food",
                "co_food",
                "other_food_adjustment",
                "ent_beverage",
                "co_beverage",
                "other_beverage_adjustment",
                "total_covers",
                "average_check",
            )
        ],
        sa.Column("note", sa.String(1000), nullable=True),
        *[
            sa.Column(name, sa.Float(), nullable=True)
            for name in (
                "actual_food_cost",
                "actual_food_cost_pct",
                "food_variance_pct",
                "actual_beverage_cost",
                "actual_beverage_cost_pct",
                "beverage_variance_pct",
            )
        ],
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"]),
        sa.UniqueConstraint("date", "property_id", name="uq_daily_financial_summaries_date_property"),
        sa.Index("ix_daily_financial_summaries_date", "date"),
        sa.Index("ix_daily_financial_summaries_property_id", "property_id"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("property_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("resource", sa.String(64), nullable=False),
        sa.Column("resource_id", sa.String(128), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.Index("ix_audit_logs_user_id", "user_id"),
        sa.Index("ix_audit_logs_property_id", "property_id"),
        sa.Index("ix_audit_logs_action", "action"),
        sa.Index("ix_audit_logs_resource", "resource"),
        sa.Index("ix_audit_logs_timestamp", "timestamp"),
    )

    op.create_table(
        "property_access",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("access_level", sa.String(32), nullable=False),
        sa.Column("granted_by", sa.Integer(), nullable=True),
        sa.Column("granted_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["granted_by"], ["users.id"]),
        sa.UniqueConstraint("user_id", "property_id", name="uq_property_access_user_property"),
        sa.Index("ix_property_access_user_id", "user_id"),
        sa.Index("ix_property_access_property_id", "property_id"),
    )

    op.create_table(
        "security_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(64), nullable=False),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("description", sa.String(512), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("property_id", sa.Integer(), nullable=True),
        sa.Column("ip", sa.String(64), nullable=True),
        sa.Column("event_metadata", sa.JSON(), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("resolved_by", sa.Integer(), nullable=True),
        sa.Column("resolution", sa.String(1000), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["resolved_by"], ["users.id"]),
        sa.Index("ix_security_events_type", "type"),
        sa.Index("ix_security_events_timestamp", "timestamp"),
        sa.Index("ix_security_events_resolved", "resolved"),
    )

    # Seed default cost categories
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    categories = sa.table(
        "categories",
        sa.column("name", sa.String),
        sa.column("description", sa.String),
        sa.column("type", sa.String),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )
    op.bulk_insert(
        categories,
        [
            {"name": name, "description": description, "type": category_type, "created_at": now, "updated_at": now}
            for category_type, entries in DEFAULT_CATEGORIES.items()
            for name, description in entries
        ],
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("security_events")
    op.drop_table("property_access")
    op.drop_table("audit_logs")
    op.drop_table("daily_financial_summaries")
    op.drop_table("beverage_cost_details")
    op.drop_table("beverage_cost_entries")
    op.drop_table("food_cost_details")
    op.drop_table("food_cost_entries")
    op.drop_table("categories")
    op.drop_table("outlets")
    op.drop_table("properties")
    op.drop_table("users")
