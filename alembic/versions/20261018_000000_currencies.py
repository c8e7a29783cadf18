"""Currencies and property currency

Revision ID: 20261018_000000
Revises: 20260301_000000
Create Date: 2026-10-18 00:00:00.000000

Adds the currencies table seeded with the system currencies (USD as the
default) and a nullable ``currency_id`` on properties. Existing properties
are pointed at the default currency.

"""

from datetime import datetime, timezone
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op
from fnb_cost.core.database.seed import DEFAULT_CURRENCIES

# revision identifiers, used by Alembic.
revision: str = "20261018_000000"
down_revision: Union[str, None] = "20260301_000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "currencies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(3), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("symbol", sa.String(10), nullable=False),
        sa.Column("display_name", sa.String(50), nullable=False),
        sa.Column("decimal_places", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_system_currency", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("exchange_rate", sa.Float(), nullable=True),
        sa.Column("locale", sa.String(10), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.Index("ix_currencies_code", "code", unique=True),
        sa.Index("ix_currencies_is_active", "is_active"),
        sa.Index("ix_currencies_is_default", "is_default"),
    )

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    currencies = sa.table(
        "currencies",
        sa.column("code", sa.String),
        sa.column("name", sa.String),
        sa.column("symbol", sa.String),
        sa.column("display_name", sa.String),
        sa.column("decimal_places", sa.Integer),
        sa.column("is_active", sa.Boolean),
        sa.column("is_default", sa.Boolean),
        sa.column("is_system_currency", sa.Boolean),
        sa.column("locale", sa.String),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )
    op.bulk_insert(
        currencies,
        [
            {
                "code": code,
                "name": name,
                "symbol": symbol,
                "display_name": f"{code} ({symbol})",
                "decimal_places": decimal_places,
                "is_active": True,
                "is_default": index == 0,
                "is_system_currency": True,
                "locale": locale,
                "created_at": now,
                "updated_at": now,
            }
            for index, (code, name, symbol, decimal_places, locale) in enumerate(DEFAULT_CURRENCIES)
        ],
    )

    with op.batch_alter_table("properties") as batch:
        batch.add_column(sa.Column("currency_id", sa.Integer(), nullable=True))
        batch.create_index("ix_properties_currency_id", ["currency_id"])
        batch.create_foreign_key("fk_properties_currency_id", "currencies", ["currency_id"], ["id"])

    op.execute(
        "UPDATE properties SET currency_id = (SELECT id FROM currencies WHERE is_default = true) "
        "WHERE currency_id IS NULL"
    )


def downgrade() -> None:
    with op.batch_alter_table("properties") as batch:
        batch.drop_constraint("fk_properties_currency_id", type_="foreignkey")
        batch.drop_index("ix_properties_currency_id")
        batch.drop_column("currency_id")
    op.drop_table("currencies")
