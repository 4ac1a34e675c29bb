"""initial schema: usage counter, blueprint vault, device fingerprints

Revision ID: 20261017_00
Revises:
Create Date: 2026-10-17

"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op


# revision identifiers, used by Alembic.
revision = "20261017_00"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_daily_usage",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("usage_date", sa.Date(), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.UniqueConstraint(
            "user_id", "usage_date", name="uq_user_daily_usage_user_date"
        ),
    )
    op.create_index(
        "ix_user_daily_usage_user_id", "user_daily_usage", ["user_id"], unique=False
    )

    op.create_table(
        "blueprints",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("goal", sa.Text(), nullable=False),
        sa.Column(
            "mode", sa.String(length=32), nullable=False, server_default="Standard"
        ),
        sa.Column(
            "blueprint",
            sa.JSON(),
            nullable=False,
            comment="Structured blueprint payload",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index("ix_blueprints_user_id", "blueprints", ["user_id"], unique=False)

    op.create_table(
        "device_fingerprints",
        sa.Column("device_fingerprint", sa.String(length=128), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(length=64),
            nullable=False,
            comment="First user registered on this device",
        ),
        sa.Column("account_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "is_blocked", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("blocked_reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    op.create_table(
        "spam_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("device_fingerprint", sa.String(length=128), nullable=False),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index(
        "ix_spam_logs_device_fingerprint",
        "spam_logs",
        ["device_fingerprint"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_spam_logs_device_fingerprint", table_name="spam_logs")
    op.drop_table("spam_logs")
    op.drop_table("device_fingerprints")
    op.drop_index("ix_blueprints_user_id", table_name="blueprints")
    op.drop_table("blueprints")
    op.drop_index("ix_user_daily_usage_user_id", table_name="user_daily_usage")
    op.drop_table("user_daily_usage")
