"""create_directory_tables

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-10-18 09:12:40.118203

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f9a1c2b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "tenant",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('active', 'suspended', 'archived')",
            name="tenant_status_check",
        ),
    )
    op.create_index("ix_tenant_code", "tenant", ["code"], unique=True)
    op.create_index("ix_tenant_status", "tenant", ["status"])

    op.create_table(
        "business_categories",
        sa.Column("category_code", sa.String(32), nullable=False),
        sa.Column("name_th", sa.String(255), nullable=False),
        sa.Column("name_en", sa.String(255), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.PrimaryKeyConstraint("category_code"),
    )

    op.create_table(
        "participant",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("full_name_th", sa.String(255), nullable=False),
        sa.Column("full_name_en", sa.String(255), nullable=True),
        sa.Column("nickname_th", sa.String(100), nullable=True),
        sa.Column("nickname_en", sa.String(100), nullable=True),
        sa.Column("position", sa.String(255), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("tagline", sa.Text(), nullable=True),
        sa.Column("category_code", sa.String(32), nullable=True),
        sa.Column("tags", postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("line_id", sa.String(100), nullable=True),
        sa.Column("line_user_id", sa.String(64), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("website_url", sa.Text(), nullable=True),
        sa.Column("onepage_url", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="prospect"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["category_code"],
            ["business_categories.category_code"],
            ondelete="SET NULL",
        ),
        sa.CheckConstraint(
            "status IN ('prospect', 'visitor', 'member', 'alumni', 'declined')",
            name="participant_status_check",
        ),
    )
    op.create_index("ix_participant_tenant_id", "participant", ["tenant_id"])
    op.create_index("ix_participant_category_code", "participant", ["category_code"])
    op.create_index(
        "ix_participant_tenant_status_name",
        "participant",
        ["tenant_id", "status", "full_name_th"],
    )
    op.create_index("ix_participant_line_user_id", "participant", ["line_user_id"])

    from memberdir.infrastructure.persistence.rls import (
        CREATE_LINE_USER_TENANT_FUNCTION,
        enable_rls_statements,
    )

    for statement in enable_rls_statements():
        op.execute(statement)
    op.execute(CREATE_LINE_USER_TENANT_FUNCTION)


def downgrade() -> None:
    """Downgrade schema."""
    from memberdir.infrastructure.persistence.rls import (
        DROP_LINE_USER_TENANT_FUNCTION,
        disable_rls_statements,
    )

    op.execute(DROP_LINE_USER_TENANT_FUNCTION)
    for statement in disable_rls_statements():
        op.execute(statement)

    op.drop_index("ix_participant_line_user_id", table_name="participant")
    op.drop_index("ix_participant_tenant_status_name", table_name="participant")
    op.drop_index("ix_participant_category_code", table_name="participant")
    op.drop_index("ix_participant_tenant_id", table_name="participant")
    op.drop_table("participant")
    op.drop_table("business_categories")
    op.drop_index("ix_tenant_status", table_name="tenant")
    op.drop_index("ix_tenant_code", table_name="tenant")
    op.drop_table("tenant")
