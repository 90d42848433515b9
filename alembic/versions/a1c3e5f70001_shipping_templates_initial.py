"""shipping_templates_initial

Revision ID: a1c3e5f70001
Revises:
Create Date: 2026-10-12 10:21:08.114520

"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c3e5f70001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _binding_table(name: str, entity_col: str, uq_name: str, default_idx: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(entity_col, sa.Integer(), nullable=False),
        sa.Column(
            "shipping_template_id",
            sa.Integer(),
            sa.ForeignKey("shipping_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(entity_col, "shipping_template_id", name=uq_name),
    )
    op.create_index(f"ix_{name}_{entity_col}", name, [entity_col])
    op.create_index(f"ix_{name}_shipping_template_id", name, ["shipping_template_id"])

    # 每个实体至多一条默认（部分唯一索引；sqlite / postgres 都支持）
    op.create_index(
        default_idx,
        name,
        [entity_col],
        unique=True,
        sqlite_where=sa.text("is_default"),
        postgresql_where=sa.text("is_default"),
    )


def upgrade() -> None:
    op.create_table(
        "shipping_templates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("carrier", sa.String(100), nullable=False, server_default=""),
        sa.Column("from_region", sa.String(100), nullable=False, server_default=""),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_shipping_templates_status", "shipping_templates", ["status"])

    op.create_table(
        "shipping_template_rules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "template_id",
            sa.Integer(),
            sa.ForeignKey("shipping_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("to_region", sa.String(100), nullable=False),
        sa.Column("min_weight", sa.Numeric(10, 3), nullable=False),
        sa.Column("max_weight", sa.Numeric(10, 3), nullable=True),
        sa.Column("first_weight", sa.Numeric(10, 3), nullable=False),
        sa.Column("first_price", sa.Numeric(12, 3), nullable=False),
        sa.Column("additional_unit", sa.Numeric(10, 3), nullable=False),
        sa.Column("additional_price", sa.Numeric(12, 3), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False, server_default="CNY"),
        sa.Column("estimated_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_shipping_template_rules_template_id", "shipping_template_rules", ["template_id"])

    _binding_table(
        "product_shipping_templates",
        "product_id",
        "uq_pst_product_template",
        "uq_pst_product_single_default",
    )
    _binding_table(
        "platform_product_shipping_templates",
        "platform_product_id",
        "uq_ppst_platform_product_template",
        "uq_ppst_platform_product_single_default",
    )


def downgrade() -> None:
    op.drop_table("platform_product_shipping_templates")
    op.drop_table("product_shipping_templates")
    op.drop_index("ix_shipping_template_rules_template_id", table_name="shipping_template_rules")
    op.drop_table("shipping_template_rules")
    op.drop_index("ix_shipping_templates_status", table_name="shipping_templates")
    op.drop_table("shipping_templates")
