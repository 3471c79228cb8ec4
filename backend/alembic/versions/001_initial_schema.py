"""initial schema (users, equipment_master, breakdown_data)

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users 表
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="viewer"),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # equipment_master 表
    op.create_table(
        "equipment_master",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("equipment_number", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("type", sa.String(100), nullable=True),
        sa.Column("customer", sa.String(200), nullable=True),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_equipment_master_equipment_number", "equipment_master", ["equipment_number"], unique=True)
    op.create_index("ix_equipment_master_customer", "equipment_master", ["customer"])

    # breakdown_data 表
    op.create_table(
        "breakdown_data",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("report_date", sa.Date(), nullable=False),
        sa.Column("shift", sa.String(20), nullable=True),
        sa.Column("equipment_number", sa.String(50), nullable=False),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("maintenance_category", sa.String(20), nullable=True),
        sa.Column("rfu", sa.String(20), nullable=True),
        sa.Column("problem", sa.Text(), nullable=True),
        sa.Column("component", sa.String(200), nullable=True),
        sa.Column("work_order", sa.String(50), nullable=True),
        sa.Column("reporter", sa.String(100), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_breakdown_data_report_date", "breakdown_data", ["report_date"])
    op.create_index("ix_breakdown_data_equipment_number", "breakdown_data", ["equipment_number"])
    op.create_index("ix_breakdown_data_location", "breakdown_data", ["location"])
    # 报表窗口查询按 start_time 过滤
    op.create_index("ix_breakdown_data_start_time", "breakdown_data", ["start_time"])


def downgrade() -> None:
    op.drop_table("breakdown_data")
    op.drop_table("equipment_master")
    op.drop_table("users")
