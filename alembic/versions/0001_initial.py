"""Initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "system_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("site_name", sa.String(length=256), nullable=True),
        sa.Column("smtp_host", sa.String(length=512), nullable=True),
        sa.Column("smtp_port", sa.Integer(), nullable=True),
        sa.Column("smtp_user", sa.String(length=512), nullable=True),
        sa.Column("smtp_password", sa.String(length=512), nullable=True),
        sa.Column("company_email", sa.String(length=512), nullable=True),
        sa.Column("admin_email", sa.String(length=512), nullable=True),
        sa.Column("enable_admin_notifications", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("notify_on_iam_expiration", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("notify_on_vm_expiration", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("iam_expiration_email_subject", sa.String(length=512), nullable=True),
        sa.Column("iam_expiration_email_template", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("system_settings")
