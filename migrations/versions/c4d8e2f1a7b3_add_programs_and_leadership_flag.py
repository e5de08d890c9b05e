"""add programs table and profiles.is_leadership

Revision ID: c4d8e2f1a7b3
Revises: 5a7c0e3d9b21
Create Date: 2026-10-19 14:03:11.482067

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c4d8e2f1a7b3'
down_revision: Union[str, Sequence[str], None] = '5a7c0e3d9b21'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Idempotent: safe on databases created from current models."""
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = set(inspector.get_table_names())

    profile_cols = {c["name"] for c in inspector.get_columns("profiles")}
    if "is_leadership" not in profile_cols:
        with op.batch_alter_table("profiles") as batch:
            batch.add_column(sa.Column("is_leadership", sa.Boolean(), nullable=False, server_default=sa.false()))

    if "programs" not in existing_tables:
        op.create_table(
            "programs",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("program_type", sa.String(64), nullable=False, server_default="Workshop"),
            sa.Column("event_date", sa.Date(), nullable=True),
            sa.Column("location", sa.String(255), nullable=True),
            sa.Column("prant", sa.String(128), nullable=True),
            sa.Column("is_joint_initiative", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("collab_prants", sa.Text(), nullable=True),
            sa.Column("approval_status", sa.String(16), nullable=False, server_default="approved"),
            sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_programs_prant", "programs", ["prant"])
        op.create_index("idx_programs_published_date", "programs", ["is_published", "event_date"])


def downgrade() -> None:
    op.drop_table("programs")
    with op.batch_alter_table("profiles") as batch:
        batch.drop_column("is_leadership")
