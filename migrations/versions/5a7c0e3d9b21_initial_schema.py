"""initial schema: users, profiles, applications, districts, announcements, events, audit

Revision ID: 5a7c0e3d9b21
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5a7c0e3d9b21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables (idempotent)."""
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = set(inspector.get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(320), nullable=False, unique=True),
            sa.Column("password_hash", sa.String(255), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("must_change_password", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("last_login_at", sa.DateTime(), nullable=True),
        )

    if "profiles" not in existing_tables:
        op.create_table(
            "profiles",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
            sa.Column("full_name", sa.String(255), nullable=False),
            sa.Column("email", sa.String(320), nullable=False),
            sa.Column("phone", sa.String(32), nullable=True),
            sa.Column("institution", sa.String(255), nullable=True),
            sa.Column("prant", sa.String(128), nullable=True),
            sa.Column("district", sa.String(128), nullable=True),
            sa.Column("region", sa.String(128), nullable=True),
            sa.Column("role", sa.String(64), nullable=False, server_default="MEMBER"),
            sa.Column("membership_id", sa.String(32), nullable=True, unique=True),
            sa.Column("designation", sa.String(64), nullable=True),
            sa.Column("event_manager_expiry", sa.DateTime(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_profiles_prant", "profiles", ["prant"])
        op.create_index("idx_profiles_role", "profiles", ["role"])

    if "audit_events" not in existing_tables:
        op.create_table(
            "audit_events",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("request_id", sa.String(64), nullable=True),
            sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("actor_user_email", sa.String(320), nullable=True),
            sa.Column("action", sa.String(128), nullable=False),
            sa.Column("entity_type", sa.String(128), nullable=True),
            sa.Column("entity_id", sa.String(128), nullable=True),
            sa.Column("reason", sa.String(512), nullable=True),
            sa.Column("metadata_json", sa.Text(), nullable=True),
            sa.Column("client_ip", sa.String(45), nullable=True),
            sa.UniqueConstraint("request_id", "id", name="uq_audit_request_id_id"),
        )

    if "applications" not in existing_tables:
        op.create_table(
            "applications",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("full_name", sa.String(255), nullable=False),
            sa.Column("email", sa.String(320), nullable=False),
            sa.Column("phone", sa.String(32), nullable=False),
            sa.Column("date_of_birth", sa.Date(), nullable=True),
            sa.Column("institution", sa.String(255), nullable=True),
            sa.Column("motivation", sa.Text(), nullable=True),
            sa.Column("designation", sa.String(64), nullable=True),
            sa.Column("prant", sa.String(128), nullable=False),
            sa.Column("district", sa.String(128), nullable=True),
            sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
            sa.Column("rejection_reason", sa.Text(), nullable=True),
            sa.Column("applied_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("reviewed_at", sa.DateTime(), nullable=True),
            sa.Column("reviewed_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("profile_id", sa.Integer(), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        )
        op.create_index("idx_applications_status", "applications", ["status"])
        op.create_index("idx_applications_prant", "applications", ["prant"])

    if "prant_districts" not in existing_tables:
        op.create_table(
            "prant_districts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("prant", sa.String(128), nullable=False),
            sa.Column("district", sa.String(128), nullable=False),
            sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.UniqueConstraint("prant", "district", name="uq_prant_districts_prant_district"),
        )
        op.create_index("ix_prant_districts_prant", "prant_districts", ["prant"])

    if "announcements" not in existing_tables:
        op.create_table(
            "announcements",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("target_audience", sa.String(16), nullable=False, server_default="ALL"),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        )
        op.create_index("idx_announcements_active_created", "announcements", ["is_active", "created_at"])

    if "event_delegates" not in existing_tables:
        op.create_table(
            "event_delegates",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("event_name", sa.String(255), nullable=False),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("email", sa.String(320), nullable=True),
            sa.Column("phone", sa.String(32), nullable=True),
            sa.Column("prant", sa.String(128), nullable=True),
            sa.Column("manager_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_event_delegates_manager", "event_delegates", ["manager_user_id"])
        op.create_index("idx_event_delegates_prant", "event_delegates", ["prant"])


def downgrade() -> None:
    for table in (
        "event_delegates",
        "announcements",
        "prant_districts",
        "applications",
        "audit_events",
        "profiles",
        "users",
    ):
        op.drop_table(table)
