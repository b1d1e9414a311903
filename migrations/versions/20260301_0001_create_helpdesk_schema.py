"""create helpdesk schema

Revision ID: 20260301_0001
Revises:
Create Date: 2026-03-01 10:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20260301_0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

REFERENCE_TABLES = (
    "ticket_priorities",
    "ticket_categories",
    "assignees",
    "departments",
    "roles",
)


def _timestamp(name: str, *, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
    )


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")

    for table_name in REFERENCE_TABLES:
        op.create_table(
            table_name,
            sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
            sa.Column("name", sa.String(length=100), nullable=False),
            _timestamp("created_at"),
        )
        op.execute(f"CREATE UNIQUE INDEX uk_{table_name}_name_ci ON {table_name} (LOWER(name))")

    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("department_id", sa.BigInteger(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="SET NULL"),
    )
    op.execute("CREATE UNIQUE INDEX uk_users_email_ci ON users (LOWER(email))")

    op.create_table(
        "user_roles",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("role_id", sa.BigInteger(), nullable=False),
        _timestamp("assigned_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "role_id", name="uk_user_roles_user_role"),
    )

    op.create_table(
        "tickets",
        _uuid_pk(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="OPEN"),
        sa.Column("priority_id", sa.BigInteger(), nullable=True),
        sa.Column("category_id", sa.BigInteger(), nullable=True),
        sa.Column("assignee_id", sa.BigInteger(), nullable=True),
        sa.Column("creator_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("site", sa.String(length=200), nullable=True),
        sa.Column("system", sa.String(length=200), nullable=True),
        sa.Column("error_code", sa.String(length=100), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _timestamp("closed_at", nullable=True),
        _timestamp("sla_due_at", nullable=True),
        sa.CheckConstraint(
            "status IN ('OPEN', 'IN_PROGRESS', 'CLOSED')",
            name="ck_tickets_status_valid",
        ),
        sa.CheckConstraint("LENGTH(BTRIM(title)) > 0", name="ck_tickets_title_not_blank"),
        sa.ForeignKeyConstraint(["priority_id"], ["ticket_priorities.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["category_id"], ["ticket_categories.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["assignee_id"], ["assignees.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["creator_id"], ["users.id"], ondelete="SET NULL"),
    )

    for table_name in ("ticket_comments", "ticket_notes"):
        op.create_table(
            table_name,
            sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
            sa.Column("ticket_id", postgresql.UUID(as_uuid=True), nullable=False),
            sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
            sa.Column("content", sa.Text(), nullable=False),
            _timestamp("created_at"),
            sa.ForeignKeyConstraint(["ticket_id"], ["tickets.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        )
        op.create_index(f"idx_{table_name}_ticket_id", table_name, ["ticket_id"], unique=False)

    op.create_table(
        "ticket_history",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("ticket_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column(
            "details",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        _timestamp("timestamp"),
        sa.ForeignKeyConstraint(["ticket_id"], ["tickets.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
    )

    op.create_index("idx_tickets_status", "tickets", ["status"], unique=False)
    op.create_index("idx_tickets_created_at", "tickets", ["created_at"], unique=False)
    op.create_index("idx_ticket_history_ticket_id", "ticket_history", ["ticket_id"], unique=False)
    op.create_index("idx_user_roles_role_id", "user_roles", ["role_id"], unique=False)
    op.execute("CREATE INDEX idx_tickets_title_trgm ON tickets USING gin (title gin_trgm_ops)")


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_tickets_title_trgm")
    op.drop_table("ticket_history")
    op.drop_table("ticket_notes")
    op.drop_table("ticket_comments")
    op.drop_table("tickets")
    op.drop_table("user_roles")
    op.execute("DROP INDEX IF EXISTS uk_users_email_ci")
    op.drop_table("users")
    for table_name in reversed(REFERENCE_TABLES):
        op.execute(f"DROP INDEX IF EXISTS uk_{table_name}_name_ci")
        op.drop_table(table_name)
