"""Create users, notes, habits and diaries tables

Revision ID: 001
Revises: None
Create Date: 2024-03-01 00:00:00.000000+00:00

What:  Initial schema. Every resource table references users.id and is
       indexed for its per-user listing order.
How:   PostgreSQL-specific types: UUID keys, TIMESTAMP WITH TIME ZONE,
       JSONB for note images, a timestamptz[] for habit check-ins.

Rollback: downgrade() drops all four tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _user_id_column() -> sa.Column:
    return sa.Column(
        "user_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id"),
        nullable=False,
        comment="Owning user; immutable",
    )


def _timestamp_column(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        _id_column(),
        sa.Column(
            "anonymous_token",
            sa.Text(),
            nullable=False,
            comment="Client-generated opaque identity string",
        ),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("id"),
        # Conflict target of the provisioning insert
        sa.UniqueConstraint("anonymous_token", name="users_anonymous_token_key"),
    )

    # ── notes ─────────────────────────────────────────────────────────────
    op.create_table(
        "notes",
        _id_column(),
        _user_id_column(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "images",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
            comment="Image URLs in client order",
        ),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_notes_user_created_at",
        "notes",
        ["user_id", sa.text("created_at DESC")],
    )

    # ── habits ────────────────────────────────────────────────────────────
    op.create_table(
        "habits",
        _id_column(),
        _user_id_column(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("frequency", sa.Text(), nullable=False, server_default=sa.text("'daily'")),
        sa.Column(
            "target",
            sa.Text(),
            nullable=False,
            server_default=sa.text("'每日'"),
            comment="Free-text goal description",
        ),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("max_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "check_ins",
            postgresql.ARRAY(sa.TIMESTAMP(timezone=True)),
            nullable=False,
            server_default=sa.text("'{}'"),
            comment="Check-in instants, chronological",
        ),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("current_streak >= 0", name="ck_habits_current_streak"),
        sa.CheckConstraint("max_streak >= current_streak", name="ck_habits_max_streak"),
    )
    op.create_index(
        "idx_habits_user_created_at",
        "habits",
        ["user_id", sa.text("created_at DESC")],
    )

    # ── diaries ───────────────────────────────────────────────────────────
    op.create_table(
        "diaries",
        _id_column(),
        _user_id_column(),
        sa.Column(
            "date",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            comment="Start of the calendar day this entry belongs to",
        ),
        sa.Column("mood", sa.Text(), nullable=False),
        sa.Column("core_event", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("reflection", sa.Text(), nullable=False, server_default=sa.text("''")),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        # Conflict target of the per-day upsert; also serves the listing
        sa.UniqueConstraint("user_id", "date", name="uq_diaries_user_date"),
    )


def downgrade() -> None:
    op.drop_table("diaries")
    op.drop_index("idx_habits_user_created_at", table_name="habits")
    op.drop_table("habits")
    op.drop_index("idx_notes_user_created_at", table_name="notes")
    op.drop_table("notes")
    op.drop_table("users")
