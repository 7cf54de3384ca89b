"""initial_tournament_hub_schema

Revision ID: 3c1d5e7f9a20
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3c1d5e7f9a20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("handicap", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "handicap IS NULL OR (handicap >= -10 AND handicap <= 54)",
            name="ck_users_handicap_range",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "tournaments",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("registration_code", sa.String(length=16), nullable=False),
        sa.Column("title", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("game", sa.String(length=64), nullable=False),
        sa.Column("location", sa.String(length=256), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("prize_pool", sa.String(length=128), nullable=True),
        sa.Column("rules", sa.Text(), nullable=True),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('upcoming','ongoing','completed')",
            name="ck_tournaments_status",
        ),
        sa.CheckConstraint(
            "max_participants >= 1",
            name="ck_tournaments_max_participants_positive",
        ),
        sa.CheckConstraint(
            "end_at IS NULL OR end_at >= start_at",
            name="ck_tournaments_end_after_start",
        ),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("registration_code", name="uq_tournaments_registration_code"),
    )
    op.create_index(
        "idx_tournaments_status_start_at",
        "tournaments",
        ["status", "start_at"],
        unique=False,
    )
    op.create_index(
        "idx_tournaments_created_by_created_at",
        "tournaments",
        ["created_by", "created_at"],
        unique=False,
    )

    op.create_table(
        "tournament_participants",
        sa.Column("tournament_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("tournament_id", "user_id"),
    )
    op.create_index(
        "idx_tournament_participants_user_joined_at",
        "tournament_participants",
        ["user_id", "joined_at"],
        unique=False,
    )

    op.create_table(
        "tournament_messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tournament_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "char_length(body) >= 1 AND char_length(body) <= 1000",
            name="ck_tournament_messages_body_length",
        ),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_tournament_messages_tournament_created",
        "tournament_messages",
        ["tournament_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "contact_messages",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("contact_messages")
    op.drop_index("idx_tournament_messages_tournament_created", table_name="tournament_messages")
    op.drop_table("tournament_messages")
    op.drop_index(
        "idx_tournament_participants_user_joined_at",
        table_name="tournament_participants",
    )
    op.drop_table("tournament_participants")
    op.drop_index("idx_tournaments_created_by_created_at", table_name="tournaments")
    op.drop_index("idx_tournaments_status_start_at", table_name="tournaments")
    op.drop_table("tournaments")
    op.drop_table("users")
