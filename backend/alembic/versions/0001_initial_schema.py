"""Initial schema — users, auth_tokens, media_entries, ratings, rating_likes, favorites

Revision ID: 0001
Revises: —
Create Date: 2025-10-01 00:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "length(username) BETWEEN 3 AND 50",
            name="chk_username_length",
        ),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    # ── auth_tokens ───────────────────────────────────────────────────────────
    # Primary key on user_id: one live token per user, replaced by upsert
    op.create_table(
        "auth_tokens",
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("token", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("token", name="uq_auth_tokens_token"),
    )

    # ── media_entries ─────────────────────────────────────────────────────────
    op.create_table(
        "media_entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("media_type", sa.String(20), nullable=False),
        sa.Column("release_year", sa.Integer, nullable=True),
        sa.Column("genres", sa.Text, nullable=True),
        sa.Column("age_restriction", sa.String(20), nullable=True),
        sa.Column(
            "creator_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "media_type IN ('movie', 'series', 'game')",
            name="chk_media_type",
        ),
    )
    op.create_index("ix_media_entries_title", "media_entries", ["title"])
    op.create_index("ix_media_entries_creator_id", "media_entries", ["creator_id"])

    # ── ratings ───────────────────────────────────────────────────────────────
    op.create_table(
        "ratings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "media_id",
            sa.Uuid(),
            sa.ForeignKey("media_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("stars", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column("is_confirmed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("stars BETWEEN 1 AND 5", name="chk_rating_stars"),
        sa.UniqueConstraint("media_id", "user_id", name="uq_rating_media_user"),
    )
    op.create_index("ix_ratings_media_id", "ratings", ["media_id"])
    op.create_index("ix_ratings_user_id", "ratings", ["user_id"])

    # ── rating_likes ──────────────────────────────────────────────────────────
    op.create_table(
        "rating_likes",
        sa.Column(
            "rating_id",
            sa.Uuid(),
            sa.ForeignKey("ratings.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )

    # ── favorites ─────────────────────────────────────────────────────────────
    op.create_table(
        "favorites",
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "media_id",
            sa.Uuid(),
            sa.ForeignKey("media_entries.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("favorites")
    op.drop_table("rating_likes")
    op.drop_index("ix_ratings_user_id", table_name="ratings")
    op.drop_index("ix_ratings_media_id", table_name="ratings")
    op.drop_table("ratings")
    op.drop_index("ix_media_entries_creator_id", table_name="media_entries")
    op.drop_index("ix_media_entries_title", table_name="media_entries")
    op.drop_table("media_entries")
    op.drop_table("auth_tokens")
    op.drop_table("users")
