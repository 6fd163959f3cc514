"""
SQLAlchemy ORM models.

Schema mirrors alembic/versions/0001_initial_schema.py: column names,
constraints and cascades must stay in sync. Uniqueness that the services rely
on (usernames, one token per user, one favourite / like / rating per pair)
lives in constraints here, never in application-side existence checks.

Types are the dialect-neutral ones (``Uuid``, ``DateTime(timezone=True)``) so
the same models run on PostgreSQL in production and SQLite in tests.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ─────────────────────────────────────────────────────────────────────

class MediaTypeEnum(str, PyEnum):
    MOVIE = "movie"
    SERIES = "series"
    GAME = "game"


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Models ────────────────────────────────────────────────────────────────────

class User(Base):
    """
    Application user.

    password_hash is a bcrypt digest and never leaves the service layer.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="Unique username (3-50 chars)",
    )
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    auth_token = relationship(
        "AuthToken",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )
    media_entries = relationship("MediaEntry", back_populates="creator")
    ratings = relationship("Rating", back_populates="user")

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class AuthToken(Base):
    """
    The single live session token of a user.

    Keyed by user_id, so issuing a token is an upsert that replaces the
    previous one.
    """
    __tablename__ = "auth_tokens"

    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    token = Column(Text, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user = relationship("User", back_populates="auth_token")


class MediaEntry(Base):
    """
    A movie, series or game that users can rate and favourite.

    genres is a free-text, comma-joined tag list ("Action, Sci-Fi").
    """
    __tablename__ = "media_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    media_type = Column(String(20), nullable=False)
    release_year = Column(Integer, nullable=True)
    genres = Column(Text, nullable=True)
    age_restriction = Column(String(20), nullable=True)
    creator_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "media_type IN ('movie', 'series', 'game')",
            name="chk_media_type",
        ),
    )

    # Ratings, likes and favourites go with the entry
    creator = relationship("User", back_populates="media_entries")
    ratings = relationship(
        "Rating",
        back_populates="media",
        cascade="all, delete-orphan",
    )
    favorites = relationship(
        "Favorite",
        back_populates="media",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<MediaEntry id={self.id} title={self.title!r} year={self.release_year}>"


class Rating(Base):
    """
    One user's star rating (and optional comment) on a media entry.

    Unconfirmed ratings are visible only to their author; they still count
    towards the media's average and total.
    """
    __tablename__ = "ratings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    media_id = Column(
        Uuid,
        ForeignKey("media_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stars = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    is_confirmed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("stars BETWEEN 1 AND 5", name="chk_rating_stars"),
        UniqueConstraint("media_id", "user_id", name="uq_rating_media_user"),
    )

    # Relationships
    media = relationship("MediaEntry", back_populates="ratings")
    user = relationship("User", back_populates="ratings")
    likes = relationship(
        "RatingLike",
        back_populates="rating",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Rating user={self.user_id} media={self.media_id} stars={self.stars}>"


class RatingLike(Base):
    """One like per user per rating."""
    __tablename__ = "rating_likes"

    rating_id = Column(
        Uuid,
        ForeignKey("ratings.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    rating = relationship("Rating", back_populates="likes")
    user = relationship("User")


class Favorite(Base):
    """One favourite per user per media entry."""
    __tablename__ = "favorites"

    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    media_id = Column(
        Uuid,
        ForeignKey("media_entries.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    media = relationship("MediaEntry", back_populates="favorites")
    user = relationship("User")
