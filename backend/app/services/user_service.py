"""
User-facing views — profile statistics, favourites, rating history,
leaderboard and genre-based recommendations.
"""
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.db.models import Favorite, MediaEntry, Rating, User
from app.services.media_service import map_media_summary, media_summary_query
from app.services.rating_service import list_user_ratings

RECOMMENDATION_MIN_STARS = 4


class UserNotFoundError(NotFound):
    """Raised when the target user does not exist."""

    default_message = "User not found"


def _user_or_raise(db: Session, username: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise UserNotFoundError()
    return user


def split_genres(genres: str | None) -> set[str]:
    """Parse a comma-joined genre string into lowercase tags."""
    if not genres:
        return set()
    return {tag.strip().lower() for tag in genres.split(",") if tag.strip()}


def get_profile(db: Session, username: str) -> dict:
    """Profile with rating count, mean stars given, and favourite count."""
    user = _user_or_raise(db, username)

    total_ratings, average_stars = (
        db.query(func.count(Rating.id), func.coalesce(func.avg(Rating.stars), 0))
        .filter(Rating.user_id == user.id)
        .one()
    )
    favorites_count = (
        db.query(func.count())
        .select_from(Favorite)
        .filter(Favorite.user_id == user.id)
        .scalar()
    )

    return {
        "id": user.id,
        "username": user.username,
        "created_at": user.created_at,
        "total_ratings": int(total_ratings or 0),
        "average_stars": float(average_stars or 0),
        "favorites_count": int(favorites_count or 0),
    }


def get_favorites(db: Session, username: str) -> list[dict]:
    """Media the user favourited, most recent favourite first."""
    user = _user_or_raise(db, username)

    query, _ = media_summary_query(db)
    rows = (
        query.join(Favorite, Favorite.media_id == MediaEntry.id)
        .filter(Favorite.user_id == user.id)
        .order_by(Favorite.created_at.desc(), MediaEntry.title.asc())
        .all()
    )
    return [map_media_summary(*row) for row in rows]


def get_user_ratings(db: Session, username: str, viewer_id: UUID) -> list[dict]:
    """The user's ratings that the viewer is allowed to read."""
    user = _user_or_raise(db, username)
    return list_user_ratings(db, user.id, viewer_id)


def get_leaderboard(db: Session, limit: int = 10) -> list[dict]:
    """Most active raters first; ties ordered by username."""
    rating_count = func.count(Rating.id).label("total_ratings")
    rows = (
        db.query(User.id, User.username, rating_count)
        .join(Rating, Rating.user_id == User.id)
        .group_by(User.id, User.username)
        .order_by(rating_count.desc(), User.username.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "rank": position,
            "user_id": user_id,
            "username": username,
            "total_ratings": int(total),
        }
        for position, (user_id, username, total) in enumerate(rows, start=1)
    ]


def get_recommendations(db: Session, user_id: UUID, limit: int = 10) -> list[dict]:
    """
    Unrated media sharing a genre tag with anything the user rated 4+ stars.

    Unlike the listing filter this compares parsed tags, so "War" does not
    match "Warcraft".
    """
    liked_genres: set[str] = set()
    for (genres,) in (
        db.query(MediaEntry.genres)
        .join(Rating, Rating.media_id == MediaEntry.id)
        .filter(Rating.user_id == user_id, Rating.stars >= RECOMMENDATION_MIN_STARS)
        .all()
    ):
        liked_genres |= split_genres(genres)

    if not liked_genres:
        return []

    rated_ids = select(Rating.media_id).where(Rating.user_id == user_id)
    query, columns = media_summary_query(db)
    rows = (
        query.filter(MediaEntry.id.not_in(rated_ids))
        .order_by(columns["average_rating"].desc(), MediaEntry.title.asc(), MediaEntry.id.asc())
        .all()
    )

    recommendations = [
        map_media_summary(*row)
        for row in rows
        if split_genres(row[0].genres) & liked_genres
    ]
    return recommendations[:limit]
