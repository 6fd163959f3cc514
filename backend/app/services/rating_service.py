"""
Rating business logic — create/edit/confirm, likes, and per-viewer listings.

Visibility rule: a rating is shown to a viewer when it is confirmed or the
viewer wrote it. Aggregates (average, count) ignore this rule and live in
media_service.
"""
import logging
from uuid import UUID

from sqlalchemy import exists, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from app.core.errors import Conflict, Forbidden, NotFound, ValidationError
from app.db.models import MediaEntry, Rating, RatingLike, User
from app.db.statements import insert_if_absent

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


class RatingNotFoundError(NotFound):
    """Raised when a rating does not exist or is hidden from the caller."""

    default_message = "Rating not found"


class NotRatingOwnerError(Forbidden):
    """Raised when a user tries to modify another user's rating."""


class DuplicateRatingError(Conflict):
    """Raised when a user already rated this media entry."""

    default_message = "You have already rated this media"


class AlreadyLikedError(Conflict):
    default_message = "Rating already liked"


class LikeNotFoundError(NotFound):
    default_message = "Rating not liked"


class RatingMediaNotFoundError(NotFound):
    default_message = "Media not found"


# ── Visibility ────────────────────────────────────────────────────────────────

def visible_to(viewer_id: UUID):
    """SQL predicate: confirmed, or authored by the viewer."""
    return or_(Rating.is_confirmed.is_(True), Rating.user_id == viewer_id)


def visible_ratings_query(db: Session, viewer_id: UUID) -> Query:
    """
    Ratings the viewer may read, newest first.

    Yields ``(Rating, username, media_title, like_count, liked_by_user)``.
    """
    like_count = (
        select(func.count())
        .select_from(RatingLike)
        .where(RatingLike.rating_id == Rating.id)
        .scalar_subquery()
        .label("like_count")
    )
    liked_by_user = (
        exists()
        .where(RatingLike.rating_id == Rating.id, RatingLike.user_id == viewer_id)
        .label("liked_by_user")
    )

    return (
        db.query(
            Rating,
            User.username.label("username"),
            MediaEntry.title.label("media_title"),
            like_count,
            liked_by_user,
        )
        .join(User, Rating.user_id == User.id)
        .join(MediaEntry, Rating.media_id == MediaEntry.id)
        .filter(visible_to(viewer_id))
        .order_by(Rating.created_at.desc(), Rating.id.asc())
    )


def _build_rating_dict(
    rating: Rating,
    username: str,
    media_title: str | None = None,
    like_count: int = 0,
    liked_by_user: bool = False,
) -> dict:
    data = {
        "id": rating.id,
        "media_id": rating.media_id,
        "user_id": rating.user_id,
        "username": username,
        "stars": rating.stars,
        "comment": rating.comment,
        "is_confirmed": bool(rating.is_confirmed),
        "created_at": rating.created_at,
        "like_count": int(like_count or 0),
        "liked_by_user": bool(liked_by_user),
    }
    if media_title is not None:
        data["media_title"] = media_title
    return data


def list_media_ratings(db: Session, media_id: UUID, viewer_id: UUID) -> list[dict]:
    """Ratings on one media entry that *viewer_id* may see."""
    rows = visible_ratings_query(db, viewer_id).filter(Rating.media_id == media_id).all()
    return [
        _build_rating_dict(rating, username, None, likes, liked)
        for rating, username, _title, likes, liked in rows
    ]


def list_user_ratings(db: Session, author_id: UUID, viewer_id: UUID) -> list[dict]:
    """Ratings written by *author_id* that *viewer_id* may see, with media titles."""
    rows = visible_ratings_query(db, viewer_id).filter(Rating.user_id == author_id).all()
    return [
        _build_rating_dict(rating, username, title, likes, liked)
        for rating, username, title, likes, liked in rows
    ]


# ── Lookups ───────────────────────────────────────────────────────────────────

def _validate_stars(stars: int) -> None:
    if not isinstance(stars, int) or isinstance(stars, bool) or not MIN_STARS <= stars <= MAX_STARS:
        raise ValidationError(f"Stars must be between {MIN_STARS} and {MAX_STARS}")


def _owned_rating_or_raise(db: Session, rating_id: UUID, user_id: UUID) -> Rating:
    rating = db.query(Rating).filter(Rating.id == rating_id).first()
    if rating is None:
        raise RatingNotFoundError()
    if rating.user_id != user_id:
        logger.info("User %s denied change to rating %s", user_id, rating_id)
        raise NotRatingOwnerError("You can only modify your own ratings")
    return rating


def _visible_rating_or_raise(db: Session, rating_id: UUID, viewer_id: UUID) -> Rating:
    rating = (
        db.query(Rating)
        .filter(Rating.id == rating_id, visible_to(viewer_id))
        .first()
    )
    if rating is None:
        raise RatingNotFoundError()
    return rating


def _rating_response(db: Session, rating: Rating, viewer_id: UUID) -> dict:
    row = visible_ratings_query(db, viewer_id).filter(Rating.id == rating.id).one()
    rating, username, _title, likes, liked = row
    return _build_rating_dict(rating, username, None, likes, liked)


# ── Writes ────────────────────────────────────────────────────────────────────

def create_rating(
    db: Session,
    user_id: UUID,
    media_id: UUID,
    stars: int,
    comment: str | None = None,
) -> dict:
    """Rate a media entry. New ratings start unconfirmed (author-only)."""
    _validate_stars(stars)

    if db.query(MediaEntry.id).filter(MediaEntry.id == media_id).first() is None:
        raise RatingMediaNotFoundError()

    rating = Rating(
        media_id=media_id,
        user_id=user_id,
        stars=stars,
        comment=comment,
        is_confirmed=False,
    )
    db.add(rating)

    try:
        db.flush()  # uq_rating_media_user raises here
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateRatingError() from exc

    db.commit()
    db.refresh(rating)
    return _rating_response(db, rating, user_id)


def update_rating(
    db: Session,
    user_id: UUID,
    rating_id: UUID,
    stars: int,
    comment: str | None = None,
) -> dict:
    """Edit own rating. A changed comment has to be confirmed again."""
    _validate_stars(stars)
    rating = _owned_rating_or_raise(db, rating_id, user_id)

    if comment != rating.comment:
        rating.is_confirmed = False
    rating.stars = stars
    rating.comment = comment

    db.add(rating)
    db.commit()
    db.refresh(rating)
    return _rating_response(db, rating, user_id)


def delete_rating(db: Session, user_id: UUID, rating_id: UUID) -> None:
    """Delete own rating together with its likes."""
    rating = _owned_rating_or_raise(db, rating_id, user_id)
    db.delete(rating)
    db.commit()


def confirm_rating(db: Session, user_id: UUID, rating_id: UUID) -> None:
    """Publish own rating's comment to every viewer."""
    rating = _owned_rating_or_raise(db, rating_id, user_id)
    rating.is_confirmed = True
    db.add(rating)
    db.commit()


def like_rating(db: Session, user_id: UUID, rating_id: UUID) -> None:
    """Like a rating the caller can see; liking twice is a conflict."""
    _visible_rating_or_raise(db, rating_id, user_id)

    created = insert_if_absent(
        db,
        RatingLike,
        {"rating_id": rating_id, "user_id": user_id},
        index_elements=["rating_id", "user_id"],
    )
    if not created:
        db.rollback()
        raise AlreadyLikedError()
    db.commit()


def unlike_rating(db: Session, user_id: UUID, rating_id: UUID) -> None:
    """Remove the caller's like; NotFound when there was none."""
    count = (
        db.query(RatingLike)
        .filter(RatingLike.rating_id == rating_id, RatingLike.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if count == 0:
        raise LikeNotFoundError()
