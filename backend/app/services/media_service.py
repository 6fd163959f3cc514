"""
Media business logic — filtered listing, detail aggregation, ownership-gated
writes and favourites.

Every filter value reaches the database as a bound parameter of a SQLAlchemy
expression; nothing here formats user input into SQL text.
"""
import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Query, Session

from app.core.errors import Conflict, Forbidden, NotFound, ValidationError
from app.db.models import Favorite, MediaEntry, MediaTypeEnum, Rating, User
from app.db.statements import insert_if_absent
from app.schemas.media import MediaEntryRequest, MediaListFilters, MediaSortEnum
from app.services.rating_service import list_media_ratings

logger = logging.getLogger(__name__)

MEDIA_TYPES = tuple(t.value for t in MediaTypeEnum)


class MediaNotFoundError(NotFound):
    """Raised when a media entry cannot be found."""

    default_message = "Media not found"


class NotMediaOwnerError(Forbidden):
    """Raised when a user tries to modify someone else's media entry."""


class InvalidMediaPayloadError(ValidationError):
    """Raised when media payload validation fails at service layer."""


class AlreadyFavoritedError(Conflict):
    default_message = "Already in favorites"


class FavoriteNotFoundError(NotFound):
    default_message = "Not in favorites"


# ── Aggregates ────────────────────────────────────────────────────────────────

def _rating_aggregates():
    """Per-media average and count over *all* ratings, confirmed or not."""
    return (
        select(
            Rating.media_id.label("media_id"),
            func.avg(Rating.stars).label("avg_stars"),
            func.count(Rating.id).label("rating_count"),
        )
        .group_by(Rating.media_id)
        .subquery("rating_aggregates")
    )


def media_summary_query(db: Session) -> tuple[Query, dict]:
    """
    Base query yielding ``(MediaEntry, creator_username, average_rating, total_ratings)``.

    Returns the query and its aggregate columns so callers can sort on them.
    """
    aggregates = _rating_aggregates()
    average_rating = func.coalesce(aggregates.c.avg_stars, 0).label("average_rating")
    total_ratings = func.coalesce(aggregates.c.rating_count, 0).label("total_ratings")

    query = (
        db.query(
            MediaEntry,
            User.username.label("creator_username"),
            average_rating,
            total_ratings,
        )
        .join(User, MediaEntry.creator_id == User.id)
        .outerjoin(aggregates, aggregates.c.media_id == MediaEntry.id)
    )
    return query, {"average_rating": average_rating, "total_ratings": total_ratings}


def map_media_summary(media: MediaEntry, creator_username: str, average_rating, total_ratings) -> dict:
    """Flatten a summary row; an entry without ratings reports exactly 0.0."""
    return {
        "id": media.id,
        "title": media.title,
        "description": media.description,
        "media_type": media.media_type,
        "release_year": media.release_year,
        "genres": media.genres,
        "age_restriction": media.age_restriction,
        "creator_id": media.creator_id,
        "created_at": media.created_at,
        "creator_username": creator_username,
        "average_rating": float(average_rating or 0),
        "total_ratings": int(total_ratings or 0),
    }


# ── Listing ───────────────────────────────────────────────────────────────────

def apply_media_filters(query: Query, filters: MediaListFilters) -> Query:
    """AND together every filter that was supplied; absent ones match everything."""
    if filters.search:
        query = query.filter(MediaEntry.title.icontains(filters.search, autoescape=True))
    if filters.type:
        query = query.filter(MediaEntry.media_type == filters.type)
    if filters.genre:
        # Substring over the joined string: "ar" also matches "War, Romance"
        query = query.filter(MediaEntry.genres.icontains(filters.genre, autoescape=True))
    if filters.year is not None:
        query = query.filter(MediaEntry.release_year == filters.year)
    if filters.age:
        query = query.filter(MediaEntry.age_restriction == filters.age)
    return query


def build_media_list_query(db: Session, filters: MediaListFilters) -> Query:
    """Filtered, deterministically ordered summary query."""
    query, columns = media_summary_query(db)
    query = apply_media_filters(query, filters)

    if filters.sort == MediaSortEnum.YEAR:
        leading = [MediaEntry.release_year.desc().nulls_last()]
    elif filters.sort == MediaSortEnum.RATING:
        leading = [columns["average_rating"].desc()]
    else:
        leading = []

    return query.order_by(*leading, MediaEntry.title.asc(), MediaEntry.id.asc())


def list_media(db: Session, filters: MediaListFilters) -> list[dict]:
    """Return media summaries matching *filters*."""
    rows = build_media_list_query(db, filters).all()
    return [map_media_summary(*row) for row in rows]


# ── Detail ────────────────────────────────────────────────────────────────────

def get_media_detail(db: Session, media_id: UUID, viewer_id: UUID) -> dict:
    """
    Single entry with its global aggregate and the viewer-visible ratings.

    The average and count include ratings the viewer cannot read; only the
    itemised list is filtered.
    """
    query, _ = media_summary_query(db)
    row = query.filter(MediaEntry.id == media_id).first()
    if row is None:
        raise MediaNotFoundError()

    detail = map_media_summary(*row)
    detail["ratings"] = list_media_ratings(db, media_id, viewer_id)
    return detail


# ── Writes ────────────────────────────────────────────────────────────────────

def validate_media_payload(payload: MediaEntryRequest) -> str:
    """Check required fields; returns the trimmed title."""
    title = (payload.title or "").strip()
    if not title:
        raise InvalidMediaPayloadError("Title is required")
    if payload.media_type not in MEDIA_TYPES:
        raise InvalidMediaPayloadError("Media type must be 'movie', 'series', or 'game'")
    return title


def get_media_by_id(db: Session, media_id: UUID) -> MediaEntry | None:
    """Fetch a single media entry by primary key."""
    return db.query(MediaEntry).filter(MediaEntry.id == media_id).first()


def _owned_media_or_raise(db: Session, media_id: UUID, user_id: UUID, action: str) -> MediaEntry:
    # Existence first so ownership of missing ids is never revealed
    media = get_media_by_id(db, media_id)
    if media is None:
        raise MediaNotFoundError()
    if media.creator_id != user_id:
        logger.info("User %s denied %s on media %s", user_id, action, media_id)
        raise NotMediaOwnerError(f"Only the creator can {action} this media")
    return media


def create_media(db: Session, creator_id: UUID, payload: MediaEntryRequest) -> MediaEntry:
    """Insert a new entry owned by *creator_id*."""
    title = validate_media_payload(payload)

    media = MediaEntry(
        title=title,
        description=payload.description,
        media_type=payload.media_type,
        release_year=payload.release_year,
        genres=payload.genres,
        age_restriction=payload.age_restriction,
        creator_id=creator_id,
    )
    db.add(media)
    db.commit()
    db.refresh(media)
    return media


def update_media(db: Session, media_id: UUID, user_id: UUID, payload: MediaEntryRequest) -> MediaEntry:
    """Replace the editable fields of an entry. Only the creator may do this."""
    media = _owned_media_or_raise(db, media_id, user_id, "edit")
    title = validate_media_payload(payload)

    media.title = title
    media.description = payload.description
    media.media_type = payload.media_type
    media.release_year = payload.release_year
    media.genres = payload.genres
    media.age_restriction = payload.age_restriction

    db.add(media)
    db.commit()
    db.refresh(media)
    return media


def delete_media(db: Session, media_id: UUID, user_id: UUID) -> None:
    """Delete an entry together with its ratings, their likes and favourites."""
    media = _owned_media_or_raise(db, media_id, user_id, "delete")
    db.delete(media)
    db.commit()
    logger.info("User %s deleted media %s", user_id, media_id)


# ── Favourites ────────────────────────────────────────────────────────────────

def add_favorite(db: Session, user_id: UUID, media_id: UUID) -> None:
    """Favourite a media entry; a second attempt is a conflict, not a second row."""
    if get_media_by_id(db, media_id) is None:
        raise MediaNotFoundError()

    created = insert_if_absent(
        db,
        Favorite,
        {"user_id": user_id, "media_id": media_id},
        index_elements=["user_id", "media_id"],
    )
    if not created:
        db.rollback()
        raise AlreadyFavoritedError()
    db.commit()


def remove_favorite(db: Session, user_id: UUID, media_id: UUID) -> None:
    """Remove the caller's favourite; NotFound when there was none."""
    count = (
        db.query(Favorite)
        .filter(Favorite.user_id == user_id, Favorite.media_id == media_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if count == 0:
        raise FavoriteNotFoundError()
