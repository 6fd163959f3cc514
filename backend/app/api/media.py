"""
Media API — /api/media
──────────────────────
Endpoints:
  GET    /api/media                    — Filtered, sorted list with rating aggregates
  POST   /api/media                    — Create an entry (caller becomes creator)
  GET    /api/media/{media_id}         — Detail + ratings visible to the caller
  PUT    /api/media/{media_id}         — Edit own entry
  DELETE /api/media/{media_id}         — Delete own entry (cascades)
  POST   /api/media/{media_id}/favorite — Add to caller's favourites
  DELETE /api/media/{media_id}/favorite — Remove from caller's favourites
  POST   /api/media/{media_id}/ratings  — Rate an entry
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import get_current_user_id
from app.schemas.media import (
    MediaDetailResponse,
    MediaEntryRequest,
    MediaEntryResponse,
    MediaListFilters,
    MediaSummaryResponse,
)
from app.schemas.ratings import RatingRequest, RatingResponse
from app.schemas.users import MessageResponse
from app.services.media_service import (
    add_favorite,
    create_media,
    delete_media,
    get_media_detail,
    list_media,
    remove_favorite,
    update_media,
)
from app.services.rating_service import create_rating

router = APIRouter()


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("", response_model=list[MediaSummaryResponse])
def list_media_endpoint(
    search: str | None = Query(None, description="Case-insensitive title substring"),
    media_type: str | None = Query(None, alias="type", description="movie | series | game"),
    genre: str | None = Query(None, description="Case-insensitive substring of genres"),
    year: int | None = Query(None, description="Exact release year"),
    age: str | None = Query(None, description="Exact age restriction"),
    sort: str | None = Query(None, description="title (default) | year | rating"),
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[dict]:
    filters = MediaListFilters(
        search=search,
        type=media_type,
        genre=genre,
        year=year,
        age=age,
        sort=sort,
    )
    return list_media(db, filters)


@router.post("", response_model=MediaEntryResponse, status_code=status.HTTP_201_CREATED)
def create_media_endpoint(
    payload: MediaEntryRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MediaEntryResponse:
    media = create_media(db, current_user_id, payload)
    return MediaEntryResponse.model_validate(media)


@router.get("/{media_id}", response_model=MediaDetailResponse)
def get_media_endpoint(
    media_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict:
    return get_media_detail(db, media_id, current_user_id)


@router.put("/{media_id}", response_model=MediaEntryResponse)
def update_media_endpoint(
    media_id: UUID,
    payload: MediaEntryRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MediaEntryResponse:
    media = update_media(db, media_id, current_user_id, payload)
    return MediaEntryResponse.model_validate(media)


@router.delete("/{media_id}", response_model=MessageResponse)
def delete_media_endpoint(
    media_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    delete_media(db, media_id, current_user_id)
    return MessageResponse(message="Media deleted successfully")


@router.post("/{media_id}/favorite", response_model=MessageResponse)
def add_favorite_endpoint(
    media_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    add_favorite(db, current_user_id, media_id)
    return MessageResponse(message="Added to favorites")


@router.delete("/{media_id}/favorite", response_model=MessageResponse)
def remove_favorite_endpoint(
    media_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    remove_favorite(db, current_user_id, media_id)
    return MessageResponse(message="Removed from favorites")


@router.post(
    "/{media_id}/ratings",
    response_model=RatingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_rating_endpoint(
    media_id: UUID,
    payload: RatingRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict:
    return create_rating(db, current_user_id, media_id, payload.stars, payload.comment)
