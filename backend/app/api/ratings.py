"""
Ratings API — /api/ratings
──────────────────────────
Endpoints:
  PUT    /api/ratings/{rating_id}          — Edit own rating
  DELETE /api/ratings/{rating_id}          — Delete own rating
  PUT    /api/ratings/{rating_id}/confirm  — Make own comment public
  POST   /api/ratings/{rating_id}/like     — Like a visible rating
  DELETE /api/ratings/{rating_id}/unlike   — Remove own like

Ratings are created under /api/media/{media_id}/ratings.
"""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import get_current_user_id
from app.schemas.ratings import RatingRequest, RatingResponse
from app.schemas.users import MessageResponse
from app.services.rating_service import (
    confirm_rating,
    delete_rating,
    like_rating,
    unlike_rating,
    update_rating,
)

router = APIRouter()


@router.put("/{rating_id}", response_model=RatingResponse)
def update_rating_endpoint(
    rating_id: UUID,
    payload: RatingRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict:
    return update_rating(db, current_user_id, rating_id, payload.stars, payload.comment)


@router.delete("/{rating_id}", response_model=MessageResponse)
def delete_rating_endpoint(
    rating_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    delete_rating(db, current_user_id, rating_id)
    return MessageResponse(message="Rating deleted successfully")


@router.put("/{rating_id}/confirm", response_model=MessageResponse)
def confirm_rating_endpoint(
    rating_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    confirm_rating(db, current_user_id, rating_id)
    return MessageResponse(message="Comment confirmed")


@router.post("/{rating_id}/like", response_model=MessageResponse)
def like_rating_endpoint(
    rating_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    like_rating(db, current_user_id, rating_id)
    return MessageResponse(message="Rating liked")


@router.delete("/{rating_id}/unlike", response_model=MessageResponse)
def unlike_rating_endpoint(
    rating_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    unlike_rating(db, current_user_id, rating_id)
    return MessageResponse(message="Like removed")
