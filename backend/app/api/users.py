"""
Users API — /api
────────────────
Endpoints:
  GET /api/users/{username}/profile    — Profile + rating statistics
  GET /api/users/{username}/favorites  — Favourited media
  GET /api/users/{username}/ratings    — Ratings visible to the caller
  GET /api/leaderboard                 — Most active raters
  GET /api/recommendations             — Genre-based picks for the caller
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps.auth import get_current_user_id
from app.schemas.media import MediaSummaryResponse
from app.schemas.ratings import UserRatingResponse
from app.schemas.users import LeaderboardEntryResponse, UserProfileResponse
from app.services.user_service import (
    get_favorites,
    get_leaderboard,
    get_profile,
    get_recommendations,
    get_user_ratings,
)

router = APIRouter()


@router.get("/users/{username}/profile", response_model=UserProfileResponse)
def get_profile_endpoint(
    username: str,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> dict:
    return get_profile(db, username)


@router.get("/users/{username}/favorites", response_model=list[MediaSummaryResponse])
def get_favorites_endpoint(
    username: str,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[dict]:
    return get_favorites(db, username)


@router.get("/users/{username}/ratings", response_model=list[UserRatingResponse])
def get_user_ratings_endpoint(
    username: str,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[dict]:
    return get_user_ratings(db, username, current_user_id)


@router.get("/leaderboard", response_model=list[LeaderboardEntryResponse])
def get_leaderboard_endpoint(
    limit: int = Query(10, ge=1, le=100),
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[dict]:
    return get_leaderboard(db, limit=limit)


@router.get("/recommendations", response_model=list[MediaSummaryResponse])
def get_recommendations_endpoint(
    limit: int = Query(10, ge=1, le=50),
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[dict]:
    return get_recommendations(db, current_user_id, limit=limit)
