"""
User view schemas — profile, leaderboard.
"""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Envelope for actions that only report success."""

    message: str


class UserProfileResponse(BaseModel):
    """Public profile with rating statistics."""

    id: UUID
    username: str
    created_at: datetime
    total_ratings: int = 0
    average_stars: float = 0.0
    favorites_count: int = 0


class LeaderboardEntryResponse(BaseModel):
    """One user on the leaderboard, ranked by number of ratings."""

    rank: int
    user_id: UUID
    username: str
    total_ratings: int
