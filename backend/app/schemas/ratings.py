"""
Rating request/response schemas.
"""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class RatingRequest(BaseModel):
    """Create or update a rating."""

    stars: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)

    @field_validator("comment")
    @classmethod
    def blank_comment_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class RatingResponse(BaseModel):
    """A single rating as shown to a viewer."""

    id: UUID
    media_id: UUID
    user_id: UUID
    username: str
    stars: int
    comment: str | None = None
    is_confirmed: bool = False
    created_at: datetime
    like_count: int = 0
    liked_by_user: bool = False


class UserRatingResponse(RatingResponse):
    """A rating in a user's history, with the rated title."""

    media_title: str
