"""
Media request/response schemas.
"""
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.ratings import RatingResponse

# Column sizes of media_entries; longer values are rejected with 400
TITLE_MAX_LENGTH = 255
AGE_RESTRICTION_MAX_LENGTH = 20
MIN_RELEASE_YEAR = 1800
MAX_RELEASE_YEAR = 2100


class MediaSortEnum(str, Enum):
    """Recognised sort keys; anything else falls back to TITLE."""

    TITLE = "title"
    YEAR = "year"
    RATING = "rating"

    @classmethod
    def parse(cls, value: str | None) -> "MediaSortEnum":
        try:
            return cls(value)
        except ValueError:
            return cls.TITLE


class MediaListFilters(BaseModel):
    """Optional, AND-combined filters for GET /api/media."""

    search: str | None = None
    type: str | None = None
    genre: str | None = None
    year: int | None = None
    age: str | None = None
    sort: MediaSortEnum = MediaSortEnum.TITLE

    @field_validator("sort", mode="before")
    @classmethod
    def fallback_sort(cls, v: object) -> MediaSortEnum:
        if isinstance(v, MediaSortEnum):
            return v
        return MediaSortEnum.parse(v if isinstance(v, str) else None)


class MediaEntryRequest(BaseModel):
    """Payload for POST /api/media and PUT /api/media/{media_id}.

    title and media_type are checked in the service so the messages match
    across create and update.
    """

    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    media_type: str | None = None
    release_year: int | None = Field(default=None, ge=MIN_RELEASE_YEAR, le=MAX_RELEASE_YEAR)
    genres: str | None = None
    age_restriction: str | None = Field(default=None, max_length=AGE_RESTRICTION_MAX_LENGTH)

    @field_validator("genres", mode="before")
    @classmethod
    def join_genre_list(cls, v: object) -> object:
        # Accept ["Action", "Drama"] as well as "Action, Drama"
        if isinstance(v, list):
            return ", ".join(str(g).strip() for g in v if str(g).strip())
        return v


class MediaEntryResponse(BaseModel):
    """A media entry as stored."""

    id: UUID
    title: str
    description: str | None = None
    media_type: str
    release_year: int | None = None
    genres: str | None = None
    age_restriction: str | None = None
    creator_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MediaSummaryResponse(MediaEntryResponse):
    """List item with creator name and global rating aggregate."""

    creator_username: str
    average_rating: float = 0.0
    total_ratings: int = 0


class MediaDetailResponse(MediaSummaryResponse):
    """Single entry plus the ratings the viewer is allowed to see."""

    ratings: list[RatingResponse] = []
