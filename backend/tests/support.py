"""
Shared fixtures for the service and API tests: an in-memory database and a
few builders that go through the real service functions.
"""
from app.db.models import Base, MediaEntry, User
from app.db.session import build_session_factory
from app.schemas.media import MediaEntryRequest
from app.services.auth_service import register_user
from app.services.media_service import create_media

DEFAULT_PASSWORD = "password1"


def make_session_factory():
    """Fresh in-memory SQLite database with every table created."""
    factory = build_session_factory("sqlite://")
    Base.metadata.create_all(factory.kw["bind"])
    return factory


def make_user(db, username: str, password: str = DEFAULT_PASSWORD) -> User:
    return register_user(db, username=username, password=password)


def make_media(db, creator: User, title: str, **fields) -> MediaEntry:
    payload = MediaEntryRequest(
        title=title,
        media_type=fields.pop("media_type", "movie"),
        **fields,
    )
    return create_media(db, creator.id, payload)
