"""
SQLAlchemy engine + session factory.

The factory is built explicitly and handed to ``create_app``; route handlers
receive a per-request session through the *get_db* dependency.
"""
from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for *database_url*; SQLite URLs get a shared in-process pool."""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            # One connection shared across threads so in-memory DBs survive
            poolclass=StaticPool,
            echo=echo,
        )

        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
            # SQLite ignores ON DELETE CASCADE unless asked per connection
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        database_url,
        # Health-check connections before handing them to the app
        pool_pre_ping=True,
        # Keep up to 10 persistent connections per worker process
        pool_size=10,
        # Allow up to 20 extra connections under burst load
        max_overflow=20,
        echo=echo,
    )


def build_session_factory(database_url: str, echo: bool = False) -> sessionmaker:
    """Return a configured ``sessionmaker`` bound to a fresh engine."""
    return sessionmaker(
        bind=build_engine(database_url, echo=echo),
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # Avoid lazy-load errors after commit
    )


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a scoped DB session from the app's factory.

    Usage:
        @router.get("/items")
        def list_items(db: Session = Depends(get_db)):
            ...
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
