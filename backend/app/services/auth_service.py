"""
Auth business logic — registration, login, session tokens.

All DB writes go through this layer (not directly in routes).
"""
import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import Conflict, Unauthenticated, ValidationError
from app.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)
from app.db.models import AuthToken, User
from app.db.statements import upsert

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6


# ── Custom exceptions ────────────────────────────────────────────────────────


class DuplicateUserError(Conflict):
    """Raised when registration conflicts with an existing username."""

    default_message = "Username already exists"


class InvalidCredentialsError(Unauthenticated):
    """Raised for both an unknown username and a wrong password."""

    default_message = "Invalid username or password"


# ── Validation ───────────────────────────────────────────────────────────────


def _require_credentials(username: str | None, password: str | None) -> None:
    if not username or not username.strip() or not password or not password.strip():
        raise ValidationError("Username and password are required")


def validate_registration(username: str | None, password: str | None) -> None:
    """Check registration input; raises ValidationError on the first problem."""
    _require_credentials(username, password)

    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")


# ── Service functions ────────────────────────────────────────────────────────


def register_user(db: Session, username: str | None, password: str | None) -> User:
    """
    Register a new user.

    - Validates lengths before touching the DB.
    - Hashes the password with bcrypt.
    - Inserts into DB; the unique constraint on username turns a duplicate
      (including a concurrent one) into DuplicateUserError.
    """
    validate_registration(username, password)

    user = User(username=username, password_hash=hash_password(password))
    db.add(user)

    try:
        db.flush()  # trigger INSERT; raises on duplicate
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateUserError() from exc

    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate_user(db: Session, username: str | None, password: str | None) -> User:
    """Verify credentials and return the User; any mismatch raises InvalidCredentialsError."""
    _require_credentials(username, password)

    user = db.query(User).filter(User.username == username).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for username %r", username)
        raise InvalidCredentialsError()

    return user


def issue_session_token(db: Session, user: User) -> str:
    """
    Create a fresh token for *user* and make it the only live one.

    The write is a single upsert keyed by user_id, so the previous token stops
    resolving as soon as this commits.
    """
    token = create_session_token(user.id, user.username)
    upsert(
        db,
        AuthToken,
        {"user_id": user.id, "token": token, "created_at": datetime.now(timezone.utc)},
        index_elements=["user_id"],
        update_columns=["token", "created_at"],
    )
    db.commit()
    logger.info("Issued session token for user %s", user.id)
    return token


def login(db: Session, username: str | None, password: str | None) -> tuple[User, str]:
    """Authenticate and issue a session token in one step."""
    user = authenticate_user(db, username, password)
    return user, issue_session_token(db, user)


def resolve_session_token(db: Session, token: str | None) -> UUID:
    """
    Resolve a bearer token to the caller's user id.

    A missing, tampered or replaced token raises the same Unauthenticated error.
    """
    if token is None or decode_session_token(token) is None:
        raise Unauthenticated()

    user_id = (
        db.query(AuthToken.user_id)
        .filter(AuthToken.token == token)
        .scalar()
    )
    if user_id is None:
        raise Unauthenticated()

    return user_id


def get_user_by_username(db: Session, username: str) -> User | None:
    """Fetch a single user by username."""
    return db.query(User).filter(User.username == username).first()
