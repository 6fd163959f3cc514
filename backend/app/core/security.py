"""
Password hashing and session token encoding.
Never import DB models here — keep this layer pure.
"""
import uuid
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

# bcrypt context — auto-upgrades deprecated schemes
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# ── Password helpers ──────────────────────────────────────────────────────────

def hash_password(plain: str) -> str:
    """Return a bcrypt hash of *plain*."""
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if *plain* matches the stored *hashed* value."""
    return pwd_context.verify(plain, hashed)


# ── Token helpers ─────────────────────────────────────────────────────────────

def create_session_token(subject: Any, username: str) -> str:
    """
    Create a signed session token.

    Args:
        subject: The user's UUID (converted to str).
        username: Embedded for debuggability only; callers must not rely on it.

    Returns:
        Encoded JWT string. There is no ``exp`` claim: a token stays valid
        until the user's next login replaces it in ``auth_tokens``.
    """
    payload = {
        "sub": str(subject),
        "username": username,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str) -> str | None:
    """
    Decode a session token and return the *sub* claim (user UUID string).
    Returns None on any error (tampered, malformed, wrong key).
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
        return payload.get("sub")
    except JWTError:
        return None
