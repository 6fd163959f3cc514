"""
Auth dependency — shared across all protected endpoints.

Usage in any route:
    from app.deps.auth import get_current_user_id

    @router.get("/protected")
    def protected(user_id: UUID = Depends(get_current_user_id)):
        ...
"""
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.db.session import get_db
from app.services.auth_service import resolve_session_token

# auto_error=False so a missing header reaches resolve_session_token and
# gets the same 401 envelope as every other auth failure
bearer_scheme = HTTPBearer(auto_error=False)

BEARER_SCHEME = "Bearer"


def bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    """Raw token from ``Authorization: Bearer <token>``; None for any other shape."""
    if credentials is None or credentials.scheme != BEARER_SCHEME:
        return None
    return credentials.credentials or None


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> UUID:
    """
    Resolve the bearer token to the caller's id.

    Raises Unauthenticated (401) on any failure. A missing header, wrong
    scheme, tampered token or a token replaced by a newer login all look
    the same to the client.
    """
    return resolve_session_token(db, bearer_token(credentials))


def _resolve_with_new_session(request: Request, token: str | None) -> UUID:
    db = request.app.state.session_factory()
    try:
        return resolve_session_token(db, token)
    finally:
        db.close()


async def authenticate_request(request: Request) -> UUID:
    """
    Resolve the caller of *request* outside the dependency graph.

    Used where FastAPI rejects a request before its dependencies run (an
    unparseable body), so that unauthenticated callers still get 401.
    """
    credentials = await bearer_scheme(request)
    return await run_in_threadpool(_resolve_with_new_session, request, bearer_token(credentials))
