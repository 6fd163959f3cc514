"""
Auth API — /api/auth
────────────────────
Endpoints:
  POST /api/auth/register   — Create account (201)
  POST /api/auth/login      — Authenticate, return a session token
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.auth import CredentialsRequest, LoginResponse, RegisterResponse
from app.services.auth_service import login, register_user

router = APIRouter()


# ── Routes ────────────────────────────────────────────────────────────────────


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(payload: CredentialsRequest, db: Session = Depends(get_db)) -> RegisterResponse:
    """
    Create a new user account.

    Returns 201 + user id on success.
    Returns 400 for invalid input or an existing username.
    """
    user = register_user(db, username=payload.username, password=payload.password)
    return RegisterResponse(id=user.id, username=user.username)


@router.post("/login", response_model=LoginResponse)
def login_endpoint(payload: CredentialsRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """
    Authenticate with username + password and return a bearer token.

    Any earlier token of the same user stops working immediately.
    """
    user, token = login(db, username=payload.username, password=payload.password)
    return LoginResponse(token=token, username=user.username, user_id=user.id)
