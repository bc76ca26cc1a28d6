"""JSON auth endpoints for the SPA.

/auth/register and /auth/login return { accessToken, refreshToken, user } so
the client can keep the tokens in memory and go straight to its dashboard.
Self-registration always creates a student; admins come from seeding.
"""

from __future__ import annotations

import logging
import re
from typing import Annotated
from uuid import UUID

import jwt as pyjwt
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from app.api.dependencies import StoreDep, require_user
from app.api.errors import to_http
from app.core.errors import CourseError
from app.models.principal import Principal
from app.models.user import User
from app.services import auth_service, token_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# --- Request / Response schemas -------------------------------------------


class LoginIn(BaseModel):
    email: str
    password: str


class RegisterIn(BaseModel):
    name: str
    email: str
    password: str


class RefreshIn(BaseModel):
    refreshToken: str


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    role: str
    current_phase: int
    awaiting_approval_phase: int | None = None

    @classmethod
    def of(cls, user: User) -> UserOut:
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            role=user.role,
            current_phase=user.current_phase,
            awaiting_approval_phase=user.awaiting_approval_phase,
        )


class AuthResponse(BaseModel):
    accessToken: str
    refreshToken: str
    user: UserOut


class AccessTokenOut(BaseModel):
    accessToken: str


def _issue(user: User) -> AuthResponse:
    return AuthResponse(
        accessToken=token_service.create_access_token(sub=str(user.id), roles=[user.role]),
        refreshToken=token_service.create_refresh_token(sub=str(user.id)),
        user=UserOut.of(user),
    )


# --- POST /auth/register --------------------------------------------------


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(payload: RegisterIn, store: StoreDep) -> AuthResponse:
    email = payload.email.lower().strip()
    if not _EMAIL_RE.match(email):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid email address",
        )
    if not payload.name.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Name is required",
        )

    try:
        user = await auth_service.register_user(
            store.users, email=email, password=payload.password, name=payload.name
        )
    except CourseError as exc:
        raise to_http(exc) from None
    return _issue(user)


# --- POST /auth/login -----------------------------------------------------


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginIn, store: StoreDep) -> AuthResponse:
    email = payload.email.lower().strip()
    user = await auth_service.authenticate_user(store.users, email, payload.password)
    if user is None:
        logger.warning("Login failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    logger.info("Login succeeded user_id=%s role=%s", user.id, user.role)
    return _issue(user)


# --- POST /auth/refresh ---------------------------------------------------


@router.post("/refresh", response_model=AccessTokenOut)
async def refresh(payload: RefreshIn, store: StoreDep) -> AccessTokenOut:
    """New access token for the user's *current* role and active state."""
    try:
        claims = token_service.decode_refresh_token(payload.refreshToken)
    except pyjwt.ExpiredSignatureError:
        logger.warning("Expired refresh token presented")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token expired",
        ) from None
    except pyjwt.InvalidTokenError as e:
        logger.warning("Invalid refresh token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        ) from None

    try:
        user = await store.users.get_by_id(UUID(claims["sub"]))
    except ValueError:
        user = None
    if user is None or not user.is_active:
        logger.warning("Refresh for unknown or inactive user")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )
    return AccessTokenOut(
        accessToken=token_service.create_access_token(sub=str(user.id), roles=[user.role])
    )


# --- GET /auth/me ---------------------------------------------------------


@router.get("/me", response_model=UserOut)
async def me(
    principal: Annotated[Principal, Depends(require_user)],
    store: StoreDep,
) -> UserOut:
    user = await store.users.get_by_id(principal.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserOut.of(user)
