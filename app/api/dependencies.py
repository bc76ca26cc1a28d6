from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from app.db import engine
from app.models.principal import Principal
from app.repos.store import Store, memory_store, pg_store
from app.services import token_service

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_user(
    request: Request,
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token and return the caller as a Principal.

    Also records the caller on ``request.state`` so the request log line
    carries ``user_id``.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    try:
        UUID(claims["sub"])
    except ValueError:
        logger.warning("Token with non-UUID subject rejected")
        raise _unauthorized("Invalid token") from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    request.state.user_id = principal.user_id
    logger.debug("Token validated for user=%s roles=%s", principal.user_id, principal.roles)
    return principal


def require_role(role: str):
    """Dependency factory: demand a specific role.

    Usage: Depends(require_role("admin"))
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s missing role=%s",
                principal.user_id,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


async def get_store() -> AsyncGenerator[Store, None]:
    """The repositories for this request.

    In-memory when DATABASE_URL is unset; otherwise Postgres repositories
    sharing one session that commits when the request succeeds.
    """
    if engine.async_session_factory is None:
        yield memory_store
        return
    async with engine.session_scope() as session:
        yield pg_store(session)


StudentPrincipal = Annotated[Principal, Depends(require_role("student"))]
AdminPrincipal = Annotated[Principal, Depends(require_role("admin"))]
StoreDep = Annotated[Store, Depends(get_store)]
