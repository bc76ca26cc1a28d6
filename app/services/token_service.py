"""JWT access and refresh tokens (ES256).

One EC key pair signs both kinds.  They differ by audience, so a refresh
token is never accepted where an access token is expected and vice versa.

Access tokens carry the user's role in ``roles``.  Refresh tokens carry only
``sub``: the refresh endpoint re-reads the user, so a role change or
deactivation applies at the next refresh rather than after 7 days.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

# Ephemeral key per process; tokens do not survive a restart.
# TODO: load the signing key from a mounted PEM file for multi-instance deploys.
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "course-progress-service"

ACCESS_AUDIENCE = "course-progress-api"
ACCESS_TOKEN_TTL_MIN = 15

REFRESH_AUDIENCE = "course-progress-refresh"
REFRESH_TOKEN_TTL_DAYS = 7


def _encode(*, sub: str, audience: str, ttl: timedelta, **claims: object) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": audience,
        "exp": now + ttl,
        "iat": now,
        "jti": str(uuid.uuid4()),
        **claims,
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def _decode(token: str, audience: str) -> dict:
    # algorithm pinned: no alg:none, no HS/ES switching
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=audience,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )


def create_access_token(*, sub: str, roles: list[str]) -> str:
    return _encode(
        sub=sub,
        audience=ACCESS_AUDIENCE,
        ttl=timedelta(minutes=ACCESS_TOKEN_TTL_MIN),
        roles=roles,
    )


def decode_access_token(token: str) -> dict:
    """Verify signature, expiry, issuer and audience; return the claims.

    Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError on failure.
    """
    return _decode(token, ACCESS_AUDIENCE)


def create_refresh_token(*, sub: str) -> str:
    return _encode(
        sub=sub,
        audience=REFRESH_AUDIENCE,
        ttl=timedelta(days=REFRESH_TOKEN_TTL_DAYS),
    )


def decode_refresh_token(token: str) -> dict:
    return _decode(token, REFRESH_AUDIENCE)
