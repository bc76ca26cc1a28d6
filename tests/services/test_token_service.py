from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from app.services import token_service


def test_access_token_round_trip() -> None:
    token = token_service.create_access_token(sub="u-1", roles=["student"])
    claims = token_service.decode_access_token(token)

    assert claims["sub"] == "u-1"
    assert claims["roles"] == ["student"]
    assert claims["iss"] == token_service.ISSUER
    assert claims["aud"] == token_service.ACCESS_AUDIENCE


def test_tokens_are_not_interchangeable() -> None:
    access = token_service.create_access_token(sub="u-1", roles=["admin"])
    refresh = token_service.create_refresh_token(sub="u-1")

    with pytest.raises(jwt.InvalidAudienceError):
        token_service.decode_access_token(refresh)
    with pytest.raises(jwt.InvalidAudienceError):
        token_service.decode_refresh_token(access)


def test_refresh_token_carries_no_roles() -> None:
    claims = token_service.decode_refresh_token(token_service.create_refresh_token(sub="u-2"))
    assert "roles" not in claims


def test_expired_token_is_rejected() -> None:
    token = token_service._encode(
        sub="u-1",
        audience=token_service.ACCESS_AUDIENCE,
        ttl=timedelta(seconds=-1),
        roles=[],
    )
    with pytest.raises(jwt.ExpiredSignatureError):
        token_service.decode_access_token(token)


def test_unsigned_token_is_rejected() -> None:
    forged = jwt.encode(
        {
            "sub": "u-1",
            "iss": token_service.ISSUER,
            "aud": token_service.ACCESS_AUDIENCE,
            "exp": datetime.now(UTC) + timedelta(minutes=5),
            "iat": datetime.now(UTC),
            "jti": "x",
            "roles": ["admin"],
        },
        "secret",
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidTokenError):
        token_service.decode_access_token(forged)
