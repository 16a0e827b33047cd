from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from stash_api.application.dto.auth import IdentityInfo
from stash_api.infrastructure.security.token_service import JwtTokenService


IDENTITY = IdentityInfo(subject="google-sub-1", email="a@b.com", email_verified=True, name="Alice")


def test_access_token_round_trip():
    service = JwtTokenService(jwt_secret="secret", access_ttl_minutes=15)
    now = datetime.now(timezone.utc)

    token, expires_at = service.create_access_token(identity=IDENTITY, now=now)
    payload = service.decode_access_token(token=token)

    assert expires_at == now + timedelta(minutes=15)
    assert payload.user_id == "google-sub-1"
    assert payload.email == "a@b.com"
    assert payload.name == "Alice"


def test_expired_token_is_rejected():
    service = JwtTokenService(jwt_secret="secret", access_ttl_minutes=1)
    token, _ = service.create_access_token(
        identity=IDENTITY,
        now=datetime.now(timezone.utc) - timedelta(hours=1),
    )

    with pytest.raises(ValueError, match="expired"):
        service.decode_access_token(token=token)


def test_token_signed_with_other_secret_is_rejected():
    token, _ = JwtTokenService(jwt_secret="other", access_ttl_minutes=5).create_access_token(
        identity=IDENTITY,
        now=datetime.now(timezone.utc),
    )

    with pytest.raises(ValueError, match="Invalid access token"):
        JwtTokenService(jwt_secret="secret", access_ttl_minutes=5).decode_access_token(token=token)


def test_non_access_token_is_rejected():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "u1", "type": "refresh", "exp": int((now + timedelta(minutes=5)).timestamp())},
        "secret",
        algorithm="HS256",
    )

    with pytest.raises(ValueError, match="Invalid token type"):
        JwtTokenService(jwt_secret="secret", access_ttl_minutes=5).decode_access_token(token=token)
