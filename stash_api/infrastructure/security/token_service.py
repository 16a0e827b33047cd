from __future__ import annotations

from datetime import datetime, timedelta

import jwt

from stash_api.application.dto.auth import AccessTokenPayload, IdentityInfo
from stash_api.application.ports.token_port import TokenPort


ACCESS_TOKEN_TYPE = "access"
ALGORITHM = "HS256"


class JwtTokenService(TokenPort):
    """Session tokens issued after a verified sign-in; the subject is the identity provider's user id."""

    def __init__(self, *, jwt_secret: str, access_ttl_minutes: int):
        self._secret = jwt_secret
        self._ttl = timedelta(minutes=access_ttl_minutes)

    def create_access_token(self, *, identity: IdentityInfo, now: datetime) -> tuple[str, datetime]:
        expires_at = now + self._ttl
        claims = {
            "sub": identity.subject,
            "email": identity.email,
            "name": identity.name,
            "type": ACCESS_TOKEN_TYPE,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM), expires_at

    def decode_access_token(self, *, token: str) -> AccessTokenPayload:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise ValueError("Access token expired.") from exc
        except jwt.PyJWTError as exc:
            raise ValueError("Invalid access token.") from exc

        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise ValueError("Invalid token type.")
        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise ValueError("Invalid token subject.")

        return AccessTokenPayload(
            user_id=subject,
            email=_optional_str(claims.get("email")),
            name=_optional_str(claims.get("name")),
        )


def _optional_str(value) -> str | None:
    return value if isinstance(value, str) and value else None
