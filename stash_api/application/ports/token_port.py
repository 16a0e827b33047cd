from __future__ import annotations

from datetime import datetime
from typing import Protocol

from stash_api.application.dto.auth import AccessTokenPayload, IdentityInfo


class TokenPort(Protocol):
    def create_access_token(self, *, identity: IdentityInfo, now: datetime) -> tuple[str, datetime]:
        ...

    def decode_access_token(self, *, token: str) -> AccessTokenPayload:
        ...
