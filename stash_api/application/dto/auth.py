from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class IdentityInfo:
    subject: str
    email: str
    email_verified: bool
    name: str | None


@dataclass(frozen=True)
class AccessTokenPayload:
    user_id: str
    email: str | None
    name: str | None


@dataclass(frozen=True)
class ExchangeIdentityTokenInput:
    id_token: str


@dataclass(frozen=True)
class ExchangeIdentityTokenOutput:
    access_token: str
    expires_at: datetime
    user: IdentityInfo
