from __future__ import annotations

from datetime import datetime

from .base import CamelModel


class SessionUserResponse(CamelModel):
    id: str
    email: str
    name: str | None


class IdentityTokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: SessionUserResponse
