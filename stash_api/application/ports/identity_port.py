from __future__ import annotations

from typing import Protocol

from stash_api.application.dto.auth import IdentityInfo


class IdentityProviderPort(Protocol):
    def verify_id_token(self, *, id_token: str) -> IdentityInfo:
        ...
