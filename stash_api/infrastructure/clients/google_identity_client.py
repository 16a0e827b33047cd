from __future__ import annotations

import logging
from typing import Any

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from stash_api.application.dto.auth import IdentityInfo
from stash_api.application.ports.identity_port import IdentityProviderPort
from stash_api.domain.exceptions import AuthError, ExternalServiceError


logger = logging.getLogger(__name__)


class GoogleIdentityClient(IdentityProviderPort):
    """Verifies Google-issued ID tokens against our OAuth client id."""

    def __init__(self, *, client_id: str):
        self._audience = client_id
        self._transport = google_requests.Request()

    def verify_id_token(self, *, id_token: str) -> IdentityInfo:
        try:
            claims = google_id_token.verify_oauth2_token(id_token, self._transport, self._audience)
        except google_exceptions.TransportError as exc:
            logger.warning("google_identity: certs_unavailable error=%s", exc)
            raise ExternalServiceError("Google certificate fetch failed.") from exc
        except ValueError as exc:
            raise AuthError("Invalid Google id_token.") from exc
        return identity_from_claims(claims)


def identity_from_claims(claims: dict[str, Any]) -> IdentityInfo:
    subject = claims.get("sub")
    email = claims.get("email")
    if not subject or not email:
        raise AuthError("Google id_token missing required claims.")

    verified = claims.get("email_verified", False)
    if isinstance(verified, str):
        verified = verified.strip().lower() == "true"

    name = claims.get("name")
    return IdentityInfo(
        subject=str(subject),
        email=str(email),
        email_verified=bool(verified),
        name=name if isinstance(name, str) and name else None,
    )
