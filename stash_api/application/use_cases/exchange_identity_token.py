from __future__ import annotations

import logging

from stash_api.application.dto.auth import ExchangeIdentityTokenInput, ExchangeIdentityTokenOutput
from stash_api.application.ports.identity_port import IdentityProviderPort
from stash_api.application.ports.token_port import TokenPort
from stash_api.domain.exceptions import AuthError

from .common import utcnow


logger = logging.getLogger(__name__)


class ExchangeIdentityTokenUseCase:
    def __init__(self, *, identity_port: IdentityProviderPort, token_port: TokenPort):
        self._identity_port = identity_port
        self._token_port = token_port

    def execute(self, command: ExchangeIdentityTokenInput) -> ExchangeIdentityTokenOutput:
        if not command.id_token:
            raise AuthError("Missing identity token.")

        identity = self._identity_port.verify_id_token(id_token=command.id_token)
        access_token, expires_at = self._token_port.create_access_token(identity=identity, now=utcnow())
        logger.info("exchange_identity_token: issued user_id=%s", identity.subject)
        return ExchangeIdentityTokenOutput(
            access_token=access_token,
            expires_at=expires_at,
            user=identity,
        )
