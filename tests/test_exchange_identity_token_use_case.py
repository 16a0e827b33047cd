from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from stash_api.application.dto.auth import ExchangeIdentityTokenInput, IdentityInfo
from stash_api.application.use_cases.exchange_identity_token import ExchangeIdentityTokenUseCase
from stash_api.domain.exceptions import AuthError
from stash_api.infrastructure.clients.google_identity_client import identity_from_claims


class FakeIdentityPort:
    def __init__(self, *, valid_token: str = "google-token"):
        self.valid_token = valid_token

    def verify_id_token(self, *, id_token: str) -> IdentityInfo:
        if id_token != self.valid_token:
            raise AuthError("Invalid Google id_token.")
        return IdentityInfo(subject="sub-1", email="a@b.com", email_verified=True, name="Alice")


class FakeTokenPort:
    def __init__(self):
        self.issued_for: list[IdentityInfo] = []

    def create_access_token(self, *, identity: IdentityInfo, now: datetime) -> tuple[str, datetime]:
        self.issued_for.append(identity)
        return "access-token", now + timedelta(minutes=60)

    def decode_access_token(self, *, token: str):
        raise NotImplementedError


def test_exchanges_verified_identity_for_access_token():
    token_port = FakeTokenPort()
    use_case = ExchangeIdentityTokenUseCase(identity_port=FakeIdentityPort(), token_port=token_port)

    output = use_case.execute(ExchangeIdentityTokenInput(id_token="google-token"))

    assert output.access_token == "access-token"
    assert output.user.subject == "sub-1"
    assert token_port.issued_for[0].email == "a@b.com"


def test_invalid_identity_token_is_rejected():
    token_port = FakeTokenPort()
    use_case = ExchangeIdentityTokenUseCase(identity_port=FakeIdentityPort(), token_port=token_port)

    with pytest.raises(AuthError):
        use_case.execute(ExchangeIdentityTokenInput(id_token="forged"))

    assert token_port.issued_for == []


def test_empty_identity_token_is_rejected():
    use_case = ExchangeIdentityTokenUseCase(identity_port=FakeIdentityPort(), token_port=FakeTokenPort())

    with pytest.raises(AuthError):
        use_case.execute(ExchangeIdentityTokenInput(id_token=""))


def test_identity_from_claims_normalizes_verified_flag():
    identity = identity_from_claims(
        {"sub": "sub-1", "email": "a@b.com", "email_verified": "TRUE", "name": ""}
    )

    assert identity.subject == "sub-1"
    assert identity.email_verified is True
    assert identity.name is None


def test_identity_from_claims_requires_subject_and_email():
    with pytest.raises(AuthError):
        identity_from_claims({"sub": "sub-1"})
