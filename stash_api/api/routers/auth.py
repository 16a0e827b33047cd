from __future__ import annotations

from fastapi import APIRouter, Depends, Header

from stash_api.api.deps import get_exchange_identity_token_use_case, parse_bearer_token
from stash_api.api.schemas.auth import IdentityTokenResponse, SessionUserResponse
from stash_api.application.dto.auth import ExchangeIdentityTokenInput
from stash_api.application.use_cases.exchange_identity_token import ExchangeIdentityTokenUseCase


router = APIRouter()


@router.post("/auth/google-token", response_model=IdentityTokenResponse)
def exchange_google_token(
    authorization: str | None = Header(None),
    use_case: ExchangeIdentityTokenUseCase = Depends(get_exchange_identity_token_use_case),
):
    id_token = parse_bearer_token(authorization)
    output = use_case.execute(ExchangeIdentityTokenInput(id_token=id_token))
    return IdentityTokenResponse(
        access_token=output.access_token,
        expires_at=output.expires_at,
        user=SessionUserResponse(
            id=output.user.subject,
            email=output.user.email,
            name=output.user.name,
        ),
    )
