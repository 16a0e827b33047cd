from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header

from stash_api.application.dto.auth import AccessTokenPayload
from stash_api.application.use_cases.analyze_content import AnalyzeContentUseCase
from stash_api.application.use_cases.check_subscription_access import CheckSubscriptionAccessUseCase
from stash_api.application.use_cases.create_customer import CreateCustomerUseCase
from stash_api.application.use_cases.create_payment_intent import CreatePaymentIntentUseCase
from stash_api.application.use_cases.create_subscription import CreateSubscriptionUseCase
from stash_api.application.use_cases.exchange_identity_token import ExchangeIdentityTokenUseCase
from stash_api.application.use_cases.find_or_create_customer import FindOrCreateCustomerUseCase
from stash_api.application.use_cases.get_payment_intent import GetPaymentIntentUseCase
from stash_api.application.use_cases.list_plans import ListPlansUseCase
from stash_api.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from stash_api.application.use_cases.reconcile_subscription import ReconcileSubscriptionUseCase
from stash_api.domain.entities.price_catalog import PriceCatalog
from stash_api.domain.exceptions import AuthError, ConfigurationError
from stash_api.domain.services.price_catalog import build_price_catalog
from stash_api.infrastructure.db.engine import get_engine
from stash_api.infrastructure.db.repositories.subscription_repository import SqlSubscriptionRepository
from stash_api.shared.config import get_settings


@lru_cache(maxsize=1)
def get_price_catalog() -> PriceCatalog:
    return build_price_catalog(get_settings().stripe_price_catalog)


def check_startup_configuration() -> PriceCatalog:
    """Fail fast on the configuration every billing operation depends on."""
    settings = get_settings()
    if not settings.stripe_secret_key:
        raise ConfigurationError("Stripe secret key not configured.")
    return get_price_catalog()


def _get_subscription_repository() -> SqlSubscriptionRepository:
    settings = get_settings()
    if not settings.database_url:
        raise ConfigurationError("DATABASE_URL is required.")
    return SqlSubscriptionRepository(get_engine(settings.database_url))


@lru_cache(maxsize=1)
def _get_stripe_client() -> "StripeClient":
    from stash_api.infrastructure.clients.stripe_client import StripeClient

    settings = get_settings()
    if not settings.stripe_secret_key:
        raise ConfigurationError("Stripe secret key not configured.")
    return StripeClient(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        api_version=settings.stripe_api_version,
    )


@lru_cache(maxsize=1)
def _get_content_classifier():
    settings = get_settings()
    if not settings.openai_api_key:
        return None

    from openai import OpenAI

    from stash_api.infrastructure.clients.openai_classifier import (
        OpenAiAssistantClassifier,
        OpenAiChatClassifier,
    )

    client = OpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.openai_timeout_seconds,
        max_retries=settings.openai_max_retries,
    )
    if settings.openai_assistant_id:
        return OpenAiAssistantClassifier(
            client=client,
            assistant_id=settings.openai_assistant_id,
            poll_interval_seconds=settings.openai_run_poll_interval_seconds,
            max_polls=settings.openai_run_max_polls,
        )
    return OpenAiChatClassifier(client=client, model=settings.openai_model)


@lru_cache(maxsize=1)
def _get_identity_client() -> "GoogleIdentityClient":
    from stash_api.infrastructure.clients.google_identity_client import GoogleIdentityClient

    settings = get_settings()
    if not settings.google_client_id:
        raise ConfigurationError("GOOGLE_CLIENT_ID is required.")
    return GoogleIdentityClient(client_id=settings.google_client_id)


@lru_cache(maxsize=1)
def _get_token_service() -> "JwtTokenService":
    from stash_api.infrastructure.security.token_service import JwtTokenService

    settings = get_settings()
    if not settings.jwt_secret:
        raise ConfigurationError("JWT_SECRET is required.")
    return JwtTokenService(
        jwt_secret=settings.jwt_secret,
        access_ttl_minutes=settings.jwt_access_ttl_minutes,
    )


def _get_reconcile_subscription_use_case() -> ReconcileSubscriptionUseCase:
    return ReconcileSubscriptionUseCase(
        subscription_port=_get_subscription_repository(),
        stripe_port=_get_stripe_client(),
        price_catalog=get_price_catalog(),
    )


def get_list_plans_use_case() -> ListPlansUseCase:
    return ListPlansUseCase(price_catalog=get_price_catalog())


def get_create_subscription_use_case() -> CreateSubscriptionUseCase:
    stripe_client = _get_stripe_client()
    reconcile = None
    if get_settings().database_url:
        reconcile = _get_reconcile_subscription_use_case()
    return CreateSubscriptionUseCase(
        stripe_port=stripe_client,
        price_catalog=get_price_catalog(),
        find_or_create_customer_use_case=FindOrCreateCustomerUseCase(stripe_port=stripe_client),
        reconcile_subscription_use_case=reconcile,
    )


def get_process_stripe_webhook_use_case() -> ProcessStripeWebhookUseCase:
    if not get_settings().stripe_webhook_secret:
        raise ConfigurationError("Stripe webhook secret not configured.")
    return ProcessStripeWebhookUseCase(
        stripe_port=_get_stripe_client(),
        reconcile_subscription_use_case=_get_reconcile_subscription_use_case(),
    )


def get_create_customer_use_case() -> CreateCustomerUseCase:
    return CreateCustomerUseCase(stripe_port=_get_stripe_client())


def get_create_payment_intent_use_case() -> CreatePaymentIntentUseCase:
    return CreatePaymentIntentUseCase(stripe_port=_get_stripe_client())


def get_get_payment_intent_use_case() -> GetPaymentIntentUseCase:
    return GetPaymentIntentUseCase(stripe_port=_get_stripe_client())


def get_analyze_content_use_case() -> AnalyzeContentUseCase:
    return AnalyzeContentUseCase(classifier=_get_content_classifier())


def get_exchange_identity_token_use_case() -> ExchangeIdentityTokenUseCase:
    return ExchangeIdentityTokenUseCase(
        identity_port=_get_identity_client(),
        token_port=_get_token_service(),
    )


def get_check_subscription_access_use_case() -> CheckSubscriptionAccessUseCase:
    return CheckSubscriptionAccessUseCase(subscription_port=_get_subscription_repository())


def parse_bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise AuthError("Missing authorization header.")
    if not authorization.startswith("Bearer "):
        raise AuthError("Invalid authorization header.")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise AuthError("Missing access token.")
    return token


def get_current_identity(
    authorization: str | None = Header(None),
) -> AccessTokenPayload:
    token = parse_bearer_token(authorization)
    try:
        return _get_token_service().decode_access_token(token=token)
    except ValueError as exc:
        raise AuthError(str(exc)) from exc


def get_optional_identity(
    authorization: str | None = Header(None),
) -> AccessTokenPayload | None:
    if not authorization:
        return None
    return get_current_identity(authorization=authorization)


def require_active_subscription(
    identity: AccessTokenPayload = Depends(get_current_identity),
    access_use_case: CheckSubscriptionAccessUseCase = Depends(get_check_subscription_access_use_case),
) -> AccessTokenPayload:
    access_use_case.execute(user_id=identity.user_id)
    return identity
