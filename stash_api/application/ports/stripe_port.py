from __future__ import annotations

from typing import Protocol

from stash_api.application.dto.billing import (
    StripeCreatedSubscription,
    StripeCustomer,
    StripePaymentIntent,
    StripeSubscription,
    StripeWebhookEvent,
)


class StripePort(Protocol):
    def find_customer_by_email(self, *, email: str) -> StripeCustomer | None:
        ...

    def create_customer(
        self,
        *,
        email: str | None,
        name: str | None,
        metadata: dict[str, str],
    ) -> StripeCustomer:
        ...

    def update_customer_metadata(self, *, customer_id: str, metadata: dict[str, str]) -> None:
        ...

    def retrieve_customer(self, *, customer_id: str) -> StripeCustomer | None:
        ...

    def create_subscription(
        self,
        *,
        customer_id: str,
        price_id: str,
        metadata: dict[str, str],
    ) -> StripeCreatedSubscription:
        ...

    def retrieve_subscription(self, *, subscription_id: str) -> StripeSubscription:
        ...

    def create_ephemeral_key(self, *, customer_id: str) -> str:
        ...

    def create_payment_intent(
        self,
        *,
        amount_cents: int,
        currency: str,
        customer_id: str | None,
        metadata: dict[str, str],
    ) -> StripePaymentIntent:
        ...

    def retrieve_payment_intent(self, *, payment_intent_id: str) -> StripePaymentIntent:
        ...

    def verify_webhook(self, *, signature: str, payload: bytes) -> StripeWebhookEvent:
        ...
