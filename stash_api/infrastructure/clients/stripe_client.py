from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

import stripe

from stash_api.application.dto.billing import (
    StripeCheckoutSession,
    StripeCreatedSubscription,
    StripeCustomer,
    StripeInvoice,
    StripePaymentIntent,
    StripeSubscription,
    StripeWebhookEvent,
)
from stash_api.application.ports.stripe_port import StripePort
from stash_api.domain.exceptions import ExternalServiceError, SignatureVerificationError


logger = logging.getLogger(__name__)


class StripeClient(StripePort):
    """Stripe adapter.

    The secret key and API version travel with every request instead of being
    assigned to ``stripe.api_key``, so several clients (test and live mode, or
    fakes in tests) can coexist in one process.
    """

    def __init__(self, *, secret_key: str, webhook_secret: str, api_version: str):
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._api_version = api_version

    def _options(self) -> dict:
        return {"api_key": self._secret_key, "stripe_version": self._api_version}

    def find_customer_by_email(self, *, email: str) -> StripeCustomer | None:
        try:
            result = stripe.Customer.list(email=email, limit=1, **self._options())
        except stripe.StripeError as exc:
            raise ExternalServiceError("Failed to look up Stripe customer.") from exc

        customers = _to_dict(result).get("data") or []
        if not customers:
            return None
        return _map_customer(_to_dict(customers[0]))

    def create_customer(
        self,
        *,
        email: str | None,
        name: str | None,
        metadata: dict[str, str],
    ) -> StripeCustomer:
        payload: dict = {"metadata": metadata}
        if email:
            payload["email"] = email
        if name:
            payload["name"] = name

        try:
            customer = stripe.Customer.create(**payload, **self._options())
        except stripe.StripeError as exc:
            raise ExternalServiceError("Failed to create Stripe customer.") from exc

        data = _to_dict(customer)
        if not data.get("id"):
            raise ExternalServiceError("Stripe customer id is missing.")
        return _map_customer(data)

    def update_customer_metadata(self, *, customer_id: str, metadata: dict[str, str]) -> None:
        try:
            stripe.Customer.modify(customer_id, metadata=metadata, **self._options())
        except stripe.StripeError as exc:
            raise ExternalServiceError("Failed to update Stripe customer metadata.") from exc

    def retrieve_customer(self, *, customer_id: str) -> StripeCustomer | None:
        try:
            customer = stripe.Customer.retrieve(customer_id, **self._options())
        except stripe.InvalidRequestError:
            logger.warning("stripe_client: customer_not_found customer_id=%s", customer_id)
            return None
        except stripe.StripeError as exc:
            raise ExternalServiceError("Failed to retrieve Stripe customer.") from exc

        data = _to_dict(customer)
        if data.get("deleted"):
            return None
        return _map_customer(data)

    def create_subscription(
        self,
        *,
        customer_id: str,
        price_id: str,
        metadata: dict[str, str],
    ) -> StripeCreatedSubscription:
        try:
            subscription = stripe.Subscription.create(
                customer=customer_id,
                items=[{"price": price_id}],
                payment_behavior="default_incomplete",
                payment_settings={"save_default_payment_method": "on_subscription"},
                metadata=metadata,
                expand=["latest_invoice.payment_intent"],
                **self._options(),
            )
        except stripe.StripeError as exc:
            raise ExternalServiceError("Failed to create Stripe subscription.") from exc

        data = _to_dict(subscription)
        if not data.get("id"):
            raise ExternalServiceError("Stripe subscription id is missing.")

        latest_invoice = data.get("latest_invoice")
        payment_intent = latest_invoice.get("payment_intent") if isinstance(latest_invoice, dict) else None
        client_secret = payment_intent.get("client_secret") if isinstance(payment_intent, dict) else None
        return StripeCreatedSubscription(
            subscription=map_subscription(data),
            payment_intent_client_secret=client_secret,
        )

    def retrieve_subscription(self, *, subscription_id: str) -> StripeSubscription:
        try:
            subscription = stripe.Subscription.retrieve(subscription_id, **self._options())
        except stripe.StripeError as exc:
            raise ExternalServiceError("Failed to retrieve Stripe subscription.") from exc
        return map_subscription(_to_dict(subscription))

    def create_ephemeral_key(self, *, customer_id: str) -> str:
        try:
            ephemeral_key = stripe.EphemeralKey.create(customer=customer_id, **self._options())
        except stripe.StripeError as exc:
            raise ExternalServiceError("Failed to create Stripe ephemeral key.") from exc

        secret = _to_dict(ephemeral_key).get("secret")
        if not secret:
            raise ExternalServiceError("Stripe ephemeral key secret is missing.")
        return str(secret)

    def create_payment_intent(
        self,
        *,
        amount_cents: int,
        currency: str,
        customer_id: str | None,
        metadata: dict[str, str],
    ) -> StripePaymentIntent:
        payload: dict = {
            "amount": amount_cents,
            "currency": currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
        }
        if customer_id:
            payload["customer"] = customer_id

        try:
            payment_intent = stripe.PaymentIntent.create(**payload, **self._options())
        except stripe.StripeError as exc:
            raise ExternalServiceError(_stripe_message(exc, "Failed to create Stripe payment intent.")) from exc
        return _map_payment_intent(_to_dict(payment_intent))

    def retrieve_payment_intent(self, *, payment_intent_id: str) -> StripePaymentIntent:
        try:
            payment_intent = stripe.PaymentIntent.retrieve(payment_intent_id, **self._options())
        except stripe.StripeError as exc:
            raise ExternalServiceError(_stripe_message(exc, "Failed to retrieve Stripe payment intent.")) from exc
        return _map_payment_intent(_to_dict(payment_intent))

    def verify_webhook(self, *, signature: str, payload: bytes) -> StripeWebhookEvent:
        try:
            event = stripe.Webhook.construct_event(
                payload=payload,
                sig_header=signature,
                secret=self._webhook_secret,
            )
        except (stripe.SignatureVerificationError, ValueError) as exc:
            raise SignatureVerificationError(str(exc) or "Invalid Stripe webhook signature.") from exc
        return map_webhook_event(_to_dict(event))


def map_webhook_event(event: dict) -> StripeWebhookEvent:
    event_type = str(event.get("type", ""))
    data_object = (event.get("data") or {}).get("object") or {}

    subscription = None
    checkout_session = None
    invoice = None
    if event_type.startswith("customer.subscription."):
        subscription = map_subscription(data_object)
    elif event_type.startswith("checkout.session."):
        checkout_session = StripeCheckoutSession(
            id=str(data_object.get("id", "")),
            customer_id=_as_id(data_object.get("customer")),
            subscription_id=_as_id(data_object.get("subscription")),
            client_reference_id=data_object.get("client_reference_id") or None,
            metadata=_as_metadata(data_object.get("metadata")),
        )
    elif event_type.startswith("invoice."):
        invoice = StripeInvoice(
            id=str(data_object.get("id", "")),
            customer_id=_as_id(data_object.get("customer")),
            subscription_id=_invoice_subscription_id(data_object),
        )

    return StripeWebhookEvent(
        event_id=str(event.get("id", "")),
        event_type=event_type,
        subscription=subscription,
        checkout_session=checkout_session,
        invoice=invoice,
    )


def map_subscription(data: dict) -> StripeSubscription:
    items = (data.get("items") or {}).get("data") or []
    first_item = items[0] if items else {}
    price = first_item.get("price")
    price_id = _as_id(price)

    # Newer API versions moved the billing period onto the subscription items.
    current_period_end = data.get("current_period_end") or first_item.get("current_period_end")
    return StripeSubscription(
        id=str(data.get("id", "")),
        customer_id=_as_id(data.get("customer")),
        status=str(data.get("status") or ""),
        price_id=price_id,
        current_period_end=_to_datetime(current_period_end),
        cancel_at_period_end=bool(data.get("cancel_at_period_end", False)),
        metadata=_as_metadata(data.get("metadata")),
    )


def _map_customer(data: dict) -> StripeCustomer:
    return StripeCustomer(
        id=str(data.get("id", "")),
        email=data.get("email"),
        name=data.get("name"),
        metadata=_as_metadata(data.get("metadata")),
        raw=data,
    )


def _map_payment_intent(data: dict) -> StripePaymentIntent:
    return StripePaymentIntent(
        id=str(data.get("id", "")),
        status=str(data.get("status") or ""),
        client_secret=data.get("client_secret"),
        raw=data,
    )


def _invoice_subscription_id(invoice: dict) -> str | None:
    subscription_id = _as_id(invoice.get("subscription"))
    if subscription_id:
        return subscription_id
    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    return _as_id(details.get("subscription"))


def _to_dict(value: Any) -> dict:
    if value is None:
        return {}
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, dict):
        return dict(value)
    return {}


def _as_id(value: Any) -> str | None:
    if not value:
        return None
    if isinstance(value, dict):
        value = value.get("id")
        return str(value) if value else None
    return str(value)


def _as_metadata(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items() if item is not None}


def _to_datetime(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _stripe_message(exc: stripe.StripeError, default: str) -> str:
    return getattr(exc, "user_message", None) or default
