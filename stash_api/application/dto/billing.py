from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class StripeCustomer:
    id: str
    email: str | None
    name: str | None
    metadata: dict[str, str]
    raw: dict = field(default_factory=dict)


@dataclass(frozen=True)
class StripeSubscription:
    id: str
    customer_id: str | None
    status: str
    price_id: str | None
    current_period_end: datetime | None
    cancel_at_period_end: bool
    metadata: dict[str, str]


@dataclass(frozen=True)
class StripeCreatedSubscription:
    subscription: StripeSubscription
    payment_intent_client_secret: str | None


@dataclass(frozen=True)
class StripeCheckoutSession:
    id: str
    customer_id: str | None
    subscription_id: str | None
    client_reference_id: str | None
    metadata: dict[str, str]


@dataclass(frozen=True)
class StripeInvoice:
    id: str
    customer_id: str | None
    subscription_id: str | None


@dataclass(frozen=True)
class StripePaymentIntent:
    id: str
    status: str
    client_secret: str | None
    raw: dict = field(default_factory=dict)


@dataclass(frozen=True)
class StripeWebhookEvent:
    event_id: str
    event_type: str
    subscription: StripeSubscription | None
    checkout_session: StripeCheckoutSession | None
    invoice: StripeInvoice | None


@dataclass(frozen=True)
class StripeWebhookInput:
    signature: str
    payload: bytes


@dataclass(frozen=True)
class StripeWebhookOutput:
    event_type: str
    handled: bool


@dataclass(frozen=True)
class ReconcileSubscriptionInput:
    subscription: StripeSubscription
    forced_status: str | None = None
    metadata_user_id: str | None = None
    client_reference_id: str | None = None


@dataclass(frozen=True)
class FindOrCreateCustomerInput:
    email: str
    name: str | None
    user_id: str | None


@dataclass(frozen=True)
class CreateSubscriptionInput:
    user_id: str | None
    plan_id: str
    billing_cycle: str
    email: str
    name: str | None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CreateSubscriptionOutput:
    subscription_id: str
    customer_id: str
    payment_intent_client_secret: str
    ephemeral_key_secret: str


@dataclass(frozen=True)
class PlanOutput:
    plan_id: str
    prices: dict[str, str]


@dataclass(frozen=True)
class CreateCustomerInput:
    email: str | None
    name: str | None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CreateCustomerOutput:
    customer_id: str
    customer: dict


@dataclass(frozen=True)
class CreatePaymentIntentInput:
    amount: Decimal | None
    currency: str
    customer_id: str | None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CreatePaymentIntentOutput:
    client_secret: str
    payment_intent_id: str


@dataclass(frozen=True)
class PaymentIntentStatusOutput:
    status: str
    payment_intent: dict
