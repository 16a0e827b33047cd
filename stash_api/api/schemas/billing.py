from __future__ import annotations

from pydantic import Field

from .base import CamelModel


class PlanResponse(CamelModel):
    plan_id: str
    prices: dict[str, str]


class PlansResponse(CamelModel):
    plans: list[PlanResponse]


class CreateSubscriptionRequest(CamelModel):
    plan_id: str = Field(..., min_length=1)
    billing_cycle: str = Field(..., min_length=1)
    email: str | None = None
    name: str | None = None
    metadata: dict[str, str] | None = None


class CreateSubscriptionResponse(CamelModel):
    subscription_id: str
    customer_id: str
    payment_intent_client_secret: str
    ephemeral_key_secret: str
