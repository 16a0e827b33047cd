from __future__ import annotations

from decimal import Decimal
from typing import Any

from .base import CamelModel


class CreateCustomerRequest(CamelModel):
    email: str | None = None
    name: str | None = None
    metadata: dict[str, str] | None = None


class CreateCustomerResponse(CamelModel):
    customer_id: str
    customer: dict[str, Any]


class CreatePaymentIntentRequest(CamelModel):
    amount: Decimal | None = None
    currency: str = "usd"
    customer_id: str | None = None
    metadata: dict[str, str] | None = None


class CreatePaymentIntentResponse(CamelModel):
    client_secret: str
    payment_intent_id: str


class PaymentIntentStatusResponse(CamelModel):
    status: str
    payment_intent: dict[str, Any]
