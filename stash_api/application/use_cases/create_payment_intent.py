from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from stash_api.application.dto.billing import CreatePaymentIntentInput, CreatePaymentIntentOutput
from stash_api.application.ports.stripe_port import StripePort
from stash_api.domain.exceptions import ExternalServiceError, InvalidRequestError


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class CreatePaymentIntentUseCase:
    def __init__(self, *, stripe_port: StripePort):
        self._stripe_port = stripe_port

    def execute(self, command: CreatePaymentIntentInput) -> CreatePaymentIntentOutput:
        if not command.amount:
            raise InvalidRequestError("Amount is required")
        if command.amount < 0:
            raise InvalidRequestError("Amount must be positive")

        payment_intent = self._stripe_port.create_payment_intent(
            amount_cents=to_minor_units(command.amount),
            currency=command.currency,
            customer_id=command.customer_id,
            metadata=dict(command.metadata),
        )
        if not payment_intent.client_secret:
            raise ExternalServiceError("Stripe payment intent response is incomplete.")
        return CreatePaymentIntentOutput(
            client_secret=payment_intent.client_secret,
            payment_intent_id=payment_intent.id,
        )
