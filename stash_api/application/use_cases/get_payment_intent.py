from __future__ import annotations

from stash_api.application.dto.billing import PaymentIntentStatusOutput
from stash_api.application.ports.stripe_port import StripePort


class GetPaymentIntentUseCase:
    def __init__(self, *, stripe_port: StripePort):
        self._stripe_port = stripe_port

    def execute(self, *, payment_intent_id: str) -> PaymentIntentStatusOutput:
        payment_intent = self._stripe_port.retrieve_payment_intent(payment_intent_id=payment_intent_id)
        return PaymentIntentStatusOutput(status=payment_intent.status, payment_intent=payment_intent.raw)
