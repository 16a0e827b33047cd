from __future__ import annotations

from stash_api.application.dto.billing import CreateCustomerInput, CreateCustomerOutput
from stash_api.application.ports.stripe_port import StripePort


class CreateCustomerUseCase:
    def __init__(self, *, stripe_port: StripePort):
        self._stripe_port = stripe_port

    def execute(self, command: CreateCustomerInput) -> CreateCustomerOutput:
        customer = self._stripe_port.create_customer(
            email=command.email,
            name=command.name,
            metadata=dict(command.metadata),
        )
        return CreateCustomerOutput(customer_id=customer.id, customer=customer.raw)
