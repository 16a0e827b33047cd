from __future__ import annotations

import logging

from stash_api.application.dto.billing import (
    CreateSubscriptionInput,
    CreateSubscriptionOutput,
    FindOrCreateCustomerInput,
    ReconcileSubscriptionInput,
    StripeCreatedSubscription,
)
from stash_api.application.ports.stripe_port import StripePort
from stash_api.domain.entities.price_catalog import PriceCatalog
from stash_api.domain.exceptions import ExternalServiceError, InvalidPlanError, InvalidRequestError

from .common import USER_ID_METADATA_KEY
from .find_or_create_customer import FindOrCreateCustomerUseCase
from .reconcile_subscription import ReconcileSubscriptionUseCase


logger = logging.getLogger(__name__)


class CreateSubscriptionUseCase:
    """Create an incomplete Stripe subscription and the secrets the client needs to pay it.

    The steps are not atomic against Stripe. When minting the ephemeral key
    fails after the subscription was created, the subscription is left in
    ``incomplete`` state and the error reaches the caller; Stripe expires
    unpaid incomplete subscriptions on its own, so nothing is rolled back here.
    """

    def __init__(
        self,
        *,
        stripe_port: StripePort,
        price_catalog: PriceCatalog,
        find_or_create_customer_use_case: FindOrCreateCustomerUseCase,
        reconcile_subscription_use_case: ReconcileSubscriptionUseCase | None = None,
    ):
        self._stripe_port = stripe_port
        self._price_catalog = price_catalog
        self._find_or_create_customer = find_or_create_customer_use_case
        self._reconcile = reconcile_subscription_use_case

    def execute(self, command: CreateSubscriptionInput) -> CreateSubscriptionOutput:
        if not command.email:
            raise InvalidRequestError("Email required")

        price_id = self._price_catalog.resolve_price_id(
            plan_id=command.plan_id,
            billing_cycle=command.billing_cycle,
        )
        if price_id is None:
            raise InvalidPlanError("Invalid plan")

        customer_id = self._find_or_create_customer.execute(
            FindOrCreateCustomerInput(
                email=command.email,
                name=command.name,
                user_id=command.user_id,
            )
        )

        # user_id is server-owned: only the session identity may set it.
        metadata = dict(command.metadata)
        metadata.pop(USER_ID_METADATA_KEY, None)
        metadata.update({"plan_id": command.plan_id, "billing_cycle": command.billing_cycle})
        if command.user_id:
            metadata[USER_ID_METADATA_KEY] = command.user_id

        created = self._stripe_port.create_subscription(
            customer_id=customer_id,
            price_id=price_id,
            metadata=metadata,
        )
        subscription = created.subscription
        logger.info(
            "create_subscription: created subscription_id=%s customer_id=%s price_id=%s user_id=%s",
            subscription.id,
            customer_id,
            price_id,
            command.user_id,
        )
        if not created.payment_intent_client_secret:
            raise ExternalServiceError("Stripe subscription has no payment intent to confirm.")

        if self._reconcile is not None and command.user_id:
            self._mirror_pending_state(command=command, created_subscription=created)

        ephemeral_key_secret = self._stripe_port.create_ephemeral_key(customer_id=customer_id)

        return CreateSubscriptionOutput(
            subscription_id=subscription.id,
            customer_id=customer_id,
            payment_intent_client_secret=created.payment_intent_client_secret,
            ephemeral_key_secret=ephemeral_key_secret,
        )

    def _mirror_pending_state(
        self,
        *,
        command: CreateSubscriptionInput,
        created_subscription: StripeCreatedSubscription,
    ) -> None:
        try:
            self._reconcile.execute(
                ReconcileSubscriptionInput(
                    subscription=created_subscription.subscription,
                    metadata_user_id=command.user_id,
                )
            )
        except ExternalServiceError:
            logger.warning(
                "create_subscription: mirror_failed subscription_id=%s user_id=%s",
                created_subscription.subscription.id,
                command.user_id,
                exc_info=True,
            )
