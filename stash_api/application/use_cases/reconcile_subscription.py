from __future__ import annotations

import logging

from stash_api.application.dto.billing import ReconcileSubscriptionInput
from stash_api.application.ports.stripe_port import StripePort
from stash_api.application.ports.subscription_port import SubscriptionPort
from stash_api.domain.entities.price_catalog import PriceCatalog
from stash_api.domain.entities.subscription import SubscriptionUpdate

from .common import USER_ID_METADATA_KEY, utcnow


logger = logging.getLogger(__name__)


class ReconcileSubscriptionUseCase:
    """Fold a Stripe subscription into the owning user's SubscriptionRecord.

    The owner is the first of: ``user_id`` metadata on the triggering object,
    ``user_id`` metadata on the subscription, the checkout
    ``client_reference_id``, the ``user_id`` metadata of the Stripe customer.
    When none resolves nothing is written and None is returned.
    """

    def __init__(
        self,
        *,
        subscription_port: SubscriptionPort,
        stripe_port: StripePort,
        price_catalog: PriceCatalog,
    ):
        self._subscription_port = subscription_port
        self._stripe_port = stripe_port
        self._price_catalog = price_catalog

    def execute(self, command: ReconcileSubscriptionInput) -> SubscriptionUpdate | None:
        subscription = command.subscription
        user_id = self._resolve_user_id(command)
        if not user_id:
            logger.warning(
                "reconcile_subscription: unresolved_user subscription_id=%s customer_id=%s",
                subscription.id,
                subscription.customer_id,
            )
            return None

        plan_price = None
        if subscription.price_id:
            plan_price = self._price_catalog.reverse_lookup(price_id=subscription.price_id)
        if plan_price is None:
            logger.warning(
                "reconcile_subscription: unmapped_price subscription_id=%s price_id=%s",
                subscription.id,
                subscription.price_id,
            )

        update = SubscriptionUpdate(
            user_id=user_id,
            plan_id=plan_price.plan_id if plan_price else None,
            billing_cycle=plan_price.billing_cycle if plan_price else None,
            status=command.forced_status or subscription.status,
            stripe_customer_id=subscription.customer_id,
            stripe_subscription_id=subscription.id,
            current_period_end=subscription.current_period_end,
            cancel_at_period_end=subscription.cancel_at_period_end,
        )
        self._subscription_port.merge_subscription(update=update, now=utcnow())
        logger.info(
            "reconcile_subscription: merged user_id=%s subscription_id=%s status=%s plan=%s_%s",
            user_id,
            subscription.id,
            update.status,
            update.plan_id,
            update.billing_cycle,
        )
        return update

    def _resolve_user_id(self, command: ReconcileSubscriptionInput) -> str | None:
        candidate = (
            command.metadata_user_id
            or command.subscription.metadata.get(USER_ID_METADATA_KEY)
            or command.client_reference_id
        )
        if candidate:
            return candidate

        customer_id = command.subscription.customer_id
        if not customer_id:
            return None
        customer = self._stripe_port.retrieve_customer(customer_id=customer_id)
        if customer is None:
            return None
        return customer.metadata.get(USER_ID_METADATA_KEY) or None
