from __future__ import annotations

import logging

from stash_api.application.dto.billing import (
    ReconcileSubscriptionInput,
    StripeWebhookEvent,
    StripeWebhookInput,
    StripeWebhookOutput,
)
from stash_api.application.ports.stripe_port import StripePort

from .common import USER_ID_METADATA_KEY
from .reconcile_subscription import ReconcileSubscriptionUseCase


logger = logging.getLogger(__name__)


SUBSCRIPTION_EVENTS = {
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
}
INVOICE_PAID_EVENTS = {"invoice.payment_succeeded", "invoice.paid"}


class ProcessStripeWebhookUseCase:
    def __init__(
        self,
        *,
        stripe_port: StripePort,
        reconcile_subscription_use_case: ReconcileSubscriptionUseCase,
    ):
        self._stripe_port = stripe_port
        self._reconcile = reconcile_subscription_use_case

    def execute(self, command: StripeWebhookInput) -> StripeWebhookOutput:
        event = self._stripe_port.verify_webhook(signature=command.signature, payload=command.payload)
        logger.info("stripe_webhook: received event_id=%s type=%s", event.event_id, event.event_type)

        if event.event_type == "checkout.session.completed":
            handled = self._handle_checkout_completed(event)
        elif event.event_type in SUBSCRIPTION_EVENTS:
            handled = self._handle_subscription_event(event)
        elif event.event_type in INVOICE_PAID_EVENTS:
            handled = self._handle_invoice(event, forced_status=None)
        elif event.event_type == "invoice.payment_failed":
            handled = self._handle_invoice(event, forced_status="past_due")
        else:
            logger.info("stripe_webhook: unhandled_event event_id=%s type=%s", event.event_id, event.event_type)
            handled = False

        return StripeWebhookOutput(event_type=event.event_type, handled=handled)

    def _handle_checkout_completed(self, event: StripeWebhookEvent) -> bool:
        session = event.checkout_session
        if session is None or not session.subscription_id:
            logger.info("stripe_webhook: checkout_without_subscription event_id=%s", event.event_id)
            return False

        subscription = self._stripe_port.retrieve_subscription(subscription_id=session.subscription_id)
        update = self._reconcile.execute(
            ReconcileSubscriptionInput(
                subscription=subscription,
                metadata_user_id=session.metadata.get(USER_ID_METADATA_KEY),
                client_reference_id=session.client_reference_id,
            )
        )
        return update is not None

    def _handle_subscription_event(self, event: StripeWebhookEvent) -> bool:
        if event.subscription is None:
            logger.warning("stripe_webhook: subscription_payload_missing event_id=%s", event.event_id)
            return False

        forced_status = "canceled" if event.event_type == "customer.subscription.deleted" else None
        update = self._reconcile.execute(
            ReconcileSubscriptionInput(subscription=event.subscription, forced_status=forced_status)
        )
        return update is not None

    def _handle_invoice(self, event: StripeWebhookEvent, *, forced_status: str | None) -> bool:
        invoice = event.invoice
        if invoice is None or not invoice.subscription_id:
            logger.info(
                "stripe_webhook: invoice_without_subscription event_id=%s type=%s",
                event.event_id,
                event.event_type,
            )
            return False

        subscription = self._stripe_port.retrieve_subscription(subscription_id=invoice.subscription_id)
        update = self._reconcile.execute(
            ReconcileSubscriptionInput(subscription=subscription, forced_status=forced_status)
        )
        return update is not None
