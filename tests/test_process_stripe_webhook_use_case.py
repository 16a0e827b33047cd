from __future__ import annotations

import pytest

from fakes import FakeStripePort, FakeSubscriptionPort, make_subscription

from stash_api.application.dto.billing import (
    StripeCheckoutSession,
    StripeInvoice,
    StripeWebhookEvent,
    StripeWebhookInput,
)
from stash_api.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from stash_api.application.use_cases.reconcile_subscription import ReconcileSubscriptionUseCase
from stash_api.domain.exceptions import SignatureVerificationError
from stash_api.domain.services.price_catalog import build_price_catalog


CATALOG = build_price_catalog({"pro_monthly": "price_X"})


def _event(event_type: str, **payload) -> StripeWebhookEvent:
    return StripeWebhookEvent(
        event_id="evt_1",
        event_type=event_type,
        subscription=payload.get("subscription"),
        checkout_session=payload.get("checkout_session"),
        invoice=payload.get("invoice"),
    )


def _run(stripe_port: FakeStripePort, subscription_port: FakeSubscriptionPort, signature: str = "valid"):
    use_case = ProcessStripeWebhookUseCase(
        stripe_port=stripe_port,
        reconcile_subscription_use_case=ReconcileSubscriptionUseCase(
            subscription_port=subscription_port,
            stripe_port=stripe_port,
            price_catalog=CATALOG,
        ),
    )
    return use_case.execute(StripeWebhookInput(signature=signature, payload=b"{}"))


def test_invalid_signature_is_rejected():
    stripe_port = FakeStripePort(event=_event("customer.subscription.updated"))

    with pytest.raises(SignatureVerificationError):
        _run(stripe_port, FakeSubscriptionPort(), signature="forged")


def test_subscription_deleted_marks_record_canceled():
    subscription = make_subscription(status="active", metadata={"user_id": "user_42"})
    stripe_port = FakeStripePort(event=_event("customer.subscription.deleted", subscription=subscription))
    subscription_port = FakeSubscriptionPort()

    output = _run(stripe_port, subscription_port)

    assert output.handled is True
    assert output.event_type == "customer.subscription.deleted"
    record = subscription_port.records["user_42"]
    assert record.status == "canceled"
    assert record.plan_id == "pro"


def test_subscription_updated_copies_stripe_status():
    subscription = make_subscription(status="trialing", metadata={"user_id": "user_42"})
    stripe_port = FakeStripePort(event=_event("customer.subscription.updated", subscription=subscription))
    subscription_port = FakeSubscriptionPort()

    _run(stripe_port, subscription_port)

    assert subscription_port.records["user_42"].status == "trialing"


def test_checkout_completed_uses_client_reference_id():
    session = StripeCheckoutSession(
        id="cs_1",
        customer_id="cus_1",
        subscription_id="sub_1",
        client_reference_id="user_ref",
        metadata={},
    )
    stripe_port = FakeStripePort(
        event=_event("checkout.session.completed", checkout_session=session),
        subscriptions={"sub_1": make_subscription()},
    )
    subscription_port = FakeSubscriptionPort()

    output = _run(stripe_port, subscription_port)

    assert output.handled is True
    assert subscription_port.records["user_ref"].status == "active"


def test_checkout_without_subscription_is_ignored():
    session = StripeCheckoutSession(
        id="cs_1",
        customer_id="cus_1",
        subscription_id=None,
        client_reference_id="user_ref",
        metadata={},
    )
    stripe_port = FakeStripePort(event=_event("checkout.session.completed", checkout_session=session))
    subscription_port = FakeSubscriptionPort()

    output = _run(stripe_port, subscription_port)

    assert output.handled is False
    assert subscription_port.merged == []


def test_payment_failed_forces_past_due():
    stripe_port = FakeStripePort(
        event=_event(
            "invoice.payment_failed",
            invoice=StripeInvoice(id="in_1", customer_id="cus_1", subscription_id="sub_1"),
        ),
        subscriptions={"sub_1": make_subscription(status="active", metadata={"user_id": "user_42"})},
    )
    subscription_port = FakeSubscriptionPort()

    _run(stripe_port, subscription_port)

    assert subscription_port.records["user_42"].status == "past_due"


def test_invoice_paid_refreshes_from_stripe():
    stripe_port = FakeStripePort(
        event=_event(
            "invoice.paid",
            invoice=StripeInvoice(id="in_1", customer_id="cus_1", subscription_id="sub_1"),
        ),
        subscriptions={"sub_1": make_subscription(status="active", metadata={"user_id": "user_42"})},
    )
    subscription_port = FakeSubscriptionPort()

    output = _run(stripe_port, subscription_port)

    assert output.handled is True
    assert subscription_port.records["user_42"].status == "active"


def test_unknown_event_is_acknowledged_without_writes():
    stripe_port = FakeStripePort(event=_event("customer.created"))
    subscription_port = FakeSubscriptionPort()

    output = _run(stripe_port, subscription_port)

    assert output.handled is False
    assert subscription_port.merged == []


def test_unresolved_owner_is_not_handled():
    subscription = make_subscription(customer_id=None)
    stripe_port = FakeStripePort(event=_event("customer.subscription.created", subscription=subscription))
    subscription_port = FakeSubscriptionPort()

    output = _run(stripe_port, subscription_port)

    assert output.handled is False
    assert subscription_port.merged == []
