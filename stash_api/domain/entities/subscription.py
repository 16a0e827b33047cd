from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .price_catalog import BillingCycle


@dataclass(frozen=True)
class SubscriptionRecord:
    user_id: str
    plan_id: str | None
    billing_cycle: BillingCycle | None
    status: str
    stripe_customer_id: str | None
    stripe_subscription_id: str | None
    current_period_end: datetime | None
    cancel_at_period_end: bool
    updated_at: datetime


@dataclass(frozen=True)
class SubscriptionUpdate:
    """Merge patch for a user's record.

    ``plan_id`` and ``billing_cycle`` are always written, even when None. The
    customer id, subscription id and period end keep their stored value when
    the update carries None.
    """

    user_id: str
    plan_id: str | None
    billing_cycle: BillingCycle | None
    status: str
    stripe_customer_id: str | None
    stripe_subscription_id: str | None
    current_period_end: datetime | None
    cancel_at_period_end: bool


def is_subscription_active(status: str) -> bool:
    return status == "active"
