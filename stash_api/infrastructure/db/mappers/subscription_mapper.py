from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from stash_api.domain.entities.subscription import SubscriptionRecord, SubscriptionUpdate


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def map_row_to_subscription_record(row: Mapping[str, Any]) -> SubscriptionRecord:
    return SubscriptionRecord(
        user_id=str(row["user_id"]),
        plan_id=row.get("plan_id"),
        billing_cycle=row.get("billing_cycle"),
        status=row["status"],
        stripe_customer_id=row.get("stripe_customer_id"),
        stripe_subscription_id=row.get("stripe_subscription_id"),
        current_period_end=_as_utc(row.get("current_period_end")),
        cancel_at_period_end=bool(row["cancel_at_period_end"]),
        updated_at=_as_utc(row["updated_at"]),
    )


def map_subscription_update_to_params(update: SubscriptionUpdate, *, now: datetime) -> dict[str, Any]:
    return {
        "user_id": update.user_id,
        "plan_id": update.plan_id,
        "billing_cycle": update.billing_cycle,
        "status": update.status,
        "stripe_customer_id": update.stripe_customer_id,
        "stripe_subscription_id": update.stripe_subscription_id,
        "current_period_end": update.current_period_end,
        "cancel_at_period_end": update.cancel_at_period_end,
        "updated_at": now,
    }
