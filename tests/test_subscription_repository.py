from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from stash_api.domain.entities.subscription import SubscriptionUpdate
from stash_api.infrastructure.db.engine import create_schema
from stash_api.infrastructure.db.repositories.subscription_repository import SqlSubscriptionRepository


NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
PERIOD_END = datetime(2026, 11, 1, tzinfo=timezone.utc)


def _repository() -> SqlSubscriptionRepository:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_schema(engine)
    return SqlSubscriptionRepository(engine)


def _update(**overrides) -> SubscriptionUpdate:
    values = {
        "user_id": "user_42",
        "plan_id": "pro",
        "billing_cycle": "monthly",
        "status": "active",
        "stripe_customer_id": "cus_1",
        "stripe_subscription_id": "sub_1",
        "current_period_end": PERIOD_END,
        "cancel_at_period_end": False,
    }
    values.update(overrides)
    return SubscriptionUpdate(**values)


def test_missing_record_returns_none():
    assert _repository().get_subscription_for_user(user_id="nobody") is None


def test_merge_inserts_new_record():
    repository = _repository()

    repository.merge_subscription(update=_update(), now=NOW)

    record = repository.get_subscription_for_user(user_id="user_42")
    assert record is not None
    assert record.plan_id == "pro"
    assert record.billing_cycle == "monthly"
    assert record.status == "active"
    assert record.stripe_customer_id == "cus_1"
    assert record.current_period_end == PERIOD_END
    assert record.cancel_at_period_end is False
    assert record.updated_at == NOW


def test_merge_keeps_stored_ids_when_update_has_none():
    repository = _repository()
    repository.merge_subscription(update=_update(), now=NOW)

    later = NOW + timedelta(hours=1)
    repository.merge_subscription(
        update=_update(
            status="canceled",
            stripe_customer_id=None,
            stripe_subscription_id=None,
            current_period_end=None,
            cancel_at_period_end=True,
        ),
        now=later,
    )

    record = repository.get_subscription_for_user(user_id="user_42")
    assert record.status == "canceled"
    assert record.stripe_customer_id == "cus_1"
    assert record.stripe_subscription_id == "sub_1"
    assert record.current_period_end == PERIOD_END
    assert record.cancel_at_period_end is True
    assert record.updated_at == later


def test_merge_overwrites_plan_with_unmapped_price():
    repository = _repository()
    repository.merge_subscription(update=_update(), now=NOW)

    repository.merge_subscription(update=_update(plan_id=None, billing_cycle=None), now=NOW)

    record = repository.get_subscription_for_user(user_id="user_42")
    assert record.plan_id is None
    assert record.billing_cycle is None
