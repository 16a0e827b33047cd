from __future__ import annotations

from datetime import datetime
import logging

from sqlalchemy import Boolean, DateTime, bindparam, select, text
from sqlalchemy.exc import SQLAlchemyError

from stash_api.application.ports.subscription_port import SubscriptionPort
from stash_api.domain.entities.subscription import SubscriptionRecord, SubscriptionUpdate
from stash_api.domain.exceptions import ExternalServiceError
from stash_api.infrastructure.db.mappers.subscription_mapper import (
    map_row_to_subscription_record,
    map_subscription_update_to_params,
)
from stash_api.infrastructure.db.models.subscriptions import UserSubscriptionModel


logger = logging.getLogger(__name__)


# Single-statement merge: NULL inputs keep the stored value, except
# plan_id/billing_cycle which are recomputed from the price on every write.
MERGE_SUBSCRIPTION_SQL = text(
    """
    INSERT INTO user_subscriptions (
        user_id, plan_id, billing_cycle, status, stripe_customer_id,
        stripe_subscription_id, current_period_end, cancel_at_period_end, updated_at
    ) VALUES (
        :user_id, :plan_id, :billing_cycle, :status, :stripe_customer_id,
        :stripe_subscription_id, :current_period_end, :cancel_at_period_end, :updated_at
    )
    ON CONFLICT (user_id) DO UPDATE SET
        plan_id = excluded.plan_id,
        billing_cycle = excluded.billing_cycle,
        status = excluded.status,
        stripe_customer_id = COALESCE(excluded.stripe_customer_id, user_subscriptions.stripe_customer_id),
        stripe_subscription_id = COALESCE(
            excluded.stripe_subscription_id, user_subscriptions.stripe_subscription_id
        ),
        current_period_end = COALESCE(excluded.current_period_end, user_subscriptions.current_period_end),
        cancel_at_period_end = excluded.cancel_at_period_end,
        updated_at = excluded.updated_at
    """
).bindparams(
    bindparam("current_period_end", type_=DateTime(timezone=True)),
    bindparam("updated_at", type_=DateTime(timezone=True)),
    bindparam("cancel_at_period_end", type_=Boolean()),
)


class SqlSubscriptionRepository(SubscriptionPort):
    def __init__(self, engine):
        self._engine = engine
        self._table = UserSubscriptionModel.__table__

    def get_subscription_for_user(self, *, user_id: str) -> SubscriptionRecord | None:
        query = select(self._table).where(self._table.c.user_id == user_id).limit(1)
        try:
            with self._engine.connect() as conn:
                row = conn.execute(query).mappings().first()
        except SQLAlchemyError as exc:
            raise ExternalServiceError("Failed to load subscription record.") from exc
        if row is None:
            return None
        return map_row_to_subscription_record(row)

    def merge_subscription(self, *, update: SubscriptionUpdate, now: datetime) -> None:
        params = map_subscription_update_to_params(update, now=now)
        try:
            with self._engine.begin() as conn:
                conn.execute(MERGE_SUBSCRIPTION_SQL, params)
        except SQLAlchemyError as exc:
            logger.error(
                "subscription_repository: merge_failed user_id=%s subscription_id=%s",
                update.user_id,
                update.stripe_subscription_id,
            )
            raise ExternalServiceError("Failed to store subscription record.") from exc
