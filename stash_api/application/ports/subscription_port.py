from __future__ import annotations

from datetime import datetime
from typing import Protocol

from stash_api.domain.entities.subscription import SubscriptionRecord, SubscriptionUpdate


class SubscriptionPort(Protocol):
    def get_subscription_for_user(self, *, user_id: str) -> SubscriptionRecord | None:
        ...

    def merge_subscription(self, *, update: SubscriptionUpdate, now: datetime) -> None:
        ...
