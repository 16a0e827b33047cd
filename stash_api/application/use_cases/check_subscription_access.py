from __future__ import annotations

from stash_api.application.ports.subscription_port import SubscriptionPort
from stash_api.domain.entities.subscription import SubscriptionRecord, is_subscription_active
from stash_api.domain.exceptions import ForbiddenError


class CheckSubscriptionAccessUseCase:
    def __init__(self, *, subscription_port: SubscriptionPort):
        self._subscription_port = subscription_port

    def execute(self, *, user_id: str) -> SubscriptionRecord | None:
        record = self._subscription_port.get_subscription_for_user(user_id=user_id)
        if record is not None and not is_subscription_active(record.status):
            raise ForbiddenError(f"Active subscription required (current status: {record.status}).")
        return record
